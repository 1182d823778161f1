from securebox.strategies.base import NoPlanError, Strategy
from securebox.strategies.linear_algebra_plan import LinearAlgebraPlan
from securebox.strategies.linear_algebra_replanning import (
    LinearAlgebraReplanning,
)
from securebox.strategies.mask_toggle import MaskToggle
from securebox.strategies.random_toggle import RandomToggle

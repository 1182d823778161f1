from securebox.board import InvalidDimensions, SecureBox
from securebox.solver import (
    Solver,
    SolveResult,
    ToggleSet,
    Unsolvable,
    solve,
    toggle_sequence,
)

__version__ = "0.1.0"

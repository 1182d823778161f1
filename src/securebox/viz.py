import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Rectangle

from .algebra import apply_toggles


def _outline(ax, toggles, color, linewidth=2):
    for r, c in toggles:
        ax.add_patch(
            Rectangle(
                (c - 0.5, r - 0.5),
                1,
                1,
                edgecolor=color,
                facecolor="none",
                linewidth=linewidth,
            )
        )


def _label_axes(ax, rows, cols):
    ax.set_xticks(range(cols))
    ax.set_yticks(range(rows))
    ax.set_xlabel("col")
    ax.set_ylabel("row")


def show_toggle_effect(rows: int, cols: int, toggles, ax=None, cmap="viridis", pressed_color="red"):
    """
    Net flip pattern of one or more toggles, combined via XOR.
    If a toggle appears twice it cancels.
    """
    toggles = list(toggles)
    data = apply_toggles(toggles, rows, cols).reshape(rows, cols)
    if ax is None:
        _, ax = plt.subplots(figsize=(3.5, 3.5))
    ax.imshow(data, cmap=cmap, vmin=0, vmax=1)
    _outline(ax, toggles, pressed_color)
    _label_axes(ax, rows, cols)
    ax.set_title("Flipped cells")
    return ax


def show_toggle_plan(
    state,
    toggles,
    titles=("Locked", "After plan"),
    cmap="Greys",
    pressed_color="red",
):
    """
    Side-by-side grid before and after applying ``toggles``.

    Parameters
    ----------
    state : np.ndarray or SecureBox
        Boolean grid, ``True`` = locked.
    toggles : iterable[(int, int)]
        Positions to toggle; outlined on the left panel.
    """
    if hasattr(state, "snapshot"):
        state = state.snapshot()
    state = np.asarray(state, dtype=np.uint8)
    rows, cols = state.shape
    toggles = list(toggles)
    after = state ^ apply_toggles(toggles, rows, cols).reshape(rows, cols)

    _, axes = plt.subplots(1, 2, figsize=(7.2, 3.5), constrained_layout=True)
    for ax_i, data, title in zip(axes, (state, after), titles):
        ax_i.imshow(data, cmap=cmap, vmin=0, vmax=1)
        _label_axes(ax_i, rows, cols)
        ax_i.set_title(title)
    _outline(axes[0], toggles, pressed_color)
    return list(axes)

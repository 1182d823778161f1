from __future__ import annotations


def success_within_budget(count_on_history, budget_T: int) -> int:
    return int(any(c == 0 for c in count_on_history[: budget_T + 1]))


def presses_used(count_on_history) -> int:
    # number of toggles applied (length-1 of the history)
    return len(count_on_history) - 1

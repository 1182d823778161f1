from __future__ import annotations

from securebox.strategies.base import NoPlanError

from .board import SecureBox


class Simulator:
    def step(self, state: SecureBox, action) -> SecureBox:
        nxt = state.copy()
        nxt.apply_toggle(*action)
        return nxt

    def run(self, init: SecureBox, policy, T: int):
        s = init.copy()
        counts = [s.count_on()]  # start with initial
        actions = []
        for t in range(T):
            if counts[-1] == 0:
                break
            try:
                a = policy.select_action(s, t, counts)
            except NoPlanError:
                # Stop immediately: no action taken, no additional count appended.
                break
            s = self.step(s, a)
            actions.append(a)
            counts.append(s.count_on())
        return s, actions, counts

"""Helpers shared by the test modules."""
from __future__ import annotations

from teamroles.roster import Participant, Role


def make_participants(*names: str) -> list[Participant]:
    return [Participant(id=f"p{i}", name=name) for i, name in enumerate(names)]


def make_roles(*names: str) -> list[Role]:
    return [Role(id=f"r{i}", name=name) for i, name in enumerate(names)]


class _Handle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Collects scheduled callbacks; tests fire them one at a time."""

    def __init__(self):
        self.pending: list[_Handle] = []

    def call_later(self, delay, callback):
        handle = _Handle(delay, callback)
        self.pending.append(handle)
        return handle

    @property
    def live(self) -> list[_Handle]:
        return [h for h in self.pending if not h.cancelled]

    def run_next(self) -> None:
        handle = self.pending.pop(0)
        if not handle.cancelled:
            handle.callback()

    def run_all(self) -> None:
        while self.pending:
            self.run_next()

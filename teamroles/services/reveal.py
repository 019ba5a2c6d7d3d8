from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol, Sequence

from ..roster import Participant, Role
from .assignments import assign_pool, fisher_yates, label_participants

logger = logging.getLogger(__name__)

DEFAULT_TICKS = 5
DEFAULT_INTERVAL_MS = 200


class RevealState(str, Enum):
    IDLE = "idle"
    SHUFFLING = "shuffling"


@dataclass(frozen=True)
class RevealFrame:
    tick: int
    participants: tuple[Participant, ...]
    final: bool = False

    def to_dict(self) -> dict:
        return {
            "tick": self.tick,
            "final": self.final,
            "participants": [p.to_dict() for p in self.participants],
        }


def plan_reveal(
    participants: Sequence[Participant],
    roles: Sequence[Role],
    ticks: int = DEFAULT_TICKS,
    rng=None,
) -> list[RevealFrame]:
    """
    Every frame of a reveal, in order. The real assignment is drawn once;
    frames 1..ticks-1 are cosmetic reshuffles of that same pool and the last
    frame is the real assignment.
    """
    if ticks < 1:
        raise ValueError("ticks must be at least 1")

    target = assign_pool(participants, roles, rng)
    frames = [
        RevealFrame(tick=n, participants=tuple(label_participants(participants, fisher_yates(target, rng))))
        for n in range(1, ticks)
    ]
    frames.append(RevealFrame(tick=ticks, participants=tuple(label_participants(participants, target)), final=True))
    return frames


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop (the running one by default)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class RevealController:
    """
    Plays a reveal one frame per tick: IDLE -> SHUFFLING -> IDLE.

    ``start`` returns as soon as the first tick is scheduled; frames reach
    ``on_frame`` from the scheduler afterwards. A ``start`` while a reveal is
    running is ignored.
    """

    def __init__(
        self,
        on_frame: Callable[[list[Participant]], None],
        scheduler: Scheduler | None = None,
        ticks: int = DEFAULT_TICKS,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        on_complete: Callable[[list[Participant]], None] | None = None,
        rng=None,
    ):
        if ticks < 1:
            raise ValueError("ticks must be at least 1")
        self.on_frame = on_frame
        self.on_complete = on_complete
        self.scheduler = scheduler or AsyncioScheduler()
        self.ticks = ticks
        self.interval_ms = interval_ms
        self.rng = rng

        self.state = RevealState.IDLE
        self._frames: list[RevealFrame] = []
        self._next = 0
        self._handle: TimerHandle | None = None

    @property
    def is_shuffling(self) -> bool:
        return self.state is RevealState.SHUFFLING

    @property
    def tick_count(self) -> int:
        return self._next

    def start(self, participants: Sequence[Participant], roles: Sequence[Role]) -> bool:
        """
        Begin a reveal. Raises ``ValidationError`` (and stays IDLE) for empty
        inputs; returns False when a reveal is already running.
        """
        if self.is_shuffling:
            logger.debug("Reveal already in progress; start ignored")
            return False

        self._frames = plan_reveal(participants, roles, self.ticks, self.rng)
        self._next = 0
        self.state = RevealState.SHUFFLING
        self._schedule()
        return True

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self.is_shuffling:
            logger.info("Reveal cancelled after %d of %d ticks", self._next, self.ticks)
        self._reset()

    def _schedule(self) -> None:
        self._handle = self.scheduler.call_later(self.interval_ms / 1000.0, self._tick)

    def _reset(self) -> None:
        self.state = RevealState.IDLE
        self._frames = []

    def _tick(self) -> None:
        self._handle = None
        if not self.is_shuffling:
            return

        frame = self._frames[self._next]
        self._next += 1
        participants = list(frame.participants)

        if not frame.final:
            self._schedule()
            self.on_frame(participants)
            return

        self._reset()
        logger.info("Reveal finished: %d participants assigned", len(participants))
        self.on_frame(participants)
        if self.on_complete is not None:
            self.on_complete(participants)

"""Timer scheduling for debounced export.

The sync controller never sleeps; it asks a :class:`Scheduler` to call it
back later and keeps the returned handle so it can cancel.  The default
:class:`AsyncioScheduler` uses the running asyncio event loop, so timers
fire on the same single thread that delivers edits.  Tests substitute a
scheduler whose clock they drive by hand.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol, runtime_checkable


class TimerHandle(Protocol):
    """A scheduled callback that can be cancelled."""

    def cancel(self) -> None: ...


@runtime_checkable
class Scheduler(Protocol):
    """Anything that can run a callback after a delay."""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* after *delay_s* seconds; return a cancellable handle."""
        ...


class NoEventLoopError(RuntimeError):
    """Raised by :class:`AsyncioScheduler` when no loop is running."""


class AsyncioScheduler:
    """Schedule callbacks on the running asyncio event loop.

    Parameters
    ----------
    loop:
        Loop to use.  When omitted the loop running at each
        :meth:`call_later` call is used.
    """

    __slots__ = ("_loop",)

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                raise NoEventLoopError("No running event loop to schedule on") from exc
        return loop.call_later(delay_s, callback)

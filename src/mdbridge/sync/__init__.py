"""Live document ↔ Markdown synchronization.

Public API:

- :class:`MarkdownSyncController`: debounced export, immediate import.
- :func:`create_markdown_sync`: build a controller from keyword options.
- :class:`Scheduler` / :class:`AsyncioScheduler`: debounce timer source.
"""

from mdbridge.sync.controller import MarkdownSyncController, create_markdown_sync
from mdbridge.sync.scheduler import AsyncioScheduler, NoEventLoopError, Scheduler, TimerHandle

__all__ = [
    "AsyncioScheduler",
    "MarkdownSyncController",
    "NoEventLoopError",
    "Scheduler",
    "TimerHandle",
    "create_markdown_sync",
]

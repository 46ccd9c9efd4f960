"""Metrics hook protocol and no-op default.

mdbridge reports counters and timings around imports, exports and the
debounce timer.  Without a configured backend a :class:`NoopMetricsHook`
absorbs every call, so call sites never check for ``None``.

Emitted metric names:

* ``mdbridge.export_total``               -- counter (tag ``trigger``:
  ``timer``, ``flush``, ``immediate``)
* ``mdbridge.export_duration_ms``         -- timing
* ``mdbridge.import_total``               -- counter
* ``mdbridge.import_duration_ms``         -- timing
* ``mdbridge.debounce_rearm_total``       -- counter
* ``mdbridge.conversion_warnings_total``  -- counter (tag ``code``)
* ``mdbridge.export_size_chars``          -- gauge
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    *tags* are optional string key/value pairs; backends translate them to
    their own labelling scheme.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment the counter *name* by *value*."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration of *ms* milliseconds under *name*."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set the gauge *name* to *value*."""
        ...


class NoopMetricsHook:
    """Metrics backend that discards everything."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass


def resolve_metrics(hook: object | None) -> MetricsHook:
    """Return *hook* if it satisfies :class:`MetricsHook`, else a no-op."""
    if hook is not None and isinstance(hook, MetricsHook):
        return hook
    return NoopMetricsHook()

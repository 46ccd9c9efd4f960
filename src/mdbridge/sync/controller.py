"""Keep a Markdown rendition of a live document up to date.

:class:`MarkdownSyncController` binds to one
:class:`~mdbridge.engine.DocumentEngine` and moves between two states:

``idle``
    No export scheduled.  :meth:`~MarkdownSyncController.get_markdown`
    returns the text of the last export or import.
``pending``
    A change arrived and an export is armed for ``debounce_ms`` later.
    Further changes re-arm the timer, so a burst of edits exports once.

:meth:`~MarkdownSyncController.flush` exports right away from either
state.  :meth:`~MarkdownSyncController.set_markdown` goes the other way,
parsing text into the engine without touching the debounce timer, and
ignores the change events its own replace fires.

Usage::

    from mdbridge.engine import InMemoryDocumentEngine
    from mdbridge.sync import create_markdown_sync

    engine = InMemoryDocumentEngine()
    sync = create_markdown_sync(engine, debounce_ms=200, flavor="obsidian")
    sync.set_markdown("# Notes")
    ...
    text = await sync.wait_for_export()
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from mdbridge.config import MdBridgeConfig
from mdbridge.converter.diagrams import transform_diagram_code_blocks
from mdbridge.converter.doc_to_md import MarkdownSerializer
from mdbridge.converter.md_to_doc import BlockParser
from mdbridge.converter.registry import TokenRegistry
from mdbridge.engine import DocumentEngine
from mdbridge.extensions import default_registry
from mdbridge.models import ConversionWarning, SyncState
from mdbridge.observability import fields, get_logger, resolve_metrics
from mdbridge.sync.scheduler import AsyncioScheduler, NoEventLoopError, Scheduler

log = get_logger("mdbridge.sync")

ExportCallback = Callable[[str], None]


class MarkdownSyncController:
    """Debounced export and immediate import for one live document.

    Parameters
    ----------
    engine:
        The live document.
    config:
        Flavor, debounce delay, diagram rewriting and metrics.
    registry:
        Custom extensions; defaults to
        :func:`~mdbridge.extensions.default_registry`.
    scheduler:
        Timer source; defaults to :class:`AsyncioScheduler`.
    on_export:
        Called with the new text after every export and import.
    subscribe:
        Register :meth:`handle_update` with ``engine.on_change``.  Pass
        ``False`` to forward change events yourself.
    """

    def __init__(
        self,
        engine: DocumentEngine,
        config: MdBridgeConfig | None = None,
        *,
        registry: TokenRegistry | None = None,
        scheduler: Scheduler | None = None,
        on_export: ExportCallback | None = None,
        subscribe: bool = True,
    ) -> None:
        self._engine = engine
        self._config = config or MdBridgeConfig()
        registry = registry if registry is not None else default_registry()
        self._parser = BlockParser(registry, self._config)
        self._serializer = MarkdownSerializer(registry, self._config)
        self._scheduler: Scheduler = scheduler or AsyncioScheduler()
        self._on_export = on_export
        self._metrics = resolve_metrics(self._config.metrics)

        self._state = SyncState()
        self._importing = False
        self._waiters: list[asyncio.Future[str]] = []
        self.last_warnings: list[ConversionWarning] = []

        self._state.last_text = self._serialize_current()
        self._unsubscribe: Callable[[], None] | None = (
            engine.on_change(self.handle_update) if subscribe else None
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def config(self) -> MdBridgeConfig:
        return self._config

    @property
    def state(self) -> str:
        """``"idle"``, ``"pending"`` or ``"destroyed"``."""
        if self._state.destroyed:
            return "destroyed"
        return "pending" if self._state.pending else "idle"

    def is_pending(self) -> bool:
        return self._state.pending

    def get_markdown(self) -> str:
        """The text of the most recent export or import."""
        return self._state.last_text

    def handle_update(self) -> None:
        """Note that the document changed and (re)arm the export timer."""
        if self._state.destroyed or self._importing:
            return

        if self._config.debounce_ms == 0:
            self._export("immediate")
            return

        if self._state.pending:
            self._cancel_timer()
            self._metrics.increment("mdbridge.debounce_rearm_total")

        try:
            handle = self._scheduler.call_later(self._config.debounce_ms / 1000, self._on_timer)
        except NoEventLoopError:
            log.info("no event loop, exporting immediately", extra=fields(op="handle_update"))
            self._export("immediate")
            return

        self._state.timer_handle = handle
        if not self._state.pending:
            log.debug("sync state idle -> pending", extra=fields(debounce_ms=self._config.debounce_ms))
        self._state.pending = True

    def flush(self) -> str:
        """Export now, cancelling any armed timer; return the text."""
        if self._state.destroyed:
            return self._state.last_text
        self._cancel_timer()
        return self._export("flush")

    def set_markdown(self, markdown: str) -> None:
        """Replace the document with parsed *markdown*.

        Any pending export is dropped; afterwards :meth:`get_markdown`
        returns *markdown* verbatim and the controller is idle.
        """
        if self._state.destroyed:
            return
        self._cancel_timer()

        started = time.monotonic()
        result = self._parser.parse(markdown)
        doc = result.doc
        if self._config.transform_diagrams_on_import:
            doc = transform_diagram_code_blocks(doc, result.warnings)
        self.last_warnings = list(result.warnings)

        self._importing = True
        try:
            self._engine.replace_tree(doc)
        finally:
            self._importing = False

        self._state.last_text = markdown
        self._state.pending = False

        elapsed_ms = (time.monotonic() - started) * 1000
        self._metrics.increment("mdbridge.import_total")
        self._metrics.timing("mdbridge.import_duration_ms", elapsed_ms)
        log.debug(
            "markdown imported",
            extra=fields(chars=len(markdown), warnings=len(result.warnings), ms=round(elapsed_ms, 2)),
        )
        self._settle(markdown)

    async def wait_for_export(self) -> str:
        """Wait until no export is pending and return the current text."""
        if self._state.destroyed or not self._state.pending:
            return self._state.last_text
        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        return await future

    def destroy(self) -> None:
        """Cancel the timer, unsubscribe and release waiters.

        The cached text stays readable; everything else becomes a no-op.
        """
        if self._state.destroyed:
            return
        self._cancel_timer()
        self._state.destroyed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for future in self._waiters:
            if not future.done():
                future.cancel()
        self._waiters.clear()
        log.debug("sync controller destroyed")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _on_timer(self) -> None:
        self._state.timer_handle = None
        if self._state.destroyed or not self._state.pending:
            return
        self._export("timer")

    def _cancel_timer(self) -> None:
        handle = self._state.timer_handle
        if handle is not None:
            handle.cancel()
        self._state.timer_handle = None
        self._state.pending = False

    def _serialize_current(self) -> str:
        text = self._serializer.serialize(self._engine.get_tree())
        self.last_warnings = list(self._serializer.warnings)
        return text

    def _export(self, trigger: str) -> str:
        started = time.monotonic()
        text = self._serialize_current()
        self._state.last_text = text
        self._state.pending = False
        self._state.timer_handle = None

        elapsed_ms = (time.monotonic() - started) * 1000
        self._metrics.increment("mdbridge.export_total", tags={"trigger": trigger})
        self._metrics.timing("mdbridge.export_duration_ms", elapsed_ms)
        self._metrics.gauge("mdbridge.export_size_chars", len(text))
        log.debug(
            "markdown exported",
            extra=fields(trigger=trigger, chars=len(text), ms=round(elapsed_ms, 2)),
        )
        self._settle(text)
        return text

    def _settle(self, text: str) -> None:
        waiters, self._waiters = self._waiters, []
        for future in waiters:
            if not future.done():
                future.set_result(text)
        if self._on_export is not None:
            try:
                self._on_export(text)
            except Exception as exc:
                log.error("on_export callback raised", extra=fields(error=str(exc)))


def create_markdown_sync(
    engine: DocumentEngine,
    *,
    debounce_ms: int | None = None,
    flavor: str | None = None,
    transform_diagrams: bool | None = None,
    config: MdBridgeConfig | None = None,
    registry: TokenRegistry | None = None,
    scheduler: Scheduler | None = None,
    on_export: ExportCallback | None = None,
    subscribe: bool = True,
) -> MarkdownSyncController:
    """Build a :class:`MarkdownSyncController` from keyword options.

    Explicit keyword options override the matching fields of *config*.

    Raises
    ------
    ValueError
        If *debounce_ms* is negative.
    """
    base = config or MdBridgeConfig()
    resolved = MdBridgeConfig(
        flavor=base.flavor if flavor is None else flavor,
        debounce_ms=base.debounce_ms if debounce_ms is None else debounce_ms,
        transform_diagrams_on_import=(
            base.transform_diagrams_on_import if transform_diagrams is None else transform_diagrams
        ),
        metrics=base.metrics,
        debug_dump_ast=base.debug_dump_ast,
    )
    return MarkdownSyncController(
        engine,
        resolved,
        registry=registry,
        scheduler=scheduler,
        on_export=on_export,
        subscribe=subscribe,
    )

"""Configuration for mdbridge.

:class:`MdBridgeConfig` is a plain dataclass that captures every tuneable
knob of the interchange layer.  It is accepted by the parser, the
serializer and the sync controller; each reads only the fields it needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mdbridge.flavors import DEFAULT_FLAVOR, FlavorConfig, normalize_flavor, resolve_flavor

DEFAULT_DEBOUNCE_MS: int = 300
"""Quiet period (milliseconds) before a live edit is exported."""


@dataclass
class MdBridgeConfig:
    """Complete configuration for Markdown import, export and sync.

    Every parameter has a default, so ``MdBridgeConfig()`` is a working
    configuration.

    Parameters
    ----------
    flavor:
        Output flavor: ``"commonmark"``, ``"gfm"``, ``"obsidian"`` or
        ``"docusaurus"``.  Any other value behaves as ``"gfm"``.  Input is
        always parsed tolerantly regardless of this setting.
    debounce_ms:
        Delay between the last document change and the export it
        triggers.  ``0`` exports synchronously on every change.
    transform_diagrams_on_import:
        Rewrite ``mermaid``/``dot``/``graphviz`` fenced code blocks into
        ``diagram`` nodes after parsing imported Markdown.
    metrics:
        Optional :class:`~mdbridge.observability.MetricsHook` backend.
    debug_dump_ast:
        Write the token stream of every parse to *stderr*.
    """

    flavor: str = DEFAULT_FLAVOR

    debounce_ms: int = DEFAULT_DEBOUNCE_MS

    transform_diagrams_on_import: bool = True

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_ast: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.debounce_ms < 0:
            raise ValueError(f"debounce_ms must be >= 0, got {self.debounce_ms}")
        # Unrecognized flavors are not an error; pin them to the default.
        self.flavor = normalize_flavor(self.flavor)

    @property
    def flavor_config(self) -> FlavorConfig:
        """The resolved output configuration for :attr:`flavor`."""
        return resolve_flavor(self.flavor)

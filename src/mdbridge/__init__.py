"""mdbridge: Markdown interchange for structured rich-text documents.

Public re-exports
-----------------

* **Conversion:** :func:`parse_markdown`, :func:`serialize_markdown`,
  :class:`BlockParser`, :class:`MarkdownSerializer`
* **Extensions:** :class:`MarkdownExtension`, :class:`TokenRegistry`,
  :func:`default_registry`
* **Flavors:** :func:`resolve_flavor`, :class:`FlavorConfig`
* **Sync:** :class:`MarkdownSyncController`, :func:`create_markdown_sync`
* **Configuration, errors, models**

Usage::

    from mdbridge import parse_markdown, serialize_markdown

    result = parse_markdown(":::info\\nHello\\n:::\\n")
    serialize_markdown(result.doc, flavor="gfm")   # '> [!NOTE]\\n> Hello'
"""

from __future__ import annotations

# ── Conversion ──────────────────────────────────────────────────────────
from mdbridge.api import parse_markdown, serialize_markdown

# ── Configuration ───────────────────────────────────────────────────────
from mdbridge.config import DEFAULT_DEBOUNCE_MS, MdBridgeConfig
from mdbridge.converter import (
    BlockParser,
    MarkdownExtension,
    MarkdownSerializer,
    ParseHelpers,
    SerializeHelpers,
    TokenRegistry,
    transform_diagram_code_blocks,
)

# ── Document engine ─────────────────────────────────────────────────────
from mdbridge.engine import DocumentEngine, InMemoryDocumentEngine

# ── Errors ──────────────────────────────────────────────────────────────
from mdbridge.errors import (
    ErrorCode,
    MdBridgeConversionError,
    MdBridgeError,
    MdBridgeExtensionError,
)
from mdbridge.extensions import default_extensions, default_registry

# ── Flavors ─────────────────────────────────────────────────────────────
from mdbridge.flavors import (
    DEFAULT_FLAVOR,
    CalloutFormat,
    FlavorConfig,
    MarkdownFlavor,
    resolve_flavor,
)

# ── Models ──────────────────────────────────────────────────────────────
from mdbridge.models import ConversionWarning, DocumentNode, Mark, ParseResult, Token

# ── Sync ────────────────────────────────────────────────────────────────
from mdbridge.sync import AsyncioScheduler, MarkdownSyncController, Scheduler, create_markdown_sync

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Conversion
    "parse_markdown",
    "serialize_markdown",
    "BlockParser",
    "MarkdownSerializer",
    "transform_diagram_code_blocks",
    # Extensions
    "MarkdownExtension",
    "TokenRegistry",
    "ParseHelpers",
    "SerializeHelpers",
    "default_extensions",
    "default_registry",
    # Flavors
    "DEFAULT_FLAVOR",
    "MarkdownFlavor",
    "CalloutFormat",
    "FlavorConfig",
    "resolve_flavor",
    # Configuration
    "MdBridgeConfig",
    "DEFAULT_DEBOUNCE_MS",
    # Errors
    "MdBridgeError",
    "MdBridgeExtensionError",
    "MdBridgeConversionError",
    "ErrorCode",
    # Models
    "ConversionWarning",
    "ParseResult",
    "DocumentNode",
    "Mark",
    "Token",
    # Document engine
    "DocumentEngine",
    "InMemoryDocumentEngine",
    # Sync
    "MarkdownSyncController",
    "create_markdown_sync",
    "Scheduler",
    "AsyncioScheduler",
]

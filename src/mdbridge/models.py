"""Data shapes shared across mdbridge.

Document trees and tokens are plain ``dict`` objects so that they can be
handed to (and received from) any host editor as JSON.  The ``TypedDict``
classes below document their shape; nothing enforces it at runtime.

The dataclasses hold results and the sync controller's private state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypedDict

# ---------------------------------------------------------------------------
# Document tree
# ---------------------------------------------------------------------------

class Mark(TypedDict, total=False):
    """An inline formatting mark attached to a leaf node."""

    type: str
    attrs: dict[str, Any]


class DocumentNode(TypedDict, total=False):
    """A node of the structured document tree.

    Container nodes carry ``content``; ``text`` leaves carry ``text`` and,
    optionally, ``marks``.  ``attrs`` keys are specific to each node type.
    """

    type: str
    attrs: dict[str, Any]
    marks: list[Mark]
    content: list[DocumentNode]
    text: str


class Token(TypedDict, total=False):
    """An intermediate match produced by a tokenizer.

    Tokenizers add their own captured fields next to ``type`` and ``raw``.
    ``tokens`` holds nested block tokens for container syntax.
    """

    type: str
    raw: str
    text: str
    tokens: list[Token]


# ---------------------------------------------------------------------------
# Conversion results
# ---------------------------------------------------------------------------

@dataclass
class ConversionWarning:
    """A non-fatal issue encountered while parsing or serializing.

    Attributes
    ----------
    code:
        A machine-readable warning code (an :class:`~mdbridge.errors.ErrorCode`
        value such as ``"UNKNOWN_NODE"``).
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class ParseResult:
    """Output of a Markdown parse.

    Attributes
    ----------
    doc:
        The ``doc`` root node.
    warnings:
        Degradations that happened along the way (an extension that raised,
        a diagram block left as code, ...).
    """

    doc: dict
    warnings: list[ConversionWarning] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Sync state
# ---------------------------------------------------------------------------

@dataclass
class SyncState:
    """Mutable state owned by exactly one sync controller.

    Attributes
    ----------
    pending:
        True while a debounced export is armed.
    last_text:
        The most recently exported (or imported) Markdown.
    timer_handle:
        Handle of the armed debounce timer, ``None`` when idle.
    destroyed:
        Set once the controller is torn down; no further exports happen.
    """

    pending: bool = False
    last_text: str = ""
    timer_handle: Any | None = None
    destroyed: bool = False

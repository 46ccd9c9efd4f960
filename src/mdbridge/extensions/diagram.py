"""Diagram nodes (Mermaid and Graphviz).

``diagram`` nodes have no source syntax of their own: they are created by
:func:`~mdbridge.converter.diagrams.transform_diagram_code_blocks` from
fenced code.  This extension only prints them back as fences, ``mermaid``
for Mermaid and ``dot`` for Graphviz.
"""

from __future__ import annotations

from mdbridge.converter.doc_to_md import fenced_code
from mdbridge.converter.registry import MarkdownExtension, SerializeHelpers

# Diagram type -> fence language.
FENCE_LANGUAGES: dict[str, str] = {
    "mermaid": "mermaid",
    "graphviz": "dot",
}


def serialize_diagram(node: dict, helpers: SerializeHelpers) -> str:
    attrs = node.get("attrs") or {}
    kind = str(attrs.get("type") or "mermaid")
    return fenced_code(str(attrs.get("code") or ""), FENCE_LANGUAGES.get(kind, kind))


diagram_extension = MarkdownExtension(name="diagram", serialize=serialize_diagram)

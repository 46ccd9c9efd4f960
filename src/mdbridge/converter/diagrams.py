"""Diagram rewrite pass applied to imported documents.

Fenced code blocks in a diagram language are parsed as ordinary
``codeBlock`` nodes.  :func:`transform_diagram_code_blocks` runs after the
parse and rewrites the ones it recognizes into ``diagram`` nodes::

    ```mermaid                 {"type": "diagram",
    graph TD; A-->B      ->     "attrs": {"code": "graph TD; A-->B",
    ```                                   "type": "mermaid"}}

A block it cannot confidently recognize (unknown language, no code) is
left untouched.
"""

from __future__ import annotations

from mdbridge.errors import ErrorCode
from mdbridge.models import ConversionWarning
from mdbridge.observability import fields, get_logger

log = get_logger("mdbridge.diagrams")

# Fence language (lower-cased) -> diagram type.
DIAGRAM_LANGUAGES: dict[str, str] = {
    "mermaid": "mermaid",
    "dot": "graphviz",
    "graphviz": "graphviz",
}


def diagram_type(language: object) -> str | None:
    """Diagram type for a fence language, or ``None``.

    Only the first word of the language counts, case-insensitively.

    >>> diagram_type("Mermaid")
    'mermaid'
    >>> diagram_type("dot {engine=neato}")
    'graphviz'
    >>> diagram_type("python") is None
    True
    """
    if not isinstance(language, str):
        return None
    words = language.strip().split()
    if not words:
        return None
    return DIAGRAM_LANGUAGES.get(words[0].lower())


def transform_diagram_code_blocks(
    tree: dict,
    warnings: list[ConversionWarning] | None = None,
) -> dict:
    """Return a copy of *tree* with diagram code blocks rewritten.

    Parameters
    ----------
    tree:
        Any document node, usually the ``doc`` root.
    warnings:
        Receives a ``DIAGRAM_TRANSFORM_SKIPPED`` warning for each diagram
        block left as code.

    Returns
    -------
    dict
        A new tree; *tree* itself is not modified.
    """
    sink = warnings if warnings is not None else []
    return _transform(tree, sink)


def _transform(node: dict, warnings: list[ConversionWarning]) -> dict:
    if node.get("type") == "codeBlock":
        return _to_diagram(node, warnings)
    content = node.get("content")
    if not isinstance(content, list):
        return node
    return {
        **node,
        "content": [_transform(c, warnings) if isinstance(c, dict) else c for c in content],
    }


def _to_diagram(node: dict, warnings: list[ConversionWarning]) -> dict:
    language = (node.get("attrs") or {}).get("language")
    kind = diagram_type(language)
    if kind is None:
        return node

    code = "".join(
        c.get("text", "") for c in node.get("content") or [] if isinstance(c, dict)
    )
    if not code.strip():
        warnings.append(ConversionWarning(
            code=ErrorCode.DIAGRAM_TRANSFORM_SKIPPED,
            message=f"Empty {language} block kept as code",
            context={"language": language},
        ))
        log.debug("diagram transform skipped", extra=fields(language=language, reason="empty"))
        return node

    return {"type": "diagram", "attrs": {"code": code, "type": kind}}

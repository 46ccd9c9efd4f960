"""Convert normalized built-in AST tokens to document nodes.

Handles every standard block type the mistune tokenizer emits:

- heading -> ``heading{level}`` with inline content
- paragraph (and tight-list ``block_text``) -> ``paragraph``
- block_quote -> ``blockquote``
- list -> ``bulletList`` / ``orderedList{start}`` / ``taskList``
- list_item / task_list_item -> ``listItem`` / ``taskItem{checked}``
- block_code -> ``codeBlock{language}``
- thematic_break -> ``horizontalRule``
- table -> delegate to :mod:`mdbridge.converter.tables`
- html_block -> inert ``paragraph`` holding the raw HTML as text

Nested tokens are reduced through the caller's context, so custom inline
tokens found inside built-in blocks reach their registered parsers.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from mdbridge.converter.tables import build_table


class BuildContext(Protocol):
    """Reduction callbacks supplied by the block parser."""

    def reduce_blocks(self, tokens: list[dict]) -> list[dict]: ...

    def reduce_inline(self, tokens: list[dict]) -> list[dict]: ...


def _with_content(node: dict, content: list[dict]) -> dict:
    if content:
        node["content"] = content
    return node


def _code_language(info: str | None) -> str | None:
    """First word of a fence info string, or None."""
    if not info:
        return None
    words = info.strip().split()
    return words[0] if words else None


# ---------------------------------------------------------------------------
# Per-type builders
# ---------------------------------------------------------------------------

def _build_heading(token: dict, ctx: BuildContext) -> list[dict]:
    level = token.get("attrs", {}).get("level", 1)
    node = {"type": "heading", "attrs": {"level": level}}
    return [_with_content(node, ctx.reduce_inline(token.get("children", [])))]


def _build_paragraph(token: dict, ctx: BuildContext) -> list[dict]:
    return [_with_content({"type": "paragraph"}, ctx.reduce_inline(token.get("children", [])))]


def _build_blockquote(token: dict, ctx: BuildContext) -> list[dict]:
    return [_with_content({"type": "blockquote"}, ctx.reduce_blocks(token.get("children", [])))]


def _build_list(token: dict, ctx: BuildContext) -> list[dict]:
    attrs = token.get("attrs", {})
    items = token.get("children", [])

    if attrs.get("ordered"):
        node: dict = {"type": "orderedList", "attrs": {"start": attrs.get("start", 1)}}
        item_type = "listItem"
    elif any(item.get("type") == "task_list_item" for item in items):
        node = {"type": "taskList"}
        item_type = "taskItem"
    else:
        node = {"type": "bulletList"}
        item_type = "listItem"

    content: list[dict] = []
    for item in items:
        if item.get("type") not in ("list_item", "task_list_item"):
            continue
        child: dict = {"type": item_type}
        if item_type == "taskItem":
            child["attrs"] = {"checked": bool(item.get("attrs", {}).get("checked", False))}
        content.append(_with_content(child, ctx.reduce_blocks(item.get("children", []))))
    return [_with_content(node, content)]


def _build_code(token: dict, ctx: BuildContext) -> list[dict]:
    language = _code_language(token.get("attrs", {}).get("info"))
    node: dict = {"type": "codeBlock", "attrs": {"language": language}}
    code = token.get("raw", "")
    if code:
        node["content"] = [{"type": "text", "text": code}]
    return [node]


def _build_rule(token: dict, ctx: BuildContext) -> list[dict]:
    return [{"type": "horizontalRule"}]


def _build_table(token: dict, ctx: BuildContext) -> list[dict]:
    return [build_table(token, ctx.reduce_inline)]


def _build_html(token: dict, ctx: BuildContext) -> list[dict]:
    raw = token.get("raw", "").strip()
    if not raw:
        return []
    return [{"type": "paragraph", "content": [{"type": "text", "text": raw}]}]


_BUILDERS: dict[str, Callable[[dict, BuildContext], list[dict]]] = {
    "heading": _build_heading,
    "paragraph": _build_paragraph,
    "block_quote": _build_blockquote,
    "list": _build_list,
    "block_code": _build_code,
    "thematic_break": _build_rule,
    "table": _build_table,
    "html_block": _build_html,
}

BUILTIN_BLOCK_TYPES: frozenset[str] = frozenset(_BUILDERS)


def build_block(token: dict, ctx: BuildContext) -> list[dict] | None:
    """Reduce one built-in block token; ``None`` if the type is not built in."""
    builder = _BUILDERS.get(token.get("type", ""))
    if builder is None:
        return None
    return builder(token, ctx)

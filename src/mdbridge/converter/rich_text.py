"""Build inline document nodes from normalized inline AST tokens.

Inline content is a flat list of leaves; formatting lives in each leaf's
``marks`` list rather than in nested wrapper nodes::

    **bold _both_**  ->  [
        {"type": "text", "text": "bold ", "marks": [{"type": "bold"}]},
        {"type": "text", "text": "both",
         "marks": [{"type": "bold"}, {"type": "italic"}]},
    ]

Marks are kept in canonical order (:data:`MARK_ORDER`) so that equal
formatting always produces equal mark lists, and adjacent text leaves with
equal marks are merged.  Custom inline tokens are reduced through the
caller-supplied ``reduce_custom`` hook and inherit the surrounding marks.
"""

from __future__ import annotations

from collections.abc import Callable

# Outermost first.  Serialization opens marks in this order.
MARK_ORDER: tuple[str, ...] = ("link", "wikiLink", "bold", "italic", "strike", "code")

_TOKEN_MARKS: dict[str, str] = {
    "strong": "bold",
    "emphasis": "italic",
    "strikethrough": "strike",
}

ReduceCustom = Callable[[dict], "list[dict] | None"]


def mark_rank(mark: dict) -> int:
    try:
        return MARK_ORDER.index(mark.get("type", ""))
    except ValueError:
        return len(MARK_ORDER)


def add_marks(base: list[dict], *extra: dict) -> list[dict]:
    """Return *base* plus *extra* marks, de-duplicated and canonically ordered."""
    merged = list(base)
    for mark in extra:
        if all(m.get("type") != mark.get("type") for m in merged):
            merged.append(mark)
    return sorted(merged, key=mark_rank)


def _text_node(text: str, marks: list[dict]) -> dict:
    node: dict = {"type": "text", "text": text}
    if marks:
        node["marks"] = [dict(m) for m in marks]
    return node


def build_inline(
    children: list[dict],
    reduce_custom: ReduceCustom,
    *,
    marks: list[dict] | None = None,
) -> list[dict]:
    """Convert inline AST tokens to inline document nodes.

    Handles: text, strong, emphasis, strikethrough, codespan, link, image,
    softbreak, linebreak, html_inline, and any token ``reduce_custom``
    recognizes.

    Parameters
    ----------
    children:
        Normalized inline tokens.
    reduce_custom:
        Called for token types this module does not know; returns nodes or
        ``None`` to drop the token.
    marks:
        Marks inherited from enclosing inline tokens.

    Returns
    -------
    list[dict]
        Inline nodes with adjacent same-mark text merged.
    """
    return merge_text_nodes(_build(children, reduce_custom, marks or []))


def _build(children: list[dict], reduce_custom: ReduceCustom, marks: list[dict]) -> list[dict]:
    nodes: list[dict] = []

    for token in children:
        token_type = token.get("type", "")

        if token_type == "text":
            raw = token.get("raw", "")
            if raw:
                nodes.append(_text_node(raw, marks))

        elif token_type in _TOKEN_MARKS:
            child_marks = add_marks(marks, {"type": _TOKEN_MARKS[token_type]})
            nodes.extend(_build(token.get("children", []), reduce_custom, child_marks))

        elif token_type == "codespan":
            raw = token.get("raw", "")
            if raw:
                nodes.append(_text_node(raw, add_marks(marks, {"type": "code"})))

        elif token_type == "link":
            attrs = token.get("attrs", {})
            link_attrs: dict = {"href": attrs.get("url", "")}
            if attrs.get("title"):
                link_attrs["title"] = attrs["title"]
            child_marks = add_marks(marks, {"type": "link", "attrs": link_attrs})
            nodes.extend(_build(token.get("children", []), reduce_custom, child_marks))

        elif token_type == "image":
            attrs = token.get("attrs", {})
            image_attrs: dict = {
                "src": attrs.get("url", ""),
                "alt": extract_text(token.get("children", [])) or None,
                "title": attrs.get("title") or None,
            }
            node: dict = {"type": "image", "attrs": image_attrs}
            if marks:
                node["marks"] = [dict(m) for m in marks]
            nodes.append(node)

        elif token_type == "softbreak":
            nodes.append(_text_node("\n", marks))

        elif token_type == "linebreak":
            nodes.append({"type": "hardBreak"})

        elif token_type == "html_inline":
            raw = token.get("raw", "")
            if raw:
                nodes.append(_text_node(raw, marks))

        else:
            custom = reduce_custom(token)
            for node in custom or []:
                if marks:
                    node["marks"] = add_marks(marks, *node.get("marks", []))
                nodes.append(node)

    return nodes


def merge_text_nodes(nodes: list[dict]) -> list[dict]:
    """Merge adjacent ``text`` nodes that carry identical marks."""
    merged: list[dict] = []
    for node in nodes:
        if (
            merged
            and node.get("type") == "text"
            and merged[-1].get("type") == "text"
            and merged[-1].get("marks", []) == node.get("marks", [])
        ):
            merged[-1] = {**merged[-1], "text": merged[-1]["text"] + node["text"]}
            continue
        merged.append(node)
    return merged


def extract_text(children: list[dict]) -> str:
    """Concatenate the plain text of inline tokens (for alt text)."""
    parts: list[str] = []
    for token in children:
        if "raw" in token and token.get("type") in ("text", "codespan", "html_inline"):
            parts.append(token["raw"])
        elif token.get("type") == "softbreak":
            parts.append(" ")
        elif token.get("children"):
            parts.append(extract_text(token["children"]))
    return "".join(parts)

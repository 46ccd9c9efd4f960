"""Inline rendering: inline document nodes to Markdown.

Converts a list of inline nodes (text leaves with marks, hard breaks,
images and custom atoms) into Markdown.  Marks are opened outermost-first
in :data:`~mdbridge.converter.rich_text.MARK_ORDER` and a mark shared by
consecutive leaves is written once around the whole run, so
``[bold "a", bold+italic "b"]`` becomes ``**a*b***``.

Escaping of characters that collide with Markdown syntax happens here,
for every text leaf, whatever block holds it.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from mdbridge.converter.rich_text import mark_rank

# Characters escaped anywhere in a text leaf.
ESCAPE_CHARS = r"\`*_[]<~|$"

_ESCAPE_RE = re.compile(r"([\\`*_\[\]<~|$])")

# "@" that could start a mention: at the start or after a non-word char.
_MENTION_TRIGGER_RE = re.compile(r"(?<!\w)@")

# "&" that would be read as an entity reference.
_ENTITY_RE = re.compile(r"&(?=#?\w+;)")

# A "!" ending rendered text, unless already escaped.
_TRAILING_BANG_RE = re.compile(r"(?<!\\)((?:\\\\)*)!\Z")

# Block syntax that is only special at the start of a line.
_LINE_START_RE = re.compile(r"(^|\n)([ \t]*)(#|>|-|\+|=|:(?=::)|(\d+)(?=[.)](?:[ \t]|$)))", re.MULTILINE)

_DELIMITED_MARKS: dict[str, str] = {
    "bold": "**",
    "italic": "*",
    "strike": "~~",
}

RenderAtom = Callable[[dict], str]
WrapMark = Callable[[dict, str], "str | None"]


def markdown_escape(text: str, context: str = "inline") -> str:
    """Escape special Markdown characters.

    Parameters
    ----------
    text:
        The raw text to escape.
    context:
        One of ``"inline"``, ``"code"``, or ``"url"``.

        * ``"inline"`` -- escape everything that could start Markdown
          syntax, including block markers at the start of a line.
        * ``"code"`` -- no escaping (content is inside a code span/block).
        * ``"url"`` -- percent-encode characters that would end a link
          destination early.

    Returns
    -------
    str
        The escaped text.
    """
    if context == "code":
        return text
    if context == "url":
        return text.replace(" ", "%20").replace("(", "%28").replace(")", "%29")

    escaped = _ESCAPE_RE.sub(r"\\\1", text)
    escaped = _MENTION_TRIGGER_RE.sub(r"\\@", escaped)
    escaped = _ENTITY_RE.sub(r"\\&", escaped)
    return _LINE_START_RE.sub(_escape_line_start, escaped)


def _escape_line_start(m: re.Match) -> str:
    lead, indent, marker = m.group(1), m.group(2), m.group(3)
    if m.group(4) is not None:
        # Ordered-list marker: escape the delimiter after the digits
        return f"{lead}{indent}{marker}\\"
    return f"{lead}{indent}\\{marker}"


def code_span(text: str) -> str:
    """Wrap *text* in a backtick fence longer than any run inside it."""
    runs = [len(r) for r in re.findall(r"`+", text)]
    fence = "`" * (max(runs, default=0) + 1)
    pad = ""
    if text.startswith("`") or text.endswith("`"):
        pad = " "
    elif text.startswith(" ") and text.endswith(" ") and text.strip():
        pad = " "
    return f"{fence}{pad}{text}{pad}{fence}"


def _wrap_delimited(delimiter: str, content: str) -> str:
    # Emphasis delimiters must hug non-space text to parse back
    core = content.strip(" \t\n")
    if not core:
        return content
    lead = content[: len(content) - len(content.lstrip(" \t\n"))]
    trail = content[len(content.rstrip(" \t\n")):]
    return f"{lead}{delimiter}{core}{delimiter}{trail}"


def wrap_standard_mark(mark: dict, content: str) -> str | None:
    """Wrap *content* in a built-in mark; ``None`` for non built-in marks."""
    mark_type = mark.get("type", "")

    if mark_type in _DELIMITED_MARKS:
        return _wrap_delimited(_DELIMITED_MARKS[mark_type], content)

    if mark_type == "code":
        return code_span(content)

    if mark_type == "link":
        attrs = mark.get("attrs") or {}
        href = markdown_escape(str(attrs.get("href") or ""), "url")
        title = attrs.get("title")
        if title:
            escaped_title = str(title).replace('"', '\\"')
            return f'[{content}]({href} "{escaped_title}")'
        return f"[{content}]({href})"

    return None


def render_image(node: dict) -> str:
    attrs = node.get("attrs") or {}
    alt = markdown_escape(str(attrs.get("alt") or ""))
    src = markdown_escape(str(attrs.get("src") or ""), "url")
    title = attrs.get("title")
    if title:
        escaped_title = str(title).replace('"', '\\"')
        return f'![{alt}]({src} "{escaped_title}")'
    return f"![{alt}]({src})"


def render_inline(nodes: list[dict], render_atom: RenderAtom, wrap_mark: WrapMark) -> str:
    """Render inline nodes to Markdown.

    Parameters
    ----------
    nodes:
        Inline document nodes.
    render_atom:
        Renders any leaf that is not ``text``, ``hardBreak`` or ``image``.
    wrap_mark:
        Wraps rendered content in a mark; returning ``None`` leaves the
        content unwrapped.

    Returns
    -------
    str
        The rendered Markdown string.
    """
    # Each frame is (mark, rendered parts); frame 0 is the unmarked root.
    stack: list[tuple[dict | None, list[str]]] = [(None, [])]

    def close_top() -> None:
        mark, parts = stack.pop()
        content = "".join(parts)
        wrapped = wrap_mark(mark, content) if mark is not None else content
        parent = stack[-1][0]
        in_code = parent is not None and parent.get("type") == "code"
        _append(stack[-1][1], content if wrapped is None else wrapped, in_code)

    for node in nodes:
        marks = sorted(node.get("marks") or [], key=mark_rank)
        active = [frame[0] for frame in stack[1:]]

        keep = 0
        while keep < len(active) and keep < len(marks) and active[keep] == marks[keep]:
            keep += 1
        while len(stack) - 1 > keep:
            close_top()
        for mark in marks[keep:]:
            stack.append((mark, []))

        in_code = any(m.get("type") == "code" for m in marks)
        _append(stack[-1][1], _render_leaf(node, in_code, render_atom), in_code)

    while len(stack) > 1:
        close_top()
    return "".join(stack[0][1])


def _append(parts: list[str], chunk: str, in_code: bool) -> None:
    # "!" directly before "[" would turn a following link into an image
    if parts and not in_code and chunk.startswith("["):
        parts[-1] = _TRAILING_BANG_RE.sub(r"\1\\!", parts[-1])
    parts.append(chunk)


def _render_leaf(node: dict, in_code: bool, render_atom: RenderAtom) -> str:
    node_type = node.get("type", "")
    if node_type == "text":
        text = node.get("text", "")
        return text if in_code else markdown_escape(text)
    if node_type == "hardBreak":
        return "\\\n"
    if node_type == "image":
        return render_image(node)
    return render_atom(node)

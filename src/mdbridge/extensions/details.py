"""Collapsible ``<details>`` sections.

::

    <details open>
    <summary>More</summary>

    Any *block* Markdown.

    </details>

parses to::

    {"type": "details", "attrs": {"open": True}, "content": [
        {"type": "detailsSummary", "content": [<inline>]},
        {"type": "detailsContent", "content": [<blocks>]}]}

Sections nest; the closing tag is matched by depth, ignoring tags inside
fenced code.  ``detailsSummary`` and ``detailsContent`` are
serializer-only: they never appear in source text on their own.
"""

from __future__ import annotations

import re

from mdbridge.converter.md_to_doc import inside_open_fence
from mdbridge.converter.registry import MarkdownExtension, ParseHelpers, SerializeHelpers

_OPEN_RE = re.compile(r"<details(\s+open(?:=\"[^\"]*\"|='[^']*')?)?\s*>[ \t]*(?:\n|$)", re.IGNORECASE)
_SUMMARY_RE = re.compile(r"[ \t]*<summary>(.*?)</summary>[ \t]*(?:\n|$)", re.IGNORECASE)
_TAG_RE = re.compile(r"<details\b|</details>", re.IGNORECASE)
_CLOSE_TAIL_RE = re.compile(r"[ \t]*(?:\n|$)")
_START_RE = re.compile(r"^<details\b", re.MULTILINE | re.IGNORECASE)


def start_details(src: str) -> int:
    m = _START_RE.search(src)
    return m.start() if m else -1


def tokenize_details(src: str) -> dict | None:
    m = _OPEN_RE.match(src)
    if not m:
        return None
    pos = m.end()

    summary = ""
    s = _SUMMARY_RE.match(src, pos)
    if s:
        summary = s.group(1).strip()
        pos = s.end()

    depth = 1
    for tag in _TAG_RE.finditer(src, pos):
        if inside_open_fence(src[pos:tag.start()]):
            continue
        if tag.group(0).lower().startswith("</"):
            depth -= 1
        else:
            depth += 1
        if depth == 0:
            tail = _CLOSE_TAIL_RE.match(src, tag.end())
            end = tail.end() if tail else tag.end()
            return {
                "type": "details",
                "raw": src[:end],
                "open": m.group(1) is not None,
                "summary": summary,
                "text": src[pos:tag.start()].strip("\n"),
            }
    return None


def parse_details(token: dict, helpers: ParseHelpers) -> dict:
    summary: dict = {"type": "detailsSummary"}
    inline = helpers.parse_inline(token.get("summary", ""))
    if inline:
        summary["content"] = inline

    body: dict = {"type": "detailsContent"}
    blocks = helpers.parse_children(token.get("tokens", []))
    if blocks:
        body["content"] = blocks

    return {
        "type": "details",
        "attrs": {"open": bool(token.get("open"))},
        "content": [summary, body],
    }


def serialize_details(node: dict, helpers: SerializeHelpers) -> str:
    open_attr = " open" if (node.get("attrs") or {}).get("open") is True else ""
    children = [c for c in node.get("content") or [] if isinstance(c, dict)]
    summaries = [c for c in children if c.get("type") == "detailsSummary"]
    rest = [c for c in children if c.get("type") != "detailsSummary"]

    lines = [f"<details{open_attr}>"]
    lines.append(helpers.render_children(summaries[:1], "") if summaries else "<summary></summary>")
    body = helpers.render_children(rest, "\n\n")
    if body:
        lines.append(f"\n{body}\n")
    lines.append("</details>")
    return "\n".join(lines)


def serialize_summary(node: dict, helpers: SerializeHelpers) -> str:
    text = helpers.render_inline(node.get("content") or []).replace("\n", " ")
    return f"<summary>{text}</summary>"


def serialize_content(node: dict, helpers: SerializeHelpers) -> str:
    return helpers.render_children(node.get("content") or [], "\n\n")


details_extension = MarkdownExtension(
    name="details",
    level="block",
    start=start_details,
    tokenize=tokenize_details,
    parse=parse_details,
    serialize=serialize_details,
    nested=True,
)

details_summary_extension = MarkdownExtension(name="detailsSummary", serialize=serialize_summary)

details_content_extension = MarkdownExtension(name="detailsContent", serialize=serialize_content)

"""Wiki links: ``[[Page]]`` and ``[[Page|shown text]]``.

A wiki link is not a node of its own; it parses to a text leaf carrying a
``wikiLink`` mark::

    [[Roadmap|the plan]]  ->  {"type": "text", "text": "the plan",
                               "marks": [{"type": "wikiLink",
                                          "attrs": {"pageName": "Roadmap"}}]}

On export flavors with ``wiki_link_serialize`` keep the ``[[...]]`` form;
every other flavor writes an ordinary link to ``#Page``.
"""

from __future__ import annotations

import re

from mistune.helpers import unescape_char

from mdbridge.converter.inline_renderer import markdown_escape
from mdbridge.converter.registry import MarkdownExtension, ParseHelpers, SerializeHelpers

# The display part is written escaped, so it may hold ``\]`` or ``\|``.
_WIKI_LINK_RE = re.compile(r"\[\[([^\]|\n]+?)(?:\|((?:\\.|[^\]\\\n])+?))?\]\]")


def start_wiki_link(src: str) -> int:
    return src.find("[[")


def tokenize_wiki_link(src: str) -> dict | None:
    m = _WIKI_LINK_RE.match(src)
    if not m:
        return None
    page = m.group(1).strip()
    if not page:
        return None
    display = unescape_char((m.group(2) or "").strip())
    return {"type": "wikiLink", "raw": m.group(0), "page": page, "display": display or page}


def parse_wiki_link(token: dict, helpers: ParseHelpers) -> dict:
    page = token.get("page", "")
    return {
        "type": "text",
        "text": token.get("display") or page,
        "marks": [{"type": "wikiLink", "attrs": {"pageName": page}}],
    }


def serialize_wiki_link_mark(mark: dict, content: str, helpers: SerializeHelpers) -> str:
    page = str((mark.get("attrs") or {}).get("pageName") or "")
    if not page:
        return content
    if helpers.flavor.wiki_link_serialize:
        # Display text equal to the page name collapses to the short form
        if content == markdown_escape(page):
            return f"[[{page}]]"
        return f"[[{page}|{content}]]"
    return f"[{content}](#{markdown_escape(page, 'url')})"


wiki_link_extension = MarkdownExtension(
    name="wikiLink",
    level="inline",
    start=start_wiki_link,
    tokenize=tokenize_wiki_link,
    parse=parse_wiki_link,
    serialize_mark=serialize_wiki_link_mark,
    trigger=r"\[\[",
)

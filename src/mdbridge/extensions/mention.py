"""``@mention`` inline atoms.

``@alice`` becomes ``{"type": "mention", "attrs": {"id": "alice",
"label": "alice"}}``.  The ``@`` only counts at a word boundary, so
e-mail-like text such as ``x@alice`` stays plain text.
"""

from __future__ import annotations

import re

from mdbridge.converter.registry import MarkdownExtension, ParseHelpers, SerializeHelpers

_MENTION_RE = re.compile(r"@([\w-]+)")
_START_RE = re.compile(r"(?<!\w)@(?=[\w-])")


def start_mention(src: str) -> int:
    m = _START_RE.search(src)
    return m.start() if m else -1


def tokenize_mention(src: str) -> dict | None:
    m = _MENTION_RE.match(src)
    if not m:
        return None
    return {"type": "mention", "raw": m.group(0), "label": m.group(1)}


def parse_mention(token: dict, helpers: ParseHelpers) -> dict:
    label = token.get("label", "")
    return {"type": "mention", "attrs": {"id": label, "label": label}}


def serialize_mention(node: dict, helpers: SerializeHelpers) -> str:
    attrs = node.get("attrs") or {}
    label = attrs.get("label") or attrs.get("id") or ""
    return f"@{label}" if label else ""


mention_extension = MarkdownExtension(
    name="mention",
    level="inline",
    start=start_mention,
    tokenize=tokenize_mention,
    parse=parse_mention,
    serialize=serialize_mention,
    trigger=r"@[\w-]",
)

"""Table-of-contents placeholder.

A line holding only ``[TOC]``, ``[[toc]]`` or ``[[_TOC_]]`` becomes an
attribute-less ``tableOfContents`` node.  It is always written back as
``[TOC]``.
"""

from __future__ import annotations

import re

from mdbridge.converter.registry import MarkdownExtension, ParseHelpers, SerializeHelpers

_TOC_RE = re.compile(r"(?:\[TOC\]|\[\[toc\]\]|\[\[_TOC_\]\])[ \t]*(?:\n|$)", re.IGNORECASE)
_START_RE = re.compile(r"^\[\[?_?toc", re.MULTILINE | re.IGNORECASE)


def start_toc(src: str) -> int:
    m = _START_RE.search(src)
    return m.start() if m else -1


def tokenize_toc(src: str) -> dict | None:
    m = _TOC_RE.match(src)
    if not m:
        return None
    return {"type": "tableOfContents", "raw": m.group(0)}


def parse_toc(token: dict, helpers: ParseHelpers) -> dict:
    return {"type": "tableOfContents"}


def serialize_toc(node: dict, helpers: SerializeHelpers) -> str:
    return "[TOC]"


toc_extension = MarkdownExtension(
    name="tableOfContents",
    level="block",
    start=start_toc,
    tokenize=tokenize_toc,
    parse=parse_toc,
    serialize=serialize_toc,
)

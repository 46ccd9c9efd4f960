"""Math: LaTeX in ``$...$`` and ``$$...$$`` delimiters.

Block math::

    $$                      {"type": "mathBlock",
    E = mc^2          ->     "attrs": {"latex": "E = mc^2"}}
    $$

Inline math ``$x^2$`` becomes ``{"type": "mathInline", "attrs":
{"latex": "x^2"}}``.  Inline math never spans a line break and cannot be
empty; ``$`` with no closing partner on the same line is plain text.

Block latex is stored stripped of surrounding whitespace, inline latex
verbatim.
"""

from __future__ import annotations

import re

from mdbridge.converter.registry import MarkdownExtension, ParseHelpers, SerializeHelpers

_BLOCK_RE = re.compile(r"\$\$([\s\S]+?)\$\$[ \t]*(?:\n|$)")
_BLOCK_START_RE = re.compile(r"^\$\$", re.MULTILINE)
_INLINE_RE = re.compile(r"\$([^$\n]+?)\$")


# ---------------------------------------------------------------------------
# Block-level math
# ---------------------------------------------------------------------------

def start_math_block(src: str) -> int:
    m = _BLOCK_START_RE.search(src)
    return m.start() if m else -1


def tokenize_math_block(src: str) -> dict | None:
    m = _BLOCK_RE.match(src)
    if not m:
        return None
    latex = m.group(1).strip()
    if not latex:
        return None
    return {"type": "mathBlock", "raw": m.group(0), "latex": latex}


def parse_math_block(token: dict, helpers: ParseHelpers) -> dict:
    return {"type": "mathBlock", "attrs": {"latex": token.get("latex", "")}}


def serialize_math_block(node: dict, helpers: SerializeHelpers) -> str:
    latex = (node.get("attrs") or {}).get("latex") or ""
    return f"$$\n{latex}\n$$"


# ---------------------------------------------------------------------------
# Inline math
# ---------------------------------------------------------------------------

def start_math_inline(src: str) -> int:
    # "$$" opens block math, never inline
    for m in re.finditer(r"\$", src):
        i = m.start()
        if src[i + 1:i + 2] != "$" and src[i - 1:i] != "$":
            return i
    return -1


def tokenize_math_inline(src: str) -> dict | None:
    m = _INLINE_RE.match(src)
    if not m:
        return None
    return {"type": "mathInline", "raw": m.group(0), "latex": m.group(1)}


def parse_math_inline(token: dict, helpers: ParseHelpers) -> dict:
    return {"type": "mathInline", "attrs": {"latex": token.get("latex", "")}}


def serialize_math_inline(node: dict, helpers: SerializeHelpers) -> str:
    latex = (node.get("attrs") or {}).get("latex") or ""
    return f"${latex}$" if latex else ""


math_block_extension = MarkdownExtension(
    name="mathBlock",
    level="block",
    start=start_math_block,
    tokenize=tokenize_math_block,
    parse=parse_math_block,
    serialize=serialize_math_block,
)

math_inline_extension = MarkdownExtension(
    name="mathInline",
    level="inline",
    start=start_math_inline,
    tokenize=tokenize_math_inline,
    parse=parse_math_inline,
    serialize=serialize_math_inline,
    trigger=r"\$(?!\$)[^$\n]+?\$",
)

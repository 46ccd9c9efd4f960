"""Callout (admonition) blocks.

Three input spellings are accepted whatever the output flavor::

    :::warning                > [!WARNING]             > [!tip]
    Mind the gap.             > Mind the gap.          > Obsidian style.
    :::

Directives are tried before alert blockquotes.  The callout body is block
Markdown and is tokenized recursively, so lists, code and nested
callouts work inside it.

Output depends on :attr:`FlavorConfig.callout_format`:

=====================  ===================================
``github-alerts``      ``> [!NOTE]`` (info and note), ``> [!CAUTION]`` (danger)
``obsidian-callouts``  ``> [!info]``
``directives``         ``:::info`` ... ``:::``
``blockquote-fallback````> **Info**: ...``
=====================  ===================================
"""

from __future__ import annotations

import re

from mdbridge.converter.registry import MarkdownExtension, ParseHelpers, SerializeHelpers
from mdbridge.flavors import CalloutFormat

CALLOUT_TYPES: tuple[str, ...] = ("info", "warning", "danger", "tip", "note")
DEFAULT_CALLOUT_TYPE = "info"

_DIRECTIVE_RE = re.compile(r":::(\w+)[ \t]*\n([\s\S]*?)\n:::[ \t]*(?:\n|$)")
_ALERT_RE = re.compile(r"> ?\[!(\w+)\][ \t]*(?:\n|$)((?:>[^\n]*(?:\n|$))*)")
_START_RE = re.compile(r"^(?::::\w|> ?\[!\w)", re.MULTILINE)

# GitHub alert name -> callout type.
_ALERT_TO_TYPE: dict[str, str] = {
    "NOTE": "note",
    "TIP": "tip",
    "IMPORTANT": "info",
    "WARNING": "warning",
    "CAUTION": "danger",
}

# Callout type -> GitHub alert name.
_TYPE_TO_ALERT: dict[str, str] = {
    "info": "NOTE",
    "note": "NOTE",
    "tip": "TIP",
    "warning": "WARNING",
    "danger": "CAUTION",
}


def normalize_callout_type(name: str) -> str:
    """Map a directive or alert name to one of :data:`CALLOUT_TYPES`.

    >>> normalize_callout_type("CAUTION")
    'danger'
    >>> normalize_callout_type("tip")
    'tip'
    >>> normalize_callout_type("bogus")
    'info'
    """
    if name in _ALERT_TO_TYPE:
        return _ALERT_TO_TYPE[name]
    lowered = name.lower()
    if lowered in CALLOUT_TYPES:
        return lowered
    return _ALERT_TO_TYPE.get(name.upper(), DEFAULT_CALLOUT_TYPE)


def _callout_type(node: dict) -> str:
    value = (node.get("attrs") or {}).get("type")
    return value if value in CALLOUT_TYPES else DEFAULT_CALLOUT_TYPE


# ---------------------------------------------------------------------------
# Tokenize / parse
# ---------------------------------------------------------------------------

def start_callout(src: str) -> int:
    m = _START_RE.search(src)
    return m.start() if m else -1


def tokenize_callout(src: str) -> dict | None:
    m = _DIRECTIVE_RE.match(src)
    if m:
        return {
            "type": "callout",
            "raw": m.group(0),
            "callout_type": m.group(1),
            "text": m.group(2),
        }

    m = _ALERT_RE.match(src)
    if m:
        body_lines = [re.sub(r"^>[ \t]?", "", line) for line in m.group(2).split("\n")]
        return {
            "type": "callout",
            "raw": m.group(0),
            "callout_type": m.group(1),
            "text": "\n".join(body_lines).strip("\n"),
        }
    return None


def parse_callout(token: dict, helpers: ParseHelpers) -> dict:
    content = helpers.parse_children(token.get("tokens", []))
    return {
        "type": "callout",
        "attrs": {"type": normalize_callout_type(token.get("callout_type", ""))},
        "content": content or [{"type": "paragraph"}],
    }


# ---------------------------------------------------------------------------
# Serialize
# ---------------------------------------------------------------------------

def _quote(text: str) -> str:
    return "\n".join(f"> {line}" if line else ">" for line in text.split("\n"))


def serialize_callout(node: dict, helpers: SerializeHelpers) -> str:
    callout_type = _callout_type(node)
    body = helpers.render_children(node.get("content") or [], "\n\n")
    fmt = helpers.flavor.callout_format

    if fmt == CalloutFormat.DIRECTIVES:
        return f":::{callout_type}\n{body}\n:::"

    if fmt == CalloutFormat.OBSIDIAN_CALLOUTS:
        header = f"> [!{callout_type}]"
    elif fmt == CalloutFormat.BLOCKQUOTE_FALLBACK:
        label = f"**{callout_type.capitalize()}**:"
        first, _, rest = body.partition("\n")
        lines = f"{label} {first}".rstrip() + (f"\n{rest}" if rest else "")
        return _quote(lines)
    else:
        header = f"> [!{_TYPE_TO_ALERT[callout_type]}]"

    return f"{header}\n{_quote(body)}" if body else header


callout_extension = MarkdownExtension(
    name="callout",
    level="block",
    start=start_callout,
    tokenize=tokenize_callout,
    parse=parse_callout,
    serialize=serialize_callout,
    nested=True,
)

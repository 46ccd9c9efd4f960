"""Built-in Markdown tokenizing via mistune, normalized to canonical tokens.

The block driver hands every run of text that no custom block tokenizer
claimed to :class:`ASTNormalizer`.  It wraps mistune v3's AST renderer and
maps the raw token stream onto a fixed set of canonical types consumed by
the built-in reducers.

Registered inline extensions are bridged into mistune's inline rule table,
so custom inline syntax (``@mention``, ``$math$``, ``[[wiki]]``) is found
inside emphasis, links and table cells, while code spans and backslash
escapes keep their usual precedence.  Their tokens pass through
normalization unchanged.

Canonical block tokens:
    heading, paragraph, block_quote, list, list_item, task_list_item,
    block_code, table, thematic_break, html_block

Canonical inline tokens:
    text, strong, emphasis, codespan, strikethrough, link, image,
    softbreak, linebreak, html_inline, plus every registered inline
    extension name
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import mistune

from mdbridge.converter.registry import MarkdownExtension
from mdbridge.errors import ErrorCode
from mdbridge.models import ConversionWarning
from mdbridge.observability import fields, get_logger

log = get_logger("mdbridge.parser")

# ---------------------------------------------------------------------------
# Mistune-to-canonical type mapping
# ---------------------------------------------------------------------------

_BLOCK_TYPE_MAP: dict[str, str] = {
    "heading": "heading",
    "paragraph": "paragraph",
    "block_quote": "block_quote",
    "list": "list",
    "list_item": "list_item",
    "task_list_item": "task_list_item",
    "block_code": "block_code",
    "table": "table",
    "thematic_break": "thematic_break",
    "block_html": "html_block",
    # Tight list items wrap their text in block_text
    "block_text": "paragraph",
}

_INLINE_TYPE_MAP: dict[str, str] = {
    "text": "text",
    "strong": "strong",
    "emphasis": "emphasis",
    "codespan": "codespan",
    "strikethrough": "strikethrough",
    "link": "link",
    "image": "image",
    "softbreak": "softbreak",
    "linebreak": "linebreak",
    "inline_html": "html_inline",
}

_TABLE_PART_TYPES: frozenset[str] = frozenset({
    "table_head",
    "table_body",
    "table_row",
    "table_cell",
})

_SKIP_TYPES: frozenset[str] = frozenset({
    "blank_line",
})

_MISTUNE_PLUGINS: list[str] = [
    "strikethrough",
    "table",
    "task_lists",
    "url",
]


class ASTNormalizer:
    """Parse standard Markdown and normalize to canonical AST tokens.

    Parameters
    ----------
    inline_extensions:
        Inline extensions to bridge into mistune's inline scanner, in
        registration order.
    warnings:
        Mutable list that collects :class:`ConversionWarning` instances
        when an inline extension raises.
    """

    def __init__(
        self,
        inline_extensions: Sequence[MarkdownExtension] = (),
        warnings: list[ConversionWarning] | None = None,
    ) -> None:
        self._parser = mistune.create_markdown(renderer="ast", plugins=list(_MISTUNE_PLUGINS))
        self._custom_inline: frozenset[str] = frozenset(e.name for e in inline_extensions)
        self.warnings: list[ConversionWarning] = warnings if warnings is not None else []
        for extension in inline_extensions:
            self._parser.inline.register(
                f"mdbridge_{extension.name}",
                extension.trigger,
                self._bridge(extension),
                before="link",
            )

    def parse(self, markdown: str) -> list[dict]:
        """Parse markdown and return the normalized block token list."""
        if not markdown.strip():
            return []
        raw_tokens = self._parser(markdown)
        if isinstance(raw_tokens, str):
            return []
        return self._normalize_tokens(raw_tokens)

    def parse_inline(self, text: str) -> list[dict]:
        """Parse a single line of inline Markdown into inline tokens."""
        for token in self.parse(text):
            if token["type"] in ("paragraph", "heading"):
                return token.get("children", [])
        return [{"type": "text", "raw": text}] if text else []

    # ------------------------------------------------------------------
    # Inline extension bridge
    # ------------------------------------------------------------------

    def _bridge(self, extension: MarkdownExtension):
        """Adapt an extension's start/tokenize pair to a mistune inline rule."""

        def parse_rule(inline: Any, m: Any, state: Any) -> int | None:
            pos = m.start()
            src = state.src
            window_start = max(pos - 1, 0)
            offset = self._call_extension(extension, "start", src[window_start:])
            if offset != pos - window_start:
                return None
            token = self._call_extension(extension, "tokenize", src[pos:])
            if not token or not token.get("raw"):
                return None
            token = dict(token)
            token.setdefault("type", extension.name)
            state.append_token(token)
            return pos + len(token["raw"])

        return parse_rule

    def _call_extension(self, extension: MarkdownExtension, stage: str, src: str) -> Any:
        func = extension.start if stage == "start" else extension.tokenize
        if func is None:
            return 0 if stage == "start" else None
        try:
            return func(src)
        except Exception as exc:
            self.warnings.append(ConversionWarning(
                code=ErrorCode.TOKENIZER_ERROR,
                message=f"Inline extension {extension.name!r} raised during {stage}: {exc}",
                context={"extension": extension.name, "stage": stage},
            ))
            log.warning(
                "inline tokenizer raised",
                extra=fields(op=stage, extension=extension.name, error=str(exc)),
            )
            return -1 if stage == "start" else None

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def _normalize_tokens(self, tokens: list[dict]) -> list[dict]:
        """Walk the token tree and normalize every node."""
        result: list[dict] = []
        for token in tokens:
            normalized = self._normalize_token(token)
            if normalized is not None:
                result.append(normalized)
        return result

    def _normalize_token(self, token: dict) -> dict | None:
        """Normalize a single token, returning None if it should be skipped."""
        raw_type = token.get("type", "")

        if raw_type in _SKIP_TYPES:
            return None

        # Custom inline tokens are already in their final shape
        if raw_type in self._custom_inline:
            return token

        if raw_type in _BLOCK_TYPE_MAP:
            return self._normalize_block(token, _BLOCK_TYPE_MAP[raw_type])

        if raw_type in _INLINE_TYPE_MAP:
            return self._normalize_inline(token, _INLINE_TYPE_MAP[raw_type])

        if raw_type in _TABLE_PART_TYPES:
            return self._normalize_table_part(token)

        # "raw" shows up inside some mistune containers
        if raw_type == "raw":
            return {"type": "text", "raw": token.get("raw", "")}

        return None

    def _normalize_block(self, token: dict, canonical_type: str) -> dict:
        result: dict = {"type": canonical_type}

        attrs = token.get("attrs")
        if attrs:
            result["attrs"] = dict(attrs)

        if canonical_type == "block_code":
            raw_code = token.get("raw", "")
            if raw_code.endswith("\n"):
                raw_code = raw_code[:-1]
            result["raw"] = raw_code
            return result

        if canonical_type == "html_block":
            result["raw"] = token.get("raw", "")
            return result

        if canonical_type == "thematic_break":
            return result

        children = token.get("children")
        if children:
            result["children"] = self._normalize_tokens(children)

        return result

    def _normalize_inline(self, token: dict, canonical_type: str) -> dict:
        result: dict = {"type": canonical_type}

        if canonical_type in ("text", "softbreak", "linebreak", "codespan", "html_inline"):
            result["raw"] = token.get("raw", "")
            return result

        attrs = token.get("attrs")
        if attrs:
            result["attrs"] = dict(attrs)

        children = token.get("children")
        if children:
            result["children"] = self._normalize_tokens(children)

        return result

    def _normalize_table_part(self, token: dict) -> dict:
        result: dict = {"type": token["type"]}

        attrs = token.get("attrs")
        if attrs:
            result["attrs"] = dict(attrs)

        children = token.get("children")
        if children:
            result["children"] = self._normalize_tokens(children)

        return result

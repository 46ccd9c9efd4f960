"""Markdown-to-document parsing pipeline.

:class:`BlockParser` runs two stages:

1. **Tokenize**: a single cursor walks the source.  At each step every
   registered block tokenizer's ``start`` is asked for its nearest
   candidate offset; at the nearest one the tokenizers are tried in
   registration order and the first match wins.  Text no custom tokenizer
   claims is accumulated and handed to mistune (via
   :class:`ASTNormalizer`) as one run of standard Markdown.
2. **Reduce**: each token is dispatched to its registered ``parse``
   function or to a built-in reducer, with nested token lists recursing
   through the same dispatch.

Nothing in either stage raises for any input.  A tokenizer that raises is
treated as "no match", a parser that raises degrades to an inert paragraph
holding the token's raw text, and both are recorded as
:class:`ConversionWarning`.
"""

from __future__ import annotations

import json
import re
import sys

from mdbridge.config import MdBridgeConfig
from mdbridge.converter.ast_normalizer import ASTNormalizer
from mdbridge.converter.block_builder import build_block
from mdbridge.converter.registry import MarkdownExtension, ParseHelpers, TokenRegistry
from mdbridge.converter.rich_text import build_inline
from mdbridge.errors import ErrorCode
from mdbridge.models import ConversionWarning, ParseResult
from mdbridge.observability import fields, get_logger, resolve_metrics

log = get_logger("mdbridge.parser")

_FENCE_RE = re.compile(r" {0,3}(`{3,}|~{3,})(.*)$")


def inside_open_fence(text: str) -> bool:
    """True if *text* ends inside an unclosed fenced code block."""
    open_fence: str | None = None
    for line in text.split("\n"):
        m = _FENCE_RE.match(line)
        if not m:
            continue
        fence, rest = m.group(1), m.group(2)
        if open_fence is None:
            if fence[0] == "`" and "`" in rest:
                continue
            open_fence = fence
        elif fence[0] == open_fence[0] and len(fence) >= len(open_fence) and not rest.strip():
            open_fence = None
    return open_fence is not None


def _as_node_list(result: object) -> list[dict]:
    if result is None:
        return []
    if isinstance(result, dict):
        return [result]
    if isinstance(result, list):
        return [n for n in result if isinstance(n, dict)]
    return []


class BlockParser:
    """Parse Markdown into a document tree using a :class:`TokenRegistry`.

    Parameters
    ----------
    registry:
        Custom extensions, in registration order.
    config:
        Only ``debug_dump_ast`` and ``metrics`` are read.

    Examples
    --------
    >>> from mdbridge.extensions import default_registry
    >>> parser = BlockParser(default_registry())
    >>> result = parser.parse(":::info\\nHello\\n:::\\n")
    >>> result.doc["content"][0]["attrs"]
    {'type': 'info'}
    """

    def __init__(self, registry: TokenRegistry, config: MdBridgeConfig | None = None) -> None:
        self._registry = registry
        self._config = config or MdBridgeConfig()
        self._metrics = resolve_metrics(self._config.metrics)
        self._block_tokenizers: list[MarkdownExtension] = registry.block_tokenizers()
        self.warnings: list[ConversionWarning] = []
        self._normalizer = ASTNormalizer(registry.inline_tokenizers(), warnings=self.warnings)
        self.helpers = ParseHelpers(
            parse_children=self.reduce_blocks,
            parse_inline=self.parse_inline,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self, markdown: str) -> ParseResult:
        """Full pipeline: tokenize -> reduce -> wrap in a ``doc`` node.

        The returned document always has at least one block; empty input
        yields a single empty paragraph.
        """
        self.warnings = []
        self._normalizer.warnings = self.warnings

        source = markdown.replace("\r\n", "\n").replace("\r", "\n")
        tokens = self.tokenize(source)

        if self._config.debug_dump_ast:
            print(
                "[mdbridge] Token stream:",
                json.dumps(tokens, indent=2, ensure_ascii=False, default=str),
                file=sys.stderr,
            )

        content = self.reduce_blocks(tokens) or [{"type": "paragraph"}]

        for warning in self.warnings:
            self._metrics.increment(
                "mdbridge.conversion_warnings_total",
                tags={"code": str(getattr(warning.code, "value", warning.code))},
            )

        return ParseResult(doc={"type": "doc", "content": content}, warnings=self.warnings)

    def tokenize(self, source: str) -> list[dict]:
        """Tokenize one block scope into custom and built-in tokens."""
        tokens: list[dict] = []
        plain: list[str] = []
        cursor = 0

        while cursor < len(source):
            rest = source[cursor:]
            offset = self._next_candidate(rest)

            if offset < 0:
                plain.append(rest)
                break

            if offset > 0:
                if rest[offset - 1] != "\n":
                    # Block syntax only starts at a line start
                    newline = rest.find("\n", offset)
                    offset = len(rest) if newline < 0 else newline + 1
                plain.append(rest[:offset])
                cursor += offset
                continue

            if not inside_open_fence("".join(plain)):
                token = self._match_at(rest)
                if token is not None:
                    tokens.extend(self._normalizer.parse("".join(plain)))
                    plain = []
                    tokens.append(token)
                    cursor += len(token["raw"])
                    continue

            newline = rest.find("\n")
            step = len(rest) if newline < 0 else newline + 1
            plain.append(rest[:step])
            cursor += step

        tokens.extend(self._normalizer.parse("".join(plain)))
        return tokens

    def reduce_blocks(self, tokens: list[dict]) -> list[dict]:
        """Reduce block tokens to document nodes."""
        nodes: list[dict] = []
        for token in tokens:
            extension = self._registry.get(token.get("type", ""))
            if extension is not None and extension.parse is not None:
                nodes.extend(self._parse_custom(extension, token, inline=False))
                continue

            built = build_block(token, self)
            if built is None:
                self._warn(
                    ErrorCode.UNKNOWN_NODE,
                    f"No reducer for block token {token.get('type')!r}",
                    {"node_type": token.get("type")},
                )
                continue
            nodes.extend(built)
        return nodes

    def reduce_inline(self, tokens: list[dict]) -> list[dict]:
        """Reduce inline tokens to inline nodes."""
        return build_inline(tokens, self._reduce_custom_inline)

    def parse_inline(self, text: str) -> list[dict]:
        """Parse a run of inline Markdown straight to inline nodes."""
        return self.reduce_inline(self._normalizer.parse_inline(text))

    # ------------------------------------------------------------------
    # Internal: tokenizing
    # ------------------------------------------------------------------

    def _next_candidate(self, rest: str) -> int:
        """Nearest offset any block tokenizer might match at, or -1."""
        best = -1
        for extension in self._block_tokenizers:
            if extension.start is None:
                offset = 0
            else:
                try:
                    offset = extension.start(rest)
                except Exception as exc:
                    self._extension_failed(extension, "start", exc)
                    continue
            if offset is None or offset < 0:
                continue
            if best < 0 or offset < best:
                best = offset
                if best == 0:
                    break
        return best

    def _match_at(self, rest: str) -> dict | None:
        """First token, in registration order, matching at offset 0."""
        for extension in self._block_tokenizers:
            try:
                token = extension.tokenize(rest)  # type: ignore[misc]
            except Exception as exc:
                self._extension_failed(extension, "tokenize", exc)
                continue
            if not token or not token.get("raw") or not rest.startswith(token["raw"]):
                continue
            token = dict(token)
            token.setdefault("type", extension.name)
            if extension.nested:
                token["tokens"] = self.tokenize(token.get("text", ""))
            return token
        return None

    # ------------------------------------------------------------------
    # Internal: reducing
    # ------------------------------------------------------------------

    def _reduce_custom_inline(self, token: dict) -> list[dict] | None:
        extension = self._registry.get(token.get("type", ""))
        if extension is not None and extension.parse is not None:
            return self._parse_custom(extension, token, inline=True)
        raw = token.get("raw", "")
        return [{"type": "text", "text": raw}] if raw else None

    def _parse_custom(self, extension: MarkdownExtension, token: dict, *, inline: bool) -> list[dict]:
        try:
            return _as_node_list(extension.parse(token, self.helpers))  # type: ignore[misc]
        except Exception as exc:
            self._extension_failed(extension, "parse", exc)
        raw = token.get("raw", "")
        if inline:
            return [{"type": "text", "text": raw}] if raw else []
        raw = raw.strip()
        if not raw:
            return []
        return [{"type": "paragraph", "content": [{"type": "text", "text": raw}]}]

    def _extension_failed(self, extension: MarkdownExtension, stage: str, exc: Exception) -> None:
        code = ErrorCode.PARSER_ERROR if stage == "parse" else ErrorCode.TOKENIZER_ERROR
        self._warn(
            code,
            f"Extension {extension.name!r} raised during {stage}: {exc}",
            {"extension": extension.name, "stage": stage},
        )
        log.warning(
            "extension raised during parse",
            extra=fields(op=stage, extension=extension.name, error=str(exc)),
        )

    def _warn(self, code: ErrorCode, message: str, context: dict) -> None:
        self.warnings.append(ConversionWarning(code=code, message=message, context=context))

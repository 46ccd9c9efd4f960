"""Document tree to Markdown serializer.

Walks a document tree (``dict`` nodes as produced by
:class:`~mdbridge.converter.md_to_doc.BlockParser`) and prints Markdown.
Block siblings are separated by a blank line and inline siblings are
concatenated.  Node types registered in the
:class:`~mdbridge.converter.registry.TokenRegistry` are printed by their
own ``serialize`` function; standard nodes go through the dispatch table
at the bottom of this module.

The flavor is chosen once per serializer and handed unchanged to every
extension through :class:`~mdbridge.converter.registry.SerializeHelpers`.

Usage::

    from mdbridge.converter.doc_to_md import MarkdownSerializer
    from mdbridge.extensions import default_registry

    serializer = MarkdownSerializer(default_registry(), flavor="obsidian")
    md = serializer.serialize(doc)
"""

from __future__ import annotations

import re
from collections.abc import Callable as _Callable

from mdbridge.config import MdBridgeConfig
from mdbridge.converter.inline_renderer import markdown_escape, render_inline, wrap_standard_mark
from mdbridge.converter.registry import MarkdownExtension, SerializeHelpers, TokenRegistry
from mdbridge.converter.tables import render_table
from mdbridge.errors import ErrorCode
from mdbridge.flavors import FlavorConfig, resolve_flavor
from mdbridge.models import ConversionWarning
from mdbridge.observability import fields, get_logger, resolve_metrics

log = get_logger("mdbridge.serializer")

# Leaves rendered by the inline renderer rather than the block dispatch.
_INLINE_TYPES: frozenset[str] = frozenset({
    "text",
    "hardBreak",
    "image",
})

_LIST_TYPES: frozenset[str] = frozenset({
    "bulletList",
    "orderedList",
    "taskList",
})

_BACKTICK_FENCE_RE = re.compile(r"^ {0,3}(`{3,})", re.MULTILINE)


class MarkdownSerializer:
    """Stateful serializer that converts a document tree to Markdown.

    Non-fatal problems (an unknown node type, an extension serializer that
    raised) are collected in :attr:`warnings` during a :meth:`serialize`
    call; the offending node degrades to its text content or to nothing.

    Parameters
    ----------
    registry:
        Custom node serializers.
    config:
        Supplies the output flavor and the metrics hook.
    flavor:
        Overrides ``config.flavor``.  Unknown names behave as ``"gfm"``.
    """

    def __init__(
        self,
        registry: TokenRegistry,
        config: MdBridgeConfig | None = None,
        *,
        flavor: str | None = None,
    ) -> None:
        self._registry = registry
        self._config = config or MdBridgeConfig()
        self._metrics = resolve_metrics(self._config.metrics)
        self._flavor: FlavorConfig = (
            resolve_flavor(flavor) if flavor is not None else self._config.flavor_config
        )
        self.warnings: list[ConversionWarning] = []
        self.helpers = SerializeHelpers(
            flavor=self._flavor,
            render_children=self.render_children,
            render_inline=self.render_inline,
        )

    @property
    def flavor(self) -> FlavorConfig:
        return self._flavor

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def serialize(self, tree: dict) -> str:
        """Serialize a document tree to Markdown.

        Parameters
        ----------
        tree:
            A ``doc`` node, or any single node.

        Returns
        -------
        str
            Markdown without a trailing newline; ``""`` for an empty
            document.
        """
        self.warnings = []
        if not isinstance(tree, dict):
            self._warn(ErrorCode.UNKNOWN_NODE, "Tree root is not a node", {"node_type": None})
            return ""

        if tree.get("type") == "doc":
            body = self.render_children(tree.get("content") or [], "\n\n")
        else:
            body = self.render_node(tree)

        for warning in self.warnings:
            self._metrics.increment(
                "mdbridge.conversion_warnings_total",
                tags={"code": str(getattr(warning.code, "value", warning.code))},
            )
        return body.strip("\n")

    def render_children(self, children: list[dict], separator: str = "\n\n") -> str:
        """Serialize *children* and join them with *separator*.

        With a line-breaking separator each child is treated as a block:
        trailing newlines are dropped and empty output is skipped, so one
        child that prints nothing does not leave a stray blank line.
        """
        if "\n" not in separator:
            return separator.join(self.render_node(child) for child in children)
        parts: list[str] = []
        for child in children:
            rendered = self.render_node(child).rstrip("\n")
            if rendered.strip():
                parts.append(rendered)
        return separator.join(parts)

    def render_node(self, node: dict) -> str:
        """Serialize a single node of any type."""
        if not isinstance(node, dict):
            self._warn(ErrorCode.UNKNOWN_NODE, "Child is not a node", {"node_type": None})
            return ""

        node_type = node.get("type", "")
        extension = self._registry.get(node_type)
        if extension is not None and extension.serialize is not None:
            return self._serialize_custom(extension, node)

        renderer = _BLOCK_RENDERERS.get(node_type)
        if renderer is not None:
            return renderer(self, node)

        if self._is_inline(node):
            return self.render_inline([node])

        return self._render_unknown(node)

    def render_inline(self, children: list[dict]) -> str:
        """Serialize inline nodes (text with marks, breaks, atoms)."""
        return render_inline(
            [c for c in children if isinstance(c, dict)],
            self._render_atom,
            self._wrap_mark,
        )

    # ------------------------------------------------------------------
    # Block type renderers
    # ------------------------------------------------------------------

    def _render_paragraph(self, node: dict) -> str:
        return self.render_inline(node.get("content") or [])

    def _render_heading(self, node: dict) -> str:
        level = (node.get("attrs") or {}).get("level", 1)
        try:
            level = min(max(int(level), 1), 6)
        except (TypeError, ValueError):
            level = 1
        text = self.render_inline(node.get("content") or []).replace("\n", " ")
        return f"{'#' * level} {text}".rstrip()

    def _render_blockquote(self, node: dict) -> str:
        inner = self.render_children(node.get("content") or [], "\n\n")
        return _prefix_lines(inner, "> ", ">")

    def _render_bullet_list(self, node: dict) -> str:
        return self._render_list(node, lambda _i, _item: "- ")

    def _render_ordered_list(self, node: dict) -> str:
        start = (node.get("attrs") or {}).get("start", 1)
        try:
            start = int(start)
        except (TypeError, ValueError):
            start = 1
        return self._render_list(node, lambda i, _item: f"{start + i}. ")

    def _render_task_list(self, node: dict) -> str:
        def marker(_i: int, item: dict) -> str:
            checked = bool((item.get("attrs") or {}).get("checked"))
            return "- [x] " if checked else "- [ ] "

        # Continuation lines align with the text after "- "
        return self._render_list(node, marker, indent=2)

    def _render_list(
        self,
        node: dict,
        marker_for: _Callable[[int, dict], str],
        indent: int | None = None,
    ) -> str:
        lines: list[str] = []
        for i, item in enumerate(c for c in node.get("content") or [] if isinstance(c, dict)):
            marker = marker_for(i, item)
            body = self._render_item_body(item.get("content") or [])
            width = len(marker) if indent is None else indent
            lines.append(_indent_item(marker, body, width))
        return "\n".join(lines)

    def _render_item_body(self, children: list[dict]) -> str:
        parts: list[str] = []
        for child in children:
            rendered = self.render_node(child).rstrip("\n")
            if not rendered.strip():
                continue
            if parts:
                # A list right after the item's text stays tight
                parts.append("\n" if child.get("type") in _LIST_TYPES else "\n\n")
            parts.append(rendered)
        return "".join(parts)

    def _render_code_block(self, node: dict) -> str:
        language = (node.get("attrs") or {}).get("language") or ""
        code = "".join(
            c.get("text", "") for c in node.get("content") or [] if isinstance(c, dict)
        )
        return fenced_code(code, str(language))

    def _render_horizontal_rule(self, node: dict) -> str:
        return "---"

    def _render_table(self, node: dict) -> str:
        return render_table(node, self.render_inline)

    # ------------------------------------------------------------------
    # Custom nodes, marks and fallbacks
    # ------------------------------------------------------------------

    def _serialize_custom(self, extension: MarkdownExtension, node: dict) -> str:
        try:
            result = extension.serialize(node, self.helpers)  # type: ignore[misc]
        except Exception as exc:
            self._extension_failed(extension, exc)
            return self._render_fallback(node)
        return result if isinstance(result, str) else ""

    def _render_atom(self, node: dict) -> str:
        extension = self._registry.get(node.get("type", ""))
        if extension is not None and extension.serialize is not None:
            return self._serialize_custom(extension, node)
        if node.get("type") in _BLOCK_RENDERERS:
            # A block nested in inline content: print it flattened
            return self.render_node(node).replace("\n", " ")
        return self._render_unknown(node)

    def _wrap_mark(self, mark: dict, content: str) -> str:
        wrapped = wrap_standard_mark(mark, content)
        if wrapped is not None:
            return wrapped

        mark_type = mark.get("type", "")
        extension = self._registry.get(mark_type)
        if extension is not None and extension.serialize_mark is not None:
            try:
                return extension.serialize_mark(mark, content, self.helpers)
            except Exception as exc:
                self._extension_failed(extension, exc)
                return content

        self._warn(
            ErrorCode.UNKNOWN_NODE,
            f"No serializer for mark type {mark_type!r}",
            {"mark_type": mark_type},
        )
        return content

    def _render_unknown(self, node: dict) -> str:
        """Handle node types nobody knows how to print.

        The node's own text, or else its children, are passed through so a
        single foreign node never blanks the export.
        """
        node_type = node.get("type", "unknown")
        self._warn(
            ErrorCode.UNKNOWN_NODE,
            f"No serializer for node type {node_type!r}",
            {"node_type": node_type},
        )
        log.warning("unknown node type during export", extra=fields(node_type=node_type))
        return self._render_fallback(node)

    def _render_fallback(self, node: dict) -> str:
        text = node.get("text")
        if isinstance(text, str):
            return markdown_escape(text)
        content = [c for c in node.get("content") or [] if isinstance(c, dict)]
        if not content:
            return ""
        if all(self._is_inline(c) for c in content):
            return self.render_inline(content)
        return self.render_children(content, "\n\n")

    def _is_inline(self, node: dict) -> bool:
        node_type = node.get("type", "")
        if node_type in _INLINE_TYPES:
            return True
        extension = self._registry.get(node_type)
        return extension is not None and extension.level == "inline"

    def _extension_failed(self, extension: MarkdownExtension, exc: Exception) -> None:
        self._warn(
            ErrorCode.SERIALIZER_ERROR,
            f"Extension {extension.name!r} raised during serialize: {exc}",
            {"extension": extension.name, "stage": "serialize"},
        )
        log.warning(
            "extension raised during export",
            extra=fields(op="serialize", extension=extension.name, error=str(exc)),
        )

    def _warn(self, code: ErrorCode, message: str, context: dict) -> None:
        self.warnings.append(ConversionWarning(code=code, message=message, context=context))


# ------------------------------------------------------------------
# Block renderer dispatch table
# ------------------------------------------------------------------

_BlockRenderer = _Callable[["MarkdownSerializer", dict], str]

_BLOCK_RENDERERS: dict[str, _BlockRenderer] = {
    "paragraph": MarkdownSerializer._render_paragraph,
    "heading": MarkdownSerializer._render_heading,
    "blockquote": MarkdownSerializer._render_blockquote,
    "bulletList": MarkdownSerializer._render_bullet_list,
    "orderedList": MarkdownSerializer._render_ordered_list,
    "taskList": MarkdownSerializer._render_task_list,
    "codeBlock": MarkdownSerializer._render_code_block,
    "horizontalRule": MarkdownSerializer._render_horizontal_rule,
    "table": MarkdownSerializer._render_table,
}

# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def fenced_code(code: str, language: str = "") -> str:
    """Wrap *code* in a backtick fence longer than any fence inside it."""
    runs = [len(m) for m in _BACKTICK_FENCE_RE.findall(code)]
    fence = "`" * max(3, max(runs, default=0) + 1)
    if not code:
        return f"{fence}{language}\n{fence}"
    return f"{fence}{language}\n{code}\n{fence}"


def _prefix_lines(text: str, prefix: str, blank_prefix: str) -> str:
    if not text:
        return blank_prefix
    return "\n".join(prefix + line if line else blank_prefix for line in text.split("\n"))


def _indent_item(marker: str, body: str, width: int) -> str:
    if not body:
        return marker.rstrip()
    pad = " " * width
    first, *rest = body.split("\n")
    lines = [marker + first]
    lines.extend(pad + line if line else "" for line in rest)
    return "\n".join(lines)

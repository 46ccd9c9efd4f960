"""Extension registry: node type name -> tokenizer / parser / serializer.

Every custom block or inline type contributes one
:class:`MarkdownExtension`.  The parse and serialize drivers find it by
name through a :class:`TokenRegistry`; there is no other dispatch.

Contract
--------

``start(src) -> int``
    Cheap scan for the earliest offset in *src* where this extension
    *might* match, ``-1`` when it cannot match anywhere.  Block starts must
    report line-start offsets.  Inline starts see one character of
    look-behind (``src[0]`` is the character before the candidate trigger
    when there is one) so they can reject triggers glued to a word.

``tokenize(src) -> dict | None``
    Match at offset 0 of *src*.  Returns a token ``{"type", "raw", ...}``
    or ``None``.  ``len(token["raw"])`` characters are consumed.  When the
    extension is ``nested``, the driver block-tokenizes ``token["text"]``
    into ``token["tokens"]``.

``parse(token, helpers) -> dict | list[dict] | None``
    Turn the token into document node(s).  ``helpers.parse_children``
    reduces nested tokens through the same registry.

``serialize(node, helpers) -> str``
    Print the node.  ``helpers.render_children(children, separator)``
    recurses; ``helpers.flavor`` carries the export's
    :class:`~mdbridge.flavors.FlavorConfig`.

``serialize_mark(mark, content, helpers) -> str``
    For extensions that produce marks rather than nodes (wiki links): wrap
    the already-rendered *content* of the marked run.

Registration order is significant: when several tokenizers can match at
the same offset, the first registered wins.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Literal

from mdbridge.errors import ErrorCode, MdBridgeExtensionError
from mdbridge.flavors import FlavorConfig

StartFn = Callable[[str], int]
TokenizeFn = Callable[[str], "dict[str, Any] | None"]
ParseFn = Callable[[dict, "ParseHelpers"], "dict | list[dict] | None"]
SerializeFn = Callable[[dict, "SerializeHelpers"], str]
SerializeMarkFn = Callable[[dict, str, "SerializeHelpers"], str]


@dataclass(frozen=True)
class ParseHelpers:
    """Callbacks handed to an extension's ``parse`` function."""

    parse_children: Callable[[list[dict]], list[dict]]
    """Reduce nested block tokens to document nodes."""

    parse_inline: Callable[[str], list[dict]]
    """Parse a run of inline Markdown into inline nodes."""


@dataclass(frozen=True)
class SerializeHelpers:
    """Callbacks handed to an extension's ``serialize`` function."""

    flavor: FlavorConfig
    """Output configuration for the whole export."""

    render_children: Callable[[list[dict], str], str]
    """Serialize block children joined by a separator."""

    render_inline: Callable[[list[dict]], str]
    """Serialize inline children (text with marks, atoms)."""


@dataclass(frozen=True)
class MarkdownExtension:
    """The tokenizer/parser/serializer triple for one node type.

    Parameters
    ----------
    name:
        Node (or mark) type name, also the ``type`` of the tokens it emits.
    level:
        ``"block"`` tokenizers run across lines in the block driver;
        ``"inline"`` tokenizers run inside a single block's text.
    start, tokenize, parse, serialize, serialize_mark:
        See the module docstring.  Serializer-only extensions (node types
        that are produced some other way) leave the first three unset.
    trigger:
        Inline only: regular expression for the trigger text the inline
        scanner stops at before asking ``start``/``tokenize``.
    nested:
        Block only: block-tokenize ``token["text"]`` into ``token["tokens"]``.
    """

    name: str
    level: Literal["block", "inline"] = "block"
    start: StartFn | None = None
    tokenize: TokenizeFn | None = None
    parse: ParseFn | None = None
    serialize: SerializeFn | None = None
    serialize_mark: SerializeMarkFn | None = None
    trigger: str | None = None
    nested: bool = False

    def __post_init__(self) -> None:
        context = {"name": self.name, "level": self.level}
        if not self.name:
            raise MdBridgeExtensionError("Extension name must be non-empty", context=context)
        if self.level not in ("block", "inline"):
            raise MdBridgeExtensionError(
                f"Extension {self.name!r} has unknown level {self.level!r}",
                context=context,
            )
        if self.tokenize is not None and self.parse is None:
            raise MdBridgeExtensionError(
                f"Extension {self.name!r} defines tokenize without parse",
                context=context,
            )
        if self.level == "inline" and self.tokenize is not None and not self.trigger:
            raise MdBridgeExtensionError(
                f"Inline extension {self.name!r} needs a trigger pattern",
                context=context,
            )

    @property
    def has_tokenizer(self) -> bool:
        return self.tokenize is not None


class TokenRegistry:
    """Ordered name -> :class:`MarkdownExtension` lookup.

    Parameters
    ----------
    extensions:
        Extensions in registration order.  Order decides ties between
        tokenizers matching at the same offset.

    Raises
    ------
    MdBridgeExtensionError
        If two extensions share a name.
    """

    def __init__(self, extensions: Iterable[MarkdownExtension] = ()) -> None:
        self._by_name: dict[str, MarkdownExtension] = {}
        self._order: list[MarkdownExtension] = []
        for extension in extensions:
            self.register(extension)

    def register(self, extension: MarkdownExtension) -> None:
        """Append *extension* to the registry."""
        if extension.name in self._by_name:
            raise MdBridgeExtensionError(
                f"Extension {extension.name!r} is already registered",
                code=ErrorCode.DUPLICATE_EXTENSION,
                context={"name": extension.name, "level": extension.level},
            )
        self._by_name[extension.name] = extension
        self._order.append(extension)

    def get(self, name: str) -> MarkdownExtension | None:
        return self._by_name.get(name)

    def block_tokenizers(self) -> list[MarkdownExtension]:
        """Block extensions that can tokenize, in registration order."""
        return [e for e in self._order if e.level == "block" and e.has_tokenizer]

    def inline_tokenizers(self) -> list[MarkdownExtension]:
        """Inline extensions that can tokenize, in registration order."""
        return [e for e in self._order if e.level == "inline" and e.has_tokenizer]

    def names(self) -> list[str]:
        return [e.name for e in self._order]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[MarkdownExtension]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __repr__(self) -> str:
        return f"TokenRegistry({self.names()!r})"

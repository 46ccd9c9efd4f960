"""One-call conversion helpers.

For callers that do not keep a parser or serializer around::

    from mdbridge.api import parse_markdown, serialize_markdown

    result = parse_markdown("> [!TIP]\\n> Use the shortcut.")
    md = serialize_markdown(result.doc, flavor="docusaurus")

Both use :func:`~mdbridge.extensions.default_registry` unless given a
registry.
"""

from __future__ import annotations

from mdbridge.config import MdBridgeConfig
from mdbridge.converter.diagrams import transform_diagram_code_blocks
from mdbridge.converter.doc_to_md import MarkdownSerializer
from mdbridge.converter.md_to_doc import BlockParser
from mdbridge.converter.registry import TokenRegistry
from mdbridge.errors import MdBridgeConversionError
from mdbridge.extensions import default_registry
from mdbridge.models import ParseResult


def parse_markdown(
    markdown: str,
    registry: TokenRegistry | None = None,
    config: MdBridgeConfig | None = None,
    *,
    transform_diagrams: bool | None = None,
) -> ParseResult:
    """Parse *markdown* into a document tree.

    Parameters
    ----------
    markdown:
        Markdown in any supported flavor.
    registry:
        Custom extensions; defaults to :func:`default_registry`.
    config:
        Parser configuration.
    transform_diagrams:
        Run the diagram rewrite pass.  Defaults to
        ``config.transform_diagrams_on_import``.

    Returns
    -------
    ParseResult
        The ``doc`` tree and any conversion warnings.

    Raises
    ------
    MdBridgeConversionError
        If *markdown* is not a string.
    """
    if not isinstance(markdown, str):
        raise MdBridgeConversionError(
            f"Expected Markdown text, got {type(markdown).__name__}",
            context={"stage": "parse"},
        )
    config = config or MdBridgeConfig()
    parser = BlockParser(registry if registry is not None else default_registry(), config)
    result = parser.parse(markdown)

    if transform_diagrams is None:
        transform_diagrams = config.transform_diagrams_on_import
    if transform_diagrams:
        result.doc = transform_diagram_code_blocks(result.doc, result.warnings)
    return result


def serialize_markdown(
    doc: dict,
    registry: TokenRegistry | None = None,
    config: MdBridgeConfig | None = None,
    *,
    flavor: str | None = None,
) -> str:
    """Serialize a document tree to Markdown.

    *flavor* overrides ``config.flavor``; unknown names behave as ``"gfm"``.
    """
    if registry is None:
        registry = default_registry()
    return MarkdownSerializer(registry, config, flavor=flavor).serialize(doc)

"""Markdown ↔ document tree conversion pipeline.

Public API:

- :class:`BlockParser`: Markdown → document tree.
- :class:`MarkdownSerializer`: document tree → Markdown.
- :class:`TokenRegistry` / :class:`MarkdownExtension`: custom node types.
- :class:`ASTNormalizer`: parse and normalize standard Markdown via mistune.
- :func:`transform_diagram_code_blocks`: rewrite diagram fences on import.
- :func:`markdown_escape`: escape text for Markdown output.
"""

from mdbridge.converter.ast_normalizer import ASTNormalizer
from mdbridge.converter.diagrams import DIAGRAM_LANGUAGES, transform_diagram_code_blocks
from mdbridge.converter.doc_to_md import MarkdownSerializer
from mdbridge.converter.inline_renderer import markdown_escape
from mdbridge.converter.md_to_doc import BlockParser
from mdbridge.converter.registry import (
    MarkdownExtension,
    ParseHelpers,
    SerializeHelpers,
    TokenRegistry,
)

__all__ = [
    "ASTNormalizer",
    "BlockParser",
    "DIAGRAM_LANGUAGES",
    "MarkdownExtension",
    "MarkdownSerializer",
    "ParseHelpers",
    "SerializeHelpers",
    "TokenRegistry",
    "markdown_escape",
    "transform_diagram_code_blocks",
]

"""Custom node types shipped with mdbridge.

:func:`default_registry` builds a :class:`TokenRegistry` with every
extension below, in this order (the order decides which block tokenizer
wins when several could match at the same line):

1. ``tableOfContents``
2. ``details`` (+ ``detailsSummary``, ``detailsContent``)
3. ``callout``
4. ``mathBlock``
5. ``mathInline``
6. ``mention``
7. ``wikiLink``
8. ``diagram``
"""

from __future__ import annotations

from mdbridge.converter.registry import MarkdownExtension, TokenRegistry
from mdbridge.extensions.callout import callout_extension
from mdbridge.extensions.details import (
    details_content_extension,
    details_extension,
    details_summary_extension,
)
from mdbridge.extensions.diagram import diagram_extension
from mdbridge.extensions.math import math_block_extension, math_inline_extension
from mdbridge.extensions.mention import mention_extension
from mdbridge.extensions.toc import toc_extension
from mdbridge.extensions.wiki_link import wiki_link_extension


def default_extensions() -> list[MarkdownExtension]:
    """All built-in custom extensions in registration order."""
    return [
        toc_extension,
        details_extension,
        details_summary_extension,
        details_content_extension,
        callout_extension,
        math_block_extension,
        math_inline_extension,
        mention_extension,
        wiki_link_extension,
        diagram_extension,
    ]


def default_registry() -> TokenRegistry:
    """A fresh registry holding :func:`default_extensions`."""
    return TokenRegistry(default_extensions())


__all__ = [
    "callout_extension",
    "default_extensions",
    "default_registry",
    "details_content_extension",
    "details_extension",
    "details_summary_extension",
    "diagram_extension",
    "math_block_extension",
    "math_inline_extension",
    "mention_extension",
    "toc_extension",
    "wiki_link_extension",
]

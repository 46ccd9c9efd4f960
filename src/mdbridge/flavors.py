"""Markdown flavor definitions and resolution.

mdbridge writes one of four Markdown flavors but always reads all of
them.  The flavor only changes serializer output; the parser is
flavor-blind, so the same text produces the same document tree whatever
flavor the caller is configured for.

=============  ===================  ============  ============================
Flavor         Callout output       Wiki links    Typical platforms
=============  ===================  ============  ============================
``commonmark`` ``> **Info**: ...``  ``[t](#p)``   Stack Overflow, email
``gfm``        ``> [!NOTE]``        ``[t](#p)``   GitHub, GitLab
``obsidian``   ``> [!note]``        ``[[p]]``     Obsidian, Logseq, Foam
``docusaurus`` ``:::note``          ``[t](#p)``   Docusaurus, VitePress
=============  ===================  ============  ============================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

MarkdownFlavor = Literal["commonmark", "gfm", "obsidian", "docusaurus"]

DEFAULT_FLAVOR: MarkdownFlavor = "gfm"


class CalloutFormat(str, Enum):
    """How callout/admonition blocks are written on export."""

    GITHUB_ALERTS = "github-alerts"
    OBSIDIAN_CALLOUTS = "obsidian-callouts"
    DIRECTIVES = "directives"
    BLOCKQUOTE_FALLBACK = "blockquote-fallback"


@dataclass(frozen=True)
class FlavorConfig:
    """Output choices derived from a flavor.

    Attributes
    ----------
    callout_format:
        Spelling used for ``callout`` nodes.
    wiki_link_serialize:
        Write wiki links as ``[[page]]`` when true, as standard links
        otherwise.
    """

    callout_format: CalloutFormat
    wiki_link_serialize: bool


_FLAVOR_CONFIGS: dict[str, FlavorConfig] = {
    "commonmark": FlavorConfig(CalloutFormat.BLOCKQUOTE_FALLBACK, False),
    "gfm": FlavorConfig(CalloutFormat.GITHUB_ALERTS, False),
    "obsidian": FlavorConfig(CalloutFormat.OBSIDIAN_CALLOUTS, True),
    "docusaurus": FlavorConfig(CalloutFormat.DIRECTIVES, False),
}

FLAVORS: tuple[str, ...] = tuple(_FLAVOR_CONFIGS)


def resolve_flavor(flavor: str | None = DEFAULT_FLAVOR) -> FlavorConfig:
    """Return the :class:`FlavorConfig` for *flavor*.

    Unknown or missing flavor names resolve to the ``gfm`` configuration;
    this function never raises.

    Examples
    --------
    >>> resolve_flavor("obsidian").wiki_link_serialize
    True
    >>> resolve_flavor("nonsense") == resolve_flavor("gfm")
    True
    """
    if not isinstance(flavor, str):
        return _FLAVOR_CONFIGS[DEFAULT_FLAVOR]
    return _FLAVOR_CONFIGS.get(flavor, _FLAVOR_CONFIGS[DEFAULT_FLAVOR])


def normalize_flavor(flavor: str | None) -> MarkdownFlavor:
    """Map any value to one of the four wire flavor names."""
    if isinstance(flavor, str) and flavor in _FLAVOR_CONFIGS:
        return flavor  # type: ignore[return-value]
    return DEFAULT_FLAVOR

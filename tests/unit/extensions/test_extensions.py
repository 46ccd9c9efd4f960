"""Tests for the built-in extensions (parse, serialize and round trip)."""

from __future__ import annotations

import pytest

from mdbridge.api import parse_markdown, serialize_markdown
from mdbridge.extensions.callout import CALLOUT_TYPES, normalize_callout_type, tokenize_callout
from mdbridge.extensions.details import tokenize_details
from mdbridge.extensions.math import start_math_inline, tokenize_math_block
from mdbridge.extensions.mention import start_mention
from mdbridge.extensions.wiki_link import tokenize_wiki_link


def _blocks(md: str) -> list[dict]:
    return parse_markdown(md).doc["content"]


def _roundtrip(md: str, flavor: str = "gfm") -> str:
    return serialize_markdown(parse_markdown(md).doc, flavor=flavor)


def _callout(callout_type: str, text: str) -> dict:
    return {
        "type": "callout",
        "attrs": {"type": callout_type},
        "content": [{"type": "paragraph", "content": [{"type": "text", "text": text}]}],
    }


# =========================================================================
# Callouts
# =========================================================================

class TestCallout:

    @pytest.mark.parametrize(
        ("flavor", "expected"),
        [
            ("gfm", "> [!NOTE]\n> Hello"),
            ("obsidian", "> [!info]\n> Hello"),
            ("docusaurus", ":::info\nHello\n:::"),
            ("commonmark", "> **Info**: Hello"),
        ],
    )
    def test_serialize_per_flavor(self, flavor, expected):
        doc = {"type": "doc", "content": [_callout("info", "Hello")]}
        assert serialize_markdown(doc, flavor=flavor) == expected

    @pytest.mark.parametrize(
        "md",
        [
            ":::warning\nMind the gap.\n:::",
            "> [!WARNING]\n> Mind the gap.",
            "> [!warning]\n> Mind the gap.",
        ],
    )
    def test_every_input_spelling(self, md):
        assert _blocks(md) == [_callout("warning", "Mind the gap.")]

    def test_github_alert_names(self):
        assert _blocks("> [!CAUTION]\n> Hot")[0]["attrs"] == {"type": "danger"}
        assert _blocks("> [!IMPORTANT]\n> Read")[0]["attrs"] == {"type": "info"}

    def test_unknown_type_becomes_info(self):
        assert _blocks(":::fancy\nx\n:::")[0]["attrs"] == {"type": "info"}

    def test_plain_blockquote_is_not_a_callout(self):
        assert _blocks("> just quoting")[0]["type"] == "blockquote"

    @pytest.mark.parametrize("flavor", ["gfm", "obsidian", "docusaurus"])
    def test_roundtrip_warning(self, flavor):
        doc = {"type": "doc", "content": [_callout("warning", "Careful")]}
        md = serialize_markdown(doc, flavor=flavor)
        assert parse_markdown(md).doc == doc

    def test_gfm_maps_danger_to_caution(self):
        doc = {"type": "doc", "content": [_callout("danger", "Hot")]}
        assert serialize_markdown(doc, flavor="gfm") == "> [!CAUTION]\n> Hot"

    def test_multi_paragraph_body(self):
        md = _roundtrip(":::tip\nOne\n\nTwo\n:::", "obsidian")
        assert md == "> [!tip]\n> One\n>\n> Two"

    def test_commonmark_fallback_reparses_as_blockquote(self):
        md = _roundtrip(":::tip\nShortcut\n:::", "commonmark")
        assert md == "> **Tip**: Shortcut"
        assert _blocks(md)[0]["type"] == "blockquote"

    def test_tokenizer_rejects_midline(self):
        assert tokenize_callout("text :::info\nx\n:::") is None

    def test_normalize_callout_type(self):
        assert [normalize_callout_type(t) for t in ("NOTE", "Tip", "danger")] == ["note", "tip", "danger"]
        assert set(CALLOUT_TYPES) == {"info", "warning", "danger", "tip", "note"}


# =========================================================================
# Mentions
# =========================================================================

class TestMention:

    def test_parse_mention(self):
        para = _blocks("hi @alice")[0]
        assert para["content"] == [
            {"type": "text", "text": "hi "},
            {"type": "mention", "attrs": {"id": "alice", "label": "alice"}},
        ]

    def test_word_glued_at_is_text(self):
        assert _blocks("x@alice")[0]["content"] == [{"type": "text", "text": "x@alice"}]

    def test_mention_inside_emphasis_carries_mark(self):
        node = _blocks("**@bob**")[0]["content"][0]
        assert node["type"] == "mention"
        assert node["marks"] == [{"type": "bold"}]

    def test_roundtrip(self):
        assert _roundtrip("ping @team-lead now") == "ping @team-lead now"

    def test_start_respects_lookbehind(self):
        assert start_mention("a@b") == -1
        assert start_mention(" @b") == 1

    def test_literal_at_sign_survives(self):
        doc = {"type": "doc", "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": "@nobody"}]},
        ]}
        assert parse_markdown(serialize_markdown(doc)).doc == doc


# =========================================================================
# Math
# =========================================================================

class TestMath:

    def test_block(self):
        assert _blocks("$$\nE = mc^2\n$$") == [{"type": "mathBlock", "attrs": {"latex": "E = mc^2"}}]

    def test_block_roundtrip(self):
        assert _roundtrip("$$\n\\int_0^1 x\\,dx\n$$") == "$$\n\\int_0^1 x\\,dx\n$$"

    def test_empty_block_is_not_math(self):
        assert tokenize_math_block("$$\n\n$$") is None

    def test_inline(self):
        para = _blocks("Area $\\pi r^2$ here")[0]
        assert para["content"][1] == {"type": "mathInline", "attrs": {"latex": "\\pi r^2"}}

    def test_inline_roundtrip(self):
        assert _roundtrip("Area $\\pi r^2$ here") == "Area $\\pi r^2$ here"

    def test_lone_dollar_is_text(self):
        assert _blocks("costs $5 today")[0]["content"] == [{"type": "text", "text": "costs $5 today"}]

    def test_inline_start_skips_double_dollar(self):
        assert start_math_inline("$$x$$") == -1
        assert start_math_inline("a $x$") == 2

    def test_literal_dollar_escaped(self):
        doc = {"type": "doc", "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": "$a$ is money"}]},
        ]}
        md = serialize_markdown(doc)
        assert md == "\\$a\\$ is money"
        assert parse_markdown(md).doc == doc


# =========================================================================
# Wiki links
# =========================================================================

class TestWikiLink:

    def test_parse_to_marked_text(self):
        para = _blocks("See [[Roadmap|the plan]]")[0]
        assert para["content"][1] == {
            "type": "text",
            "text": "the plan",
            "marks": [{"type": "wikiLink", "attrs": {"pageName": "Roadmap"}}],
        }

    def test_obsidian_keeps_wiki_syntax(self):
        md = "See [[Roadmap]] and [[Plan|the plan]]"
        assert _roundtrip(md, "obsidian") == md

    def test_other_flavors_write_plain_links(self):
        md = _roundtrip("See [[Roadmap]] and [[Plan|the plan]]", "gfm")
        assert md == "See [Roadmap](#Roadmap) and [the plan](#Plan)"

    def test_page_with_space_is_url_encoded(self):
        assert _roundtrip("[[Big Plan]]", "docusaurus") == "[Big Plan](#Big%20Plan)"

    @pytest.mark.parametrize("display", ["my_note", "a*b*", "$5", "x]y", "a|b", "<tag>"])
    def test_obsidian_display_text_stable(self, display):
        doc = {"type": "doc", "content": [{"type": "paragraph", "content": [{
            "type": "text",
            "text": display,
            "marks": [{"type": "wikiLink", "attrs": {"pageName": "Page"}}],
        }]}]}
        first = serialize_markdown(doc, flavor="obsidian")
        assert parse_markdown(first).doc == doc
        assert _roundtrip(first, "obsidian") == first

    def test_escaped_display_unescaped(self):
        assert _roundtrip("[[Page|my_note]]", "obsidian") == "[[Page|my\\_note]]"
        assert tokenize_wiki_link("[[Page|my\\_note]]")["display"] == "my_note"

    def test_tokenizer(self):
        assert tokenize_wiki_link("[[A|b]] rest")["raw"] == "[[A|b]]"
        assert tokenize_wiki_link("[[]]") is None
        assert tokenize_wiki_link("[[open") is None


# =========================================================================
# Details
# =========================================================================

class TestDetails:

    MD = "<details open>\n<summary>More</summary>\n\nBody *text*.\n\n</details>"

    def test_parse(self):
        node = _blocks(self.MD)[0]
        assert node["type"] == "details"
        assert node["attrs"] == {"open": True}
        summary, body = node["content"]
        assert summary == {"type": "detailsSummary", "content": [{"type": "text", "text": "More"}]}
        assert body["type"] == "detailsContent"
        assert body["content"][0]["type"] == "paragraph"

    def test_roundtrip(self):
        assert _roundtrip(self.MD) == self.MD

    def test_closed_without_summary(self):
        node = _blocks("<details>\nHidden\n</details>")[0]
        assert node["attrs"] == {"open": False}
        assert node["content"][0] == {"type": "detailsSummary"}
        assert serialize_markdown({"type": "doc", "content": [node]}) == (
            "<details>\n<summary></summary>\n\nHidden\n\n</details>"
        )

    def test_nested_sections(self):
        md = "<details>\n<summary>Outer</summary>\n\n<details>\n<summary>Inner</summary>\n\nDeep\n\n</details>\n\n</details>"
        outer = _blocks(md)[0]
        inner = outer["content"][1]["content"][0]
        assert inner["type"] == "details"
        assert _roundtrip(md) == md

    def test_unclosed_is_not_details(self):
        assert tokenize_details("<details>\nno end") is None

    def test_closing_tag_in_code_fence_ignored(self):
        md = "<details>\n<summary>S</summary>\n\n```\n</details>\n```\n\n</details>"
        blocks = _blocks(md)
        assert len(blocks) == 1
        body = blocks[0]["content"][1]["content"]
        assert [b["type"] for b in body] == ["codeBlock"]
        assert body[0]["content"][0]["text"].strip() == "</details>"
        assert _roundtrip(md) == md


# =========================================================================
# Table of contents
# =========================================================================

class TestTableOfContents:

    @pytest.mark.parametrize("md", ["[TOC]", "[[toc]]", "[[_TOC_]]", "[toc]"])
    def test_spellings(self, md):
        assert _blocks(md) == [{"type": "tableOfContents"}]

    def test_written_back_canonical(self):
        assert _roundtrip("[[_TOC_]]\n\n# Intro") == "[TOC]\n\n# Intro"

    def test_inline_toc_is_text(self):
        assert _blocks("see [TOC] here")[0]["type"] == "paragraph"


# =========================================================================
# Diagrams
# =========================================================================

class TestDiagram:

    def test_mermaid_roundtrip(self):
        md = "```mermaid\ngraph TD; A-->B\n```"
        assert _blocks(md) == [{"type": "diagram", "attrs": {"code": "graph TD; A-->B", "type": "mermaid"}}]
        assert _roundtrip(md) == md

    def test_graphviz_written_as_dot(self):
        assert _roundtrip("```graphviz\ndigraph { a -> b }\n```") == "```dot\ndigraph { a -> b }\n```"

    def test_transform_disabled_keeps_code(self):
        doc = parse_markdown("```mermaid\ngraph TD\n```", transform_diagrams=False).doc
        assert doc["content"][0]["type"] == "codeBlock"

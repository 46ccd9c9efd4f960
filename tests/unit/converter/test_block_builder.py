"""Tests for converter/block_builder.py"""

from mdbridge.converter.block_builder import BUILTIN_BLOCK_TYPES, build_block
from mdbridge.converter.rich_text import build_inline


class _Ctx:
    """Minimal build context that reduces recursively through build_block."""

    def reduce_blocks(self, tokens):
        nodes = []
        for token in tokens:
            nodes.extend(build_block(token, self) or [])
        return nodes

    def reduce_inline(self, tokens):
        return build_inline(tokens, lambda token: None)


CTX = _Ctx()


def _para_token(text):
    return {"type": "paragraph", "children": [{"type": "text", "raw": text}]}


# =========================================================================
# Per-type builders
# =========================================================================

class TestBuildBlock:

    def test_unknown_type(self):
        assert build_block({"type": "callout"}, CTX) is None

    def test_builtin_types(self):
        assert "paragraph" in BUILTIN_BLOCK_TYPES
        assert "callout" not in BUILTIN_BLOCK_TYPES

    def test_heading(self):
        token = {"type": "heading", "attrs": {"level": 3}, "children": [{"type": "text", "raw": "H"}]}
        assert build_block(token, CTX) == [
            {"type": "heading", "attrs": {"level": 3}, "content": [{"type": "text", "text": "H"}]},
        ]

    def test_empty_paragraph_has_no_content(self):
        assert build_block({"type": "paragraph"}, CTX) == [{"type": "paragraph"}]

    def test_blockquote(self):
        token = {"type": "block_quote", "children": [_para_token("q")]}
        assert build_block(token, CTX) == [
            {"type": "blockquote", "content": [{"type": "paragraph", "content": [{"type": "text", "text": "q"}]}]},
        ]

    def test_ordered_list(self):
        token = {
            "type": "list",
            "attrs": {"ordered": True, "start": 5},
            "children": [{"type": "list_item", "children": [_para_token("x")]}],
        }
        node = build_block(token, CTX)[0]
        assert node["type"] == "orderedList"
        assert node["attrs"] == {"start": 5}
        assert node["content"][0]["type"] == "listItem"

    def test_task_list(self):
        token = {
            "type": "list",
            "attrs": {"ordered": False},
            "children": [
                {"type": "task_list_item", "attrs": {"checked": True}, "children": [_para_token("a")]},
                {"type": "task_list_item", "attrs": {"checked": False}, "children": [_para_token("b")]},
            ],
        }
        node = build_block(token, CTX)[0]
        assert node["type"] == "taskList"
        assert [i["attrs"] for i in node["content"]] == [{"checked": True}, {"checked": False}]

    def test_bullet_list_skips_foreign_children(self):
        token = {"type": "list", "children": [{"type": "blank_line"}, {"type": "list_item"}]}
        assert build_block(token, CTX) == [{"type": "bulletList", "content": [{"type": "listItem"}]}]

    def test_code_language_first_word(self):
        token = {"type": "block_code", "attrs": {"info": "js title=app.js"}, "raw": "x()"}
        assert build_block(token, CTX) == [
            {"type": "codeBlock", "attrs": {"language": "js"}, "content": [{"type": "text", "text": "x()"}]},
        ]

    def test_empty_code_block(self):
        assert build_block({"type": "block_code", "raw": ""}, CTX) == [
            {"type": "codeBlock", "attrs": {"language": None}},
        ]

    def test_rule(self):
        assert build_block({"type": "thematic_break"}, CTX) == [{"type": "horizontalRule"}]

    def test_html_block_is_inert_text(self):
        assert build_block({"type": "html_block", "raw": "<br>\n"}, CTX) == [
            {"type": "paragraph", "content": [{"type": "text", "text": "<br>"}]},
        ]

    def test_blank_html_block_dropped(self):
        assert build_block({"type": "html_block", "raw": "  \n"}, CTX) == []

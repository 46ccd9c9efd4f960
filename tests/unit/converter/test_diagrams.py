"""Tests for converter/diagrams.py"""

import copy

import pytest

from mdbridge.converter.diagrams import DIAGRAM_LANGUAGES, diagram_type, transform_diagram_code_blocks
from mdbridge.errors import ErrorCode


def _code(language, code):
    node = {"type": "codeBlock", "attrs": {"language": language}}
    if code:
        node["content"] = [{"type": "text", "text": code}]
    return node


def _doc(*blocks):
    return {"type": "doc", "content": list(blocks)}


# =========================================================================
# diagram_type
# =========================================================================

class TestDiagramType:

    @pytest.mark.parametrize(
        ("language", "expected"),
        [
            ("mermaid", "mermaid"),
            ("MERMAID", "mermaid"),
            ("dot", "graphviz"),
            ("graphviz", "graphviz"),
            ("dot {engine=neato}", "graphviz"),
        ],
    )
    def test_known(self, language, expected):
        assert diagram_type(language) == expected

    @pytest.mark.parametrize("language", ["python", "", "   ", None, 3])
    def test_unknown(self, language):
        assert diagram_type(language) is None

    def test_language_table(self):
        assert set(DIAGRAM_LANGUAGES.values()) == {"mermaid", "graphviz"}


# =========================================================================
# transform_diagram_code_blocks
# =========================================================================

class TestTransform:

    def test_rewrites_recognized_block(self):
        tree = _doc(_code("mermaid", "graph TD; A-->B"))
        assert transform_diagram_code_blocks(tree) == _doc(
            {"type": "diagram", "attrs": {"code": "graph TD; A-->B", "type": "mermaid"}},
        )

    def test_other_code_untouched(self):
        tree = _doc(_code("python", "print(1)"), _code(None, "plain"))
        assert transform_diagram_code_blocks(tree) == tree

    def test_nested_blocks_rewritten(self):
        tree = _doc({
            "type": "callout",
            "attrs": {"type": "info"},
            "content": [_code("dot", "digraph { a -> b }")],
        })
        out = transform_diagram_code_blocks(tree)
        assert out["content"][0]["content"][0] == {
            "type": "diagram",
            "attrs": {"code": "digraph { a -> b }", "type": "graphviz"},
        }

    def test_input_not_modified(self):
        tree = _doc(_code("mermaid", "graph LR"))
        snapshot = copy.deepcopy(tree)
        transform_diagram_code_blocks(tree)
        assert tree == snapshot

    def test_empty_diagram_left_as_code(self):
        warnings = []
        tree = _doc(_code("mermaid", ""), _code("dot", "  \n"))
        assert transform_diagram_code_blocks(tree, warnings) == tree
        assert [w.code for w in warnings] == [ErrorCode.DIAGRAM_TRANSFORM_SKIPPED] * 2
        assert warnings[0].context == {"language": "mermaid"}

    def test_leaf_root(self):
        assert transform_diagram_code_blocks({"type": "text", "text": "x"}) == {"type": "text", "text": "x"}

"""Tests for converter/tables.py"""

from mdbridge.converter.tables import build_table, render_table


def _reduce(children):
    return [{"type": "text", "text": c["raw"]} for c in children if c.get("raw")]


def _render(content):
    return "".join(n.get("text", "") for n in content)


def _cell(kind, text, align=None):
    para = {"type": "paragraph"}
    if text:
        para["content"] = [{"type": "text", "text": text}]
    return {"type": kind, "attrs": {"align": align}, "content": [para]}


# =========================================================================
# build_table
# =========================================================================

class TestBuildTable:

    def test_head_and_body(self):
        token = {"type": "table", "children": [
            {"type": "table_head", "children": [
                {"type": "table_cell", "attrs": {"align": "left"}, "children": [{"type": "text", "raw": "h"}]},
            ]},
            {"type": "table_body", "children": [
                {"type": "table_row", "children": [
                    {"type": "table_cell", "attrs": {"align": "left"}, "children": [{"type": "text", "raw": "v"}]},
                ]},
            ]},
        ]}
        assert build_table(token, _reduce) == {"type": "table", "content": [
            {"type": "tableRow", "content": [_cell("tableHeader", "h", "left")]},
            {"type": "tableRow", "content": [_cell("tableCell", "v", "left")]},
        ]}

    def test_empty_cell_gets_empty_paragraph(self):
        token = {"type": "table", "children": [
            {"type": "table_head", "children": [{"type": "table_cell", "children": []}]},
        ]}
        row = build_table(token, _reduce)["content"][0]
        assert row["content"][0]["content"] == [{"type": "paragraph"}]

    def test_no_rows(self):
        assert build_table({"type": "table"}, _reduce) == {"type": "table", "content": []}


# =========================================================================
# render_table
# =========================================================================

class TestRenderTable:

    def test_alignment_row(self):
        node = {"type": "table", "content": [
            {"type": "tableRow", "content": [
                _cell("tableHeader", "l", "left"),
                _cell("tableHeader", "c", "center"),
                _cell("tableHeader", "r", "right"),
                _cell("tableHeader", "n"),
            ]},
        ]}
        assert render_table(node, _render) == "| l | c | r | n |\n| :--- | :---: | ---: | --- |"

    def test_ragged_rows_padded(self):
        node = {"type": "table", "content": [
            {"type": "tableRow", "content": [_cell("tableHeader", "a"), _cell("tableHeader", "b")]},
            {"type": "tableRow", "content": [_cell("tableCell", "1")]},
        ]}
        assert render_table(node, _render) == "| a | b |\n| --- | --- |\n| 1 |  |"

    def test_first_row_is_header_even_without_header_cells(self):
        node = {"type": "table", "content": [
            {"type": "tableRow", "content": [_cell("tableCell", "x")]},
        ]}
        assert render_table(node, _render) == "| x |\n| --- |"

    def test_multiline_cell_flattened(self):
        node = {"type": "table", "content": [
            {"type": "tableRow", "content": [_cell("tableHeader", "a\nb")]},
        ]}
        assert render_table(node, _render).splitlines()[0] == "| a b |"

    def test_empty_table(self):
        assert render_table({"type": "table", "content": []}, _render) == ""

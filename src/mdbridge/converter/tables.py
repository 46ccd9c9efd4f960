"""Table conversion between the mistune table AST and ``table`` nodes.

Parsing reads the normalized token produced by mistune's ``table``
plugin::

    {"type": "table", "children": [
        {"type": "table_head", "children": [<table_cell>, ...]},
        {"type": "table_body", "children": [
            {"type": "table_row", "children": [<table_cell>, ...]}, ...]}]}

and builds::

    {"type": "table", "content": [
        {"type": "tableRow", "content": [
            {"type": "tableHeader", "attrs": {"align": None},
             "content": [{"type": "paragraph", "content": [...]}]}, ...]},
        {"type": "tableRow", "content": [
            {"type": "tableCell", ...}, ...]}]}

Serialization writes a GFM pipe table.  The first row is always emitted
as the header row, because GFM cannot express a table without one.
"""

from __future__ import annotations

from collections.abc import Callable

InlineReducer = Callable[[list[dict]], list[dict]]
InlineRenderer = Callable[[list[dict]], str]

_ALIGN_RULES: dict[str | None, str] = {
    None: "---",
    "left": ":---",
    "center": ":---:",
    "right": "---:",
}


# ---------------------------------------------------------------------------
# Markdown -> nodes
# ---------------------------------------------------------------------------

def build_table(token: dict, reduce_inline: InlineReducer) -> dict:
    """Build a ``table`` node from a normalized table token."""
    rows: list[dict] = []
    for part in token.get("children", []):
        part_type = part.get("type")
        if part_type == "table_head":
            rows.append(_build_row(part.get("children", []), "tableHeader", reduce_inline))
        elif part_type == "table_body":
            for row in part.get("children", []):
                if row.get("type") == "table_row":
                    rows.append(_build_row(row.get("children", []), "tableCell", reduce_inline))
    return {"type": "table", "content": rows}


def _build_row(cells: list[dict], cell_type: str, reduce_inline: InlineReducer) -> dict:
    content: list[dict] = []
    for cell in cells:
        inline = reduce_inline(cell.get("children", []))
        paragraph: dict = {"type": "paragraph"}
        if inline:
            paragraph["content"] = inline
        content.append({
            "type": cell_type,
            "attrs": {"align": cell.get("attrs", {}).get("align")},
            "content": [paragraph],
        })
    return {"type": "tableRow", "content": content}


# ---------------------------------------------------------------------------
# Nodes -> Markdown
# ---------------------------------------------------------------------------

def render_table(node: dict, render_inline: InlineRenderer) -> str:
    """Render a ``table`` node as a GFM pipe table (no trailing newline)."""
    rows = [r for r in node.get("content", []) if r.get("type") == "tableRow"]
    if not rows:
        return ""

    grid: list[list[str]] = []
    aligns: list[str | None] = []
    for row in rows:
        cells = [c for c in row.get("content", []) if c.get("type") in ("tableCell", "tableHeader")]
        grid.append([_render_cell(c, render_inline) for c in cells])
        if not aligns:
            aligns = [c.get("attrs", {}).get("align") for c in cells]

    width = max(len(r) for r in grid)
    if width == 0:
        return ""
    aligns += [None] * (width - len(aligns))

    lines: list[str] = []
    for i, cells in enumerate(grid):
        padded = cells + [""] * (width - len(cells))
        lines.append("| " + " | ".join(padded) + " |")
        if i == 0:
            lines.append("| " + " | ".join(_ALIGN_RULES.get(a, "---") for a in aligns) + " |")
    return "\n".join(lines)


def _render_cell(cell: dict, render_inline: InlineRenderer) -> str:
    parts: list[str] = []
    for block in cell.get("content", []):
        parts.append(render_inline(block.get("content", [])))
    # Pipe tables are single-line
    return " ".join(p for p in parts if p).replace("\n", " ").strip()

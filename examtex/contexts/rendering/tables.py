"""
Tabular Environment Renderer

Turns \\begin{tabular}{colspec} ... \\end{tabular} blocks into HTML tables.

Tables are extracted before any other pipeline step and replaced by placeholder
tokens, so markdown, directive and math rules never see cell separators or column
specs. The finished tables are swapped back in after the math step.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from examtex.contexts.rendering.diagnostics import ErrorCollector
from examtex.contexts.rendering.logger import _log_debug
from examtex.contexts.rendering.math_spans import MathSpanRenderer, Typesetter, typeset
from examtex.contexts.rendering.patterns import TableRegex

# Tables wider than this are wrapped in a horizontally scrollable container
SCROLL_COLUMN_THRESHOLD = 4

ALIGNMENTS = {"l": "left", "c": "center", "r": "right"}


@dataclass
class ColumnSpec:
    """Alignment and border flag for one table column."""

    align: str = "left"
    border: bool = False


def parse_column_spec(column_spec: str) -> List[ColumnSpec]:
    """
    Parse a tabular column spec such as '|l|c|r|'.

    Each letter opens a column; a '|' before a letter (or at the very end) marks
    that column as bordered. Unknown letters align left.

    Example:
        >>> parse_column_spec("|lc|")
        [ColumnSpec(align='left', border=True), ColumnSpec(align='center', border=True)]
    """
    columns: List[ColumnSpec] = []

    for i, char in enumerate(column_spec):
        if char == "|" or char.isspace():
            continue
        border = i > 0 and column_spec[i - 1] == "|"
        columns.append(ColumnSpec(align=ALIGNMENTS.get(char, "left"), border=border))

    if column_spec.rstrip().endswith("|") and columns:
        columns[-1].border = True

    return columns


def parse_table_rows(table_content: str) -> List[List[str]]:
    """Split tabular body into rows on '\\\\' and cells on '&', skipping blank rows."""
    rows = []
    for line in table_content.split(TableRegex.ROW_SEPARATOR):
        if not line.replace(TableRegex.HLINE, "").strip():
            continue
        rows.append([cell.strip() for cell in line.split(TableRegex.CELL_SEPARATOR)])
    return rows


class TableRenderer:
    """
    Extracts tabular environments to placeholders and restores them as HTML.

    Args:
        collector: ErrorCollector for the current render call; cell formula errors
            are recorded here
        typesetter: Engine callable for cell math (default: typeset)
    """

    def __init__(self, collector: ErrorCollector = None, typesetter: Typesetter = typeset):
        self.collector = collector if collector is not None else ErrorCollector()
        self.math_renderer = MathSpanRenderer.for_tables(self.collector, typesetter=typesetter)
        self.placeholders: List[str] = []

    def extract(self, content: str) -> str:
        """Replace each tabular environment with a placeholder token."""
        return TableRegex.TABULAR.sub(self._extract_match, content)

    def restore(self, content: str) -> str:
        """Swap placeholder tokens back for the rendered tables."""
        for index, table_html in enumerate(self.placeholders):
            content = content.replace(TableRegex.PLACEHOLDER.format(index=index), table_html)
        return content

    def _extract_match(self, match: re.Match) -> str:
        options, column_spec, table_content = match.group(1), match.group(2), match.group(3)
        table_html = self.render_table(table_content, column_spec, options)
        placeholder = TableRegex.PLACEHOLDER.format(index=len(self.placeholders))
        self.placeholders.append(table_html)
        return placeholder

    def render_table(
        self, table_content: str, column_spec: str, options: Optional[str] = None
    ) -> str:
        columns = parse_column_spec(column_spec)
        rows = parse_table_rows(table_content)

        table_class = "latex-table"
        table_style = ""
        has_borders = any(column.border for column in columns) or bool(options and "|" in options)
        if has_borders:
            table_class += " latex-table-bordered"
            table_style = "border-collapse: collapse; border: 1px solid #ccc;"

        needs_scroll = len(columns) > SCROLL_COLUMN_THRESHOLD or any(
            len(row) > SCROLL_COLUMN_THRESHOLD for row in rows
        )

        parts = []
        if needs_scroll:
            parts.append('<div class="latex-table-container">')
        parts.append(f'<table class="{table_class}" style="{table_style}">')

        for row in rows:
            parts.append("<tr>")
            for j, cell in enumerate(row):
                column = columns[j] if j < len(columns) else ColumnSpec()
                cell_style = f"text-align: {column.align};"
                if has_borders:
                    cell_style += " border: 1px solid #ccc; padding: 8px;"
                else:
                    cell_style += " padding: 4px 8px;"
                parts.append(f'<td style="{cell_style}">{self.render_cell(cell)}</td>')
            parts.append("</tr>")

        parts.append("</table>")
        if needs_scroll:
            parts.append("</div>")

        _log_debug(f"Rendered table: {len(rows)} rows x {len(columns)} columns")
        return "".join(parts)

    def render_cell(self, cell: str) -> str:
        cell = cell.replace(TableRegex.HLINE, "")
        cell = TableRegex.MULTIROW.sub(
            lambda m: f'<span style="display: inline-block; vertical-align: middle;">{m.group(3)}</span>',
            cell,
        )
        cell = TableRegex.MULTICOLUMN.sub(
            lambda m: f'<span style="text-align: {ALIGNMENTS.get(m.group(2), "left")};">{m.group(3)}</span>',
            cell,
        )
        return self.math_renderer.render(cell.strip())

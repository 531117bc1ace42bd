"""Unit tests for tabular environment rendering."""

import pytest

from examtex.contexts.rendering.diagnostics import ErrorCollector
from examtex.contexts.rendering.tables import (
    ColumnSpec,
    TableRenderer,
    parse_column_spec,
    parse_table_rows,
)


def fake_typesetter(formula, display_mode, size_ceiling, max_expand, macros):
    return f"<M size={size_ceiling}>{formula}</M>"


class TestParseColumnSpec:
    """Tests for parse_column_spec function."""

    def test_bordered(self):
        assert parse_column_spec("|l|c|r|") == [
            ColumnSpec("left", True),
            ColumnSpec("center", True),
            ColumnSpec("right", True),
        ]

    def test_plain(self):
        assert parse_column_spec("lc") == [ColumnSpec("left", False), ColumnSpec("center", False)]

    def test_unknown_letter_aligns_left(self):
        assert parse_column_spec("p")[0].align == "left"


@pytest.mark.unit
def test_parse_table_rows():
    rows = parse_table_rows(r"a & b \\ c & d \\ \hline")
    assert rows == [["a", "b"], ["c", "d"]]


class TestTableRenderer:
    """Tests for TableRenderer extraction and restoration."""

    CONTENT = r"Before \begin{tabular}{|c|c|} $x$ & 2 \\ \end{tabular} after"

    def test_extract_replaces_with_placeholder(self):
        renderer = TableRenderer(typesetter=fake_typesetter)

        extracted = renderer.extract(self.CONTENT)

        assert extracted == "Before __TABLE_PLACEHOLDER_0__ after"
        assert len(renderer.placeholders) == 1

    def test_restore_inserts_table(self):
        renderer = TableRenderer(typesetter=fake_typesetter)

        html = renderer.restore(renderer.extract(self.CONTENT))

        assert html.startswith('Before <table class="latex-table latex-table-bordered"')
        assert html.endswith("</table> after")
        assert "<M size=14>x</M>" in html
        assert "text-align: center;" in html
        assert "latex-table-container" not in html

    def test_wide_table_scrolls(self):
        renderer = TableRenderer(typesetter=fake_typesetter)
        html = renderer.render_table("1 & 2 & 3 & 4 & 5", "lllll")

        assert html.startswith('<div class="latex-table-container">')
        assert html.endswith("</div>")

    def test_unbordered_table(self):
        renderer = TableRenderer(typesetter=fake_typesetter)
        html = renderer.render_table("a & b", "lr")

        assert 'class="latex-table"' in html
        assert "padding: 4px 8px;" in html

    def test_multicolumn_cell(self):
        renderer = TableRenderer(typesetter=fake_typesetter)
        cell = renderer.render_cell(r"\multicolumn{2}{c}{Title}")
        assert cell == '<span style="text-align: center;">Title</span>'

    def test_cell_math_errors_reach_collector(self):
        collector = ErrorCollector()
        renderer = TableRenderer(collector)

        renderer.render_cell(r"$\frac{1}{2$")

        assert collector.error_count == 1

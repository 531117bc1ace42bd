"""
Unit tests for the markdown substitution step.

Tests MarkdownTransformer rules and count_markdown_elements.
"""

import pytest

from examtex.contexts.rendering.markdown import (
    MARKDOWN_RULES,
    MarkdownTransformer,
    count_markdown_elements,
)


class TestMarkdownTransformer:
    """Tests for MarkdownTransformer.transform."""

    def setup_method(self):
        self.transformer = MarkdownTransformer()

    def test_bold(self):
        assert self.transformer.transform("**a**") == "<strong>a</strong>"

    def test_bold_and_italic_together(self):
        result = self.transformer.transform("**a** and *b*")
        assert result == "<strong>a</strong> and <em>b</em>"

    def test_italic_first_breaks_bold(self):
        """Rule order is load-bearing: italic before bold eats the bold delimiters."""
        reversed_rules = [MARKDOWN_RULES[1], MARKDOWN_RULES[0]]
        result = MarkdownTransformer(rules=reversed_rules).transform("**a**")
        assert result == "<em></em>a<em></em>"

    def test_code_and_strikethrough(self):
        result = self.transformer.transform("`x + 1` and ~~old~~")
        assert result == "<code>x + 1</code> and <del>old</del>"

    def test_headings(self):
        result = self.transformer.transform("# A\n## B\n### C")
        assert result == "<h1>A</h1>\n<h2>B</h2>\n<h3>C</h3>"

    def test_heading_requires_line_start(self):
        assert self.transformer.transform("Item # 3") == "Item # 3"

    def test_list_items(self):
        result = self.transformer.transform("- first\n1. second")
        assert result == "<li>first</li>\n<li>second</li>"

    def test_plain_text_unchanged(self):
        text = r"Solve $x^2 = 4$ \subp for x"
        assert self.transformer.transform(text) == text

    def test_math_spans_untouched(self):
        text = r"$a*b$ and $c*d$ or $$\text{`x`}$$"
        assert self.transformer.transform(text) == text

    def test_markdown_may_enclose_math(self):
        result = self.transformer.transform("*where $x$ is real* and **$y$**")
        assert result == "<em>where $x$ is real</em> and <strong>$y$</strong>"


@pytest.mark.unit
def test_count_markdown_elements_no_double_count():
    assert count_markdown_elements("**a** *b* `c`") == 3


@pytest.mark.unit
def test_count_markdown_elements_line_rules():
    assert count_markdown_elements("# Title\n- item\n2. other") == 3


@pytest.mark.unit
def test_count_markdown_elements_ignores_math():
    assert count_markdown_elements("$a*b$ and $c*d$") == 0
    assert count_markdown_elements("*note* $a*b$") == 1


@pytest.mark.unit
def test_count_markdown_elements_empty():
    assert count_markdown_elements("") == 0
    assert count_markdown_elements("plain text") == 0

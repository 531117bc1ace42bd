"""
Markdown Transformer

Ordered, independent text substitutions for the lightweight markdown dialect used in
question content. Only FULL mode runs this step.

This is deliberately not a markdown parser: each rule is one regex pass over the
output of the previous rule, so a delimiter that spans the boundary of an earlier
rule's output is not handled.

Math spans are swapped for placeholder tokens while the rules run, so '*' or '`'
inside a formula is never read as markdown. A markdown span may still enclose a
formula, e.g. '*where $x$ is real*'.
"""

import re
from typing import List, Tuple

from examtex.contexts.rendering.patterns import MarkdownRegex, MathRegex

# (name, pattern, replacement) in application order
MARKDOWN_RULES: List[Tuple[str, re.Pattern, str]] = [
    ("bold", MarkdownRegex.BOLD, r"<strong>\1</strong>"),
    ("italic", MarkdownRegex.ITALIC, r"<em>\1</em>"),
    ("code", MarkdownRegex.CODE, r"<code>\1</code>"),
    ("strikethrough", MarkdownRegex.STRIKETHROUGH, r"<del>\1</del>"),
    ("heading_3", MarkdownRegex.HEADING_3, r"<h3>\1</h3>"),
    ("heading_2", MarkdownRegex.HEADING_2, r"<h2>\1</h2>"),
    ("heading_1", MarkdownRegex.HEADING_1, r"<h1>\1</h1>"),
    ("unordered_item", MarkdownRegex.UNORDERED_ITEM, r"<li>\1</li>"),
    ("ordered_item", MarkdownRegex.ORDERED_ITEM, r"<li>\2</li>"),
]

MATH_PLACEHOLDER = "__MATH_PLACEHOLDER_{index}__"


class MarkdownTransformer:
    """Applies MARKDOWN_RULES in order, outside math spans."""

    def __init__(self, rules: List[Tuple[str, re.Pattern, str]] = None):
        self.rules = MARKDOWN_RULES if rules is None else rules

    def transform(self, content: str) -> str:
        spans: List[str] = []

        def _stash(match: re.Match) -> str:
            spans.append(match.group(0))
            return MATH_PLACEHOLDER.format(index=len(spans) - 1)

        content = MathRegex.SPAN.sub(_stash, content)

        for _, pattern, replacement in self.rules:
            content = pattern.sub(replacement, content)

        for index, span in enumerate(spans):
            content = content.replace(MATH_PLACEHOLDER.format(index=index), span)
        return content


def count_markdown_elements(content: str) -> int:
    """
    Count markdown elements the transformer would rewrite.

    Math spans are ignored. Each rule is counted against the text left after the
    earlier rules' matches are blanked out, so a bold span is not also counted as two
    italic spans.
    """
    if not content:
        return 0

    total = 0
    remaining = MathRegex.SPAN.sub(" ", content)
    for _, pattern, _ in MARKDOWN_RULES:
        matches = pattern.findall(remaining)
        total += len(matches)
        remaining = pattern.sub(" ", remaining)

    return total

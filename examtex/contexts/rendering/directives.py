"""
Question Directive Processor

Expands the exam-authoring directives into HTML:

- \\choice   bracketed blank for multiple-choice stems (not numbered)
- \\fill     longer blank for fill-in-the-blank items (not numbered)
- \\subp     sub-question, numbered (1), (2), ...
- \\subsubp  sub-sub-question, numbered i, ii, ...

Sub-question bodies are found with a flat string scan: a body runs from its marker
up to the next \\subp or \\subsubp (or the end of the text). There is no nesting;
a \\subp written "inside" another \\subp body simply starts the next body. Numbering
depends on this flat scan order.

Math spans inside bodies are left untouched; MathSpanRenderer resolves them later.
"""

from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple

from examtex.contexts.rendering.diagnostics import ErrorCollector, ErrorKind
from examtex.contexts.rendering.logger import _log_debug
from examtex.contexts.rendering.patterns import (
    DirectiveHTML,
    DirectiveRegex,
    DirectiveTokens,
    MathRegex,
)
from examtex.utils.text_processing import to_roman


class NumberingPolicy(str, Enum):
    """
    FULL numbers sub-questions sequentially; SIMPLIFIED uses fixed generic labels
    and does no counting (fast previews).
    """

    FULL = "full"
    SIMPLIFIED = "simplified"


def find_next_marker(text: str, start: int = 0) -> Tuple[int, Optional[str]]:
    """
    Find the next sub-question marker at or after start.

    Returns:
        (position, token), or (-1, None) when no marker remains
    """
    best_pos, best_token = -1, None
    for token in DirectiveTokens.numbered():
        pos = text.find(token, start)
        if pos != -1 and (best_pos == -1 or pos < best_pos):
            best_pos, best_token = pos, token
    return best_pos, best_token


def iter_directive_bodies(text: str) -> Iterator[Tuple[str, str, str, int]]:
    """
    Split text at every sub-question marker.

    Yields (leading_text, token, body, position) for each marker, where leading_text
    is whatever precedes the first marker (empty for later markers), body is the raw
    text up to the next marker, and position is the marker's offset in text.

    Example:
        >>> list(iter_directive_bodies(r"Intro \\subp A \\subsubp B"))
        [('Intro ', '\\\\subp', ' A ', 6), ('', '\\\\subsubp', ' B', 14)]
    """
    pos, token = find_next_marker(text)
    if token is None:
        return

    leading = text[:pos]
    while token is not None:
        body_start = pos + len(token)
        next_pos, next_token = find_next_marker(text, body_start)
        body_end = next_pos if next_token is not None else len(text)

        yield leading, token, text[body_start:body_end], pos

        leading = ""
        pos, token = next_pos, next_token


def clean_body(body: str) -> str:
    """
    Strip sub-question markup left by an earlier directive pass, then trim.

    Number labels are dropped with their text; other wrapper tags are dropped and
    their contents kept. Markdown tags (strong, em, code, ...) are kept.
    """
    body = DirectiveRegex.SUBPROBLEM_NUMBER.sub("", body)
    body = DirectiveRegex.SUBPROBLEM_WRAPPER.sub("", body)
    return body.strip()


def map_outside_math(text: str, transform: Callable[[str], str]) -> str:
    """Apply transform to every segment of text that is not a math span."""
    segments = MathRegex.SPAN.split(text)
    # split() returns each non-math segment followed by the outer match and its inner
    # groups; only the outer match is kept
    result: List[str] = []
    step = MathRegex.SPAN.groups + 1
    for index in range(0, len(segments), step):
        result.append(transform(segments[index]))
        if index + 1 < len(segments):
            result.append(segments[index + 1])
    return "".join(result)


class DirectiveProcessor:
    """
    Replaces question directives with HTML.

    Args:
        policy: FULL for sequential numbering, SIMPLIFIED for generic labels
        collector: ErrorCollector for the current render call
    """

    def __init__(self, policy: NumberingPolicy = NumberingPolicy.FULL,
                 collector: ErrorCollector = None):
        self.policy = policy
        self.collector = collector if collector is not None else ErrorCollector()

    def process(self, content: str) -> str:
        processed = self._render_sub_questions(content)
        processed = map_outside_math(processed, self._render_inline_directives)
        return processed

    def _render_sub_questions(self, content: str) -> str:
        # Counters are local to this call; numbering never carries across renders
        subp_count = 0
        subsubp_count = 0
        parts: List[str] = []
        last_end = 0

        for leading, token, body, position in iter_directive_bodies(content):
            parts.append(leading)
            body_text = clean_body(body)

            if not body_text:
                self.collector.add_warning(
                    ErrorKind.QUESTION_DIRECTIVE,
                    "Empty sub-question body",
                    content=token,
                    position=position,
                )

            if token == DirectiveTokens.SUBP:
                subp_count += 1
                subsubp_count = 0
                parts.append(self._wrap_subp(subp_count, body_text))
            else:
                subsubp_count += 1
                parts.append(self._wrap_subsubp(subsubp_count, body_text))

            last_end = position + len(token) + len(body)

        if not parts:
            return content

        parts.append(content[last_end:])
        _log_debug(f"Expanded sub-questions ({self.policy.value} numbering)")
        return "".join(parts)

    def _wrap_subp(self, count: int, body: str) -> str:
        if self.policy is NumberingPolicy.SIMPLIFIED:
            return DirectiveHTML.SUBP_SIMPLE.format(body=body)
        return DirectiveHTML.SUBP_FULL.format(label=count, body=body)

    def _wrap_subsubp(self, count: int, body: str) -> str:
        if self.policy is NumberingPolicy.SIMPLIFIED:
            return DirectiveHTML.SUBSUBP_SIMPLE.format(body=body)
        return DirectiveHTML.SUBSUBP_FULL.format(label=to_roman(count), body=body)

    @staticmethod
    def _render_inline_directives(segment: str) -> str:
        segment = DirectiveRegex.CHOICE.sub(DirectiveHTML.CHOICE, segment)
        segment = DirectiveRegex.FILL.sub(DirectiveHTML.FILL, segment)
        segment = DirectiveRegex.TEXTBF.sub(DirectiveHTML.TEXTBF, segment)
        segment = DirectiveRegex.TEXTIT.sub(DirectiveHTML.TEXTIT, segment)
        return segment


def count_question_directives(content: str) -> int:
    """Count directive tokens in content, whether or not they would expand."""
    if not content:
        return 0
    return sum(content.count(token) for token in DirectiveTokens.all())

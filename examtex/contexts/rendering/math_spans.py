"""
Math Span Renderer

Finds $$...$$ (display) and $...$ (inline) spans and hands each formula to the
typesetting engine. Display spans are resolved first so the inline scan never reads
a '$$' delimiter as two inline delimiters.

A formula the engine rejects never aborts the render: the failure is recorded in the
call's ErrorCollector and the span is replaced by a visible marker that still shows
the formula text.

The engine is any callable with the typeset() signature below. The default wraps
latex2mathml, adding the size and macro-expansion ceilings and the brace check that
KaTeX enforces.
"""

import re
from typing import Callable, Dict, Optional

import latex2mathml.converter

from examtex.contexts.rendering.diagnostics import ErrorCollector, ErrorKind
from examtex.contexts.rendering.exceptions import MathRenderError, MathSyntaxError
from examtex.contexts.rendering.logger import _log_debug
from examtex.contexts.rendering.patterns import (
    DirectiveTokens,
    MathCeilings,
    MathMacros,
    MathRegex,
)
from examtex.utils.text_processing import find_unescaped_imbalance

# Explicit em dimensions, e.g. \rule{50em}{1pt} or \hspace{3.5em}
EM_DIMENSION_PATTERN = re.compile(r'(\d+(?:\.\d+)?)\s*em\b')

# Unescaped dollar sign left over after both scans
STRAY_DELIMITER_PATTERN = re.compile(r'(?<!\\)\$')

# Directive tokens as whole commands, e.g. \fill but not \fillcolor
DIRECTIVE_TOKEN_PATTERNS = {
    token: re.compile(re.escape(token) + r'(?![A-Za-z])') for token in DirectiveTokens.all()
}

Typesetter = Callable[[str, bool, float, int, Dict[str, str]], str]


def expand_macros(formula: str, macros: Dict[str, str], max_expand: int) -> str:
    """
    Expand macro aliases until none remain.

    A macro name only matches when not followed by another letter, so '\\subp' does
    not match inside '\\subparagraph'.

    Raises:
        MathSyntaxError: If more than max_expand expansions are needed
    """
    if not macros:
        return formula

    patterns = [
        (re.compile(re.escape(name) + r'(?![A-Za-z])'), replacement)
        for name, replacement in macros.items()
    ]

    expansions = 0
    while True:
        changed = 0
        for pattern, replacement in patterns:
            formula, count = pattern.subn(lambda _, r=replacement: r, formula)
            changed += count
        if not changed:
            return formula

        expansions += changed
        if expansions > max_expand:
            raise MathSyntaxError(
                f"Too many expansions: macro expansion ceiling of {max_expand} exceeded",
                content=formula,
            )


def clamp_sizes(formula: str, size_ceiling: float) -> str:
    """Clamp explicit em dimensions above size_ceiling down to it."""

    def _clamp(match: re.Match) -> str:
        value = float(match.group(1))
        if value <= size_ceiling:
            return match.group(0)
        return f"{size_ceiling:g}em"

    return EM_DIMENSION_PATTERN.sub(_clamp, formula)


def typeset(
    formula: str,
    display_mode: bool,
    size_ceiling: float = MathCeilings.BLOCK_SIZE,
    macro_expansion_ceiling: int = MathCeilings.MAX_EXPAND,
    macros: Optional[Dict[str, str]] = None,
) -> str:
    """
    Typeset one formula to HTML (MathML wrapped in a span or div).

    Args:
        formula: LaTeX math source, without delimiters
        display_mode: True for display ($$) spans, False for inline ($) spans
        size_ceiling: Largest explicit size in em; larger sizes are clamped
        macro_expansion_ceiling: Maximum number of macro expansions
        macros: Alias name -> replacement, expanded before conversion

    Returns:
        HTML fragment

    Raises:
        MathSyntaxError: If the formula is malformed or the engine rejects it
    """
    expanded = expand_macros(formula, macros or {}, macro_expansion_ceiling)

    position = find_unescaped_imbalance(expanded)
    if position != -1:
        raise MathSyntaxError("Unbalanced braces in formula", content=formula, position=position)

    expanded = clamp_sizes(expanded, size_ceiling)

    if display_mode:
        wrapper_open, wrapper_close = '<div class="math math-display">', '</div>'
    else:
        wrapper_open, wrapper_close = '<span class="math math-inline">', '</span>'

    if not expanded.strip():
        return wrapper_open + wrapper_close

    try:
        mathml = latex2mathml.converter.convert(
            expanded, display="block" if display_mode else "inline"
        )
    except Exception as e:
        # latex2mathml signals malformed input with assorted exception types
        raise MathSyntaxError(str(e) or type(e).__name__, content=formula) from e

    return f"{wrapper_open}{mathml}{wrapper_close}"


class MathSpanRenderer:
    """
    Replaces math spans with typeset HTML.

    Args:
        collector: ErrorCollector for the current render call
        block_size: Size ceiling for display spans
        inline_size: Size ceiling for inline spans
        max_expand: Macro-expansion ceiling for every span
        block_macros: Macro aliases for display spans
        inline_macros: Macro aliases for inline spans
        typesetter: Engine callable (default: typeset)
    """

    def __init__(
        self,
        collector: ErrorCollector = None,
        block_size: float = MathCeilings.BLOCK_SIZE,
        inline_size: float = MathCeilings.INLINE_SIZE,
        max_expand: int = MathCeilings.MAX_EXPAND,
        block_macros: Optional[Dict[str, str]] = None,
        inline_macros: Optional[Dict[str, str]] = None,
        typesetter: Typesetter = typeset,
    ):
        self.collector = collector if collector is not None else ErrorCollector()
        self.block_size = block_size
        self.inline_size = inline_size
        self.max_expand = max_expand
        self.block_macros = dict(MathMacros.BLOCK if block_macros is None else block_macros)
        self.inline_macros = dict(MathMacros.INLINE if inline_macros is None else inline_macros)
        self.typesetter = typesetter

    @classmethod
    def full(cls, collector: ErrorCollector, typesetter: Typesetter = typeset) -> "MathSpanRenderer":
        """Ceilings and aliases for FULL mode."""
        return cls(collector, typesetter=typesetter)

    @classmethod
    def compact(cls, collector: ErrorCollector, typesetter: Typesetter = typeset) -> "MathSpanRenderer":
        """Tighter ceilings, for LIGHTWEIGHT and PREVIEW modes."""
        return cls(
            collector,
            block_size=MathCeilings.COMPACT_BLOCK_SIZE,
            inline_size=MathCeilings.COMPACT_INLINE_SIZE,
            typesetter=typesetter,
        )

    @classmethod
    def for_tables(cls, collector: ErrorCollector, typesetter: Typesetter = typeset) -> "MathSpanRenderer":
        """Ceilings for formulas inside table cells."""
        return cls(
            collector,
            block_size=MathCeilings.COMPACT_BLOCK_SIZE,
            inline_size=MathCeilings.COMPACT_INLINE_SIZE,
            block_macros={},
            typesetter=typesetter,
        )

    def render(self, content: str) -> str:
        processed = MathRegex.BLOCK.sub(self._render_block, content)
        processed = MathRegex.INLINE.sub(self._render_inline, processed)

        stray = STRAY_DELIMITER_PATTERN.search(processed)
        if stray:
            self.collector.add_warning(
                ErrorKind.MATH,
                "Unterminated math delimiter",
                content=processed[stray.start():stray.start() + 40],
                position=stray.start(),
            )

        return processed

    def _render_block(self, match: re.Match) -> str:
        return self._render_span(match.group(1), True, match.start())

    def _render_inline(self, match: re.Match) -> str:
        return self._render_span(match.group(1), False, match.start())

    def _render_span(self, formula: str, display_mode: bool, position: int) -> str:
        size = self.block_size if display_mode else self.inline_size
        macros = self.block_macros if display_mode else self.inline_macros
        self._warn_unexpanded_directives(formula, macros, position)
        try:
            return self.typesetter(formula, display_mode, size, self.max_expand, macros)
        except MathRenderError as e:
            _log_debug(f"Formula rejected at {position}: {e.message}")
            return self.collector.handle_math_error(formula, e, position=position)

    def _warn_unexpanded_directives(
        self, formula: str, macros: Dict[str, str], position: int
    ) -> None:
        # Directives are expanded outside math only; inside a span they need an alias
        for token, pattern in DIRECTIVE_TOKEN_PATTERNS.items():
            if token not in macros and pattern.search(formula):
                self.collector.add_warning(
                    ErrorKind.QUESTION_DIRECTIVE,
                    f"Question directive {token} inside math span is not expanded",
                    content=formula,
                    position=position,
                )


def count_formulas(content: str) -> int:
    """Count display spans, then inline spans in what remains."""
    if not content:
        return 0
    block_count = len(MathRegex.BLOCK.findall(content))
    remaining = MathRegex.BLOCK.sub(" ", content)
    return block_count + len(MathRegex.INLINE.findall(remaining))

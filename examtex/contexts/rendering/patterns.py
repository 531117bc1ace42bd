"""
Rendering Pattern Constants

Centralized delimiter strings, regex patterns and numeric ceilings used by the
rendering pipeline. Organized into frozen dataclasses by category for immutability
and clear grouping.
"""

import re
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class DirectiveTokens:
    """
    Question-authoring directive markers.

    SUBP and SUBSUBP share a prefix only in their names; the literal token
    '\\subp' never occurs inside '\\subsubp', so plain string search can tell
    them apart.
    """
    CHOICE: str = r'\choice'
    FILL: str = r'\fill'
    SUBP: str = r'\subp'
    SUBSUBP: str = r'\subsubp'

    @classmethod
    def all(cls) -> List[str]:
        """Return list of all directive tokens."""
        return [cls.CHOICE, cls.FILL, cls.SUBP, cls.SUBSUBP]

    @classmethod
    def numbered(cls) -> List[str]:
        """Return the tokens that open a sub-question body."""
        return [cls.SUBP, cls.SUBSUBP]


@dataclass(frozen=True)
class DirectiveRegex:
    """
    Compiled patterns for directives that need no body scan.

    Blank markers accept an optional single-level brace argument, which is discarded.
    """
    CHOICE = re.compile(r'\\choice\s*(\{[^}]*\})?')
    FILL = re.compile(r'\\fill\s*(\{[^}]*\})?')
    TEXTBF = re.compile(r'\\textbf\{([^}]*)\}')
    TEXTIT = re.compile(r'\\textit\{([^}]*)\}')

    # Markup left behind by an earlier directive pass
    SUBPROBLEM_NUMBER = re.compile(r'<span class="subproblem-number">.*?</span>', re.DOTALL)
    SUBPROBLEM_WRAPPER = re.compile(r'</?(?:div|span)\b[^>]*>')


@dataclass(frozen=True)
class DirectiveHTML:
    """HTML fragments emitted for directives."""
    CHOICE: str = '<span class="choice-bracket">(&nbsp;&nbsp;&nbsp;&nbsp;&nbsp;&nbsp;&nbsp;&nbsp;)</span>'
    FILL: str = (
        '<span class="fill-blank">'
        '&nbsp;&nbsp;&nbsp;&nbsp;&nbsp;&nbsp;&nbsp;&nbsp;&nbsp;&nbsp;'
        '</span>'
    )
    SUBP_FULL: str = (
        '<div class="subproblem"><span class="subproblem-number">({label})</span> {body}</div>'
    )
    SUBSUBP_FULL: str = (
        '<div class="subproblem subproblem-sub">'
        '<span class="subproblem-number">{label}</span> {body}</div>'
    )
    SUBP_SIMPLE: str = (
        '<span class="subproblem"><span class="subproblem-number">(sub-part)</span> {body}</span>'
    )
    SUBSUBP_SIMPLE: str = (
        '<span class="subproblem subproblem-sub">'
        '<span class="subproblem-number">(sub-sub-part)</span> {body}</span>'
    )
    TEXTBF: str = r'<span class="latex-bold">\1</span>'
    TEXTIT: str = r'<span class="latex-italic">\1</span>'


@dataclass(frozen=True)
class MathRegex:
    """
    Math span delimiters.

    BLOCK must run before INLINE so '$$' is never read as two inline delimiters.
    A backslash-escaped '\\$' never opens or closes a span. SPAN matches either kind,
    display first.
    """
    BLOCK = re.compile(r'(?<!\\)\$\$([\s\S]*?)(?<!\\)\$\$')
    INLINE = re.compile(r'(?<!\\)\$([^$]*?)(?<!\\)\$')
    SPAN = re.compile(f"({BLOCK.pattern}|{INLINE.pattern})")
    DELIMITER: str = '$'


@dataclass(frozen=True)
class MathCeilings:
    """
    Numeric ceilings handed to the typesetting engine.

    SIZE values are in em; inline spans get tighter ceilings than display spans.
    The COMPACT pair applies to lightweight and preview renders and to table cells.
    """
    BLOCK_SIZE: float = 20
    INLINE_SIZE: float = 16
    COMPACT_BLOCK_SIZE: float = 16
    COMPACT_INLINE_SIZE: float = 14
    MAX_EXPAND: int = 1000


@dataclass(frozen=True)
class MathMacros:
    """
    Convenience aliases expanded only inside math spans.

    Directive tokens written inside a math span typeset as their labels instead of
    failing as unknown commands. Spacing commands stay outside \\text runs, where
    they would print literally.
    """
    CHOICE = r'\text{(}\quad\quad\text{)}'
    BLOCK = {
        r'\subp': r'\textbf{(1)}',
        r'\subsubp': r'\textbf{i}',
        r'\choice': CHOICE,
    }
    INLINE = {
        r'\choice': CHOICE,
    }


@dataclass(frozen=True)
class MarkdownRegex:
    """
    Markdown substitution rules, in application order.

    BOLD before ITALIC is load-bearing: both use '*', and italic would otherwise
    consume the inner pair of a bold delimiter. Inline rules run before the
    line-structural ones (headings, list items).
    """
    BOLD = re.compile(r'\*\*(.*?)\*\*')
    ITALIC = re.compile(r'\*(.*?)\*')
    CODE = re.compile(r'`(.*?)`')
    STRIKETHROUGH = re.compile(r'~~(.*?)~~')
    HEADING_3 = re.compile(r'^### (.*)$', re.MULTILINE)
    HEADING_2 = re.compile(r'^## (.*)$', re.MULTILINE)
    HEADING_1 = re.compile(r'^# (.*)$', re.MULTILINE)
    UNORDERED_ITEM = re.compile(r'^- (.*)$', re.MULTILINE)
    ORDERED_ITEM = re.compile(r'^(\d+)\. (.*)$', re.MULTILINE)


@dataclass(frozen=True)
class TableRegex:
    """Tabular environment patterns."""
    TABULAR = re.compile(
        r'\\begin\{tabular\}(\[[^\]]*\])?\{([^}]*)\}([\s\S]*?)\\end\{tabular\}'
    )
    MULTIROW = re.compile(r'\\multirow\{(\d+)\}\{([^}]*)\}\{([^}]*)\}')
    MULTICOLUMN = re.compile(r'\\multicolumn\{(\d+)\}\{([^}]*)\}\{([^}]*)\}')
    HLINE: str = r'\hline'
    ROW_SEPARATOR: str = '\\\\'
    CELL_SEPARATOR: str = '&'
    PLACEHOLDER: str = '__TABLE_PLACEHOLDER_{index}__'


@dataclass(frozen=True)
class PreviewLimits:
    """Preview-mode truncation."""
    MAX_CHARS: int = 100
    MARKER: str = '...'

"""
Render Diagnostics

Typed error/warning/info records collected while rendering one piece of content.

An ErrorCollector belongs to exactly one render call. The pipeline creates a fresh
collector per call and hands it to each step, so concurrent or repeated renders
never see each other's records.
"""

import html
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from examtex.contexts.rendering.logger import _log_debug


class ErrorKind(str, Enum):
    """Which pipeline step produced a record."""

    MATH = "math"
    MARKDOWN = "markdown"
    QUESTION_DIRECTIVE = "question-directive"


class Severity(str, Enum):
    """How serious a record is. Only ERROR sets RenderResult.error."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class ErrorRecord:
    """
    One diagnostic produced during a render call.

    Attributes:
        kind: Pipeline step that produced the record
        severity: ERROR, WARNING or INFO
        message: Human-readable description
        content: Offending content snippet (formula, directive, markdown)
        position: Offset within the text being processed, when known
    """

    kind: ErrorKind
    severity: Severity
    message: str
    content: Optional[str] = None
    position: Optional[int] = None


class ErrorCollector:
    """
    Accumulates ErrorRecords for a single render call.

    Records are kept in one list in collection order; errors and warnings are
    filtered views of it.
    """

    def __init__(self):
        self._records: List[ErrorRecord] = []

    def add_error(
        self,
        kind: ErrorKind,
        message: str,
        content: Optional[str] = None,
        position: Optional[int] = None,
    ) -> ErrorRecord:
        record = ErrorRecord(kind, Severity.ERROR, message, content, position)
        self._records.append(record)
        _log_debug(f"{kind.value} error: {message}")
        return record

    def add_warning(
        self,
        kind: ErrorKind,
        message: str,
        content: Optional[str] = None,
        position: Optional[int] = None,
    ) -> ErrorRecord:
        record = ErrorRecord(kind, Severity.WARNING, message, content, position)
        self._records.append(record)
        _log_debug(f"{kind.value} warning: {message}")
        return record

    def add_info(
        self,
        kind: ErrorKind,
        message: str,
        content: Optional[str] = None,
        position: Optional[int] = None,
    ) -> ErrorRecord:
        record = ErrorRecord(kind, Severity.INFO, message, content, position)
        self._records.append(record)
        return record

    @property
    def errors(self) -> List[ErrorRecord]:
        return [r for r in self._records if r.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[ErrorRecord]:
        """Warning and info records, in the order they were added."""
        return [r for r in self._records if r.severity is not Severity.ERROR]

    @property
    def records(self) -> List[ErrorRecord]:
        """All records, in the order they were added."""
        return list(self._records)

    def has_errors(self) -> bool:
        return any(r.severity is Severity.ERROR for r in self._records)

    def has_warnings(self) -> bool:
        return any(r.severity is not Severity.ERROR for r in self._records)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def clear(self) -> None:
        self._records.clear()

    # Step-specific handlers: record the failure and return the inline marker
    # that replaces the offending content in the output.

    def handle_math_error(
        self, formula: str, error: Exception, position: Optional[int] = None
    ) -> str:
        """
        Record a rejected formula and return its inline error marker.

        The marker keeps the original formula text visible so the author can find
        and fix it.
        """
        message = getattr(error, "message", None) or str(error) or "LaTeX render error"
        self.add_error(ErrorKind.MATH, message, content=formula, position=position)
        return f'<span class="math-error">LaTeX error: {html.escape(formula)}</span>'

    def handle_markdown_error(
        self, content: str, error: Exception, position: Optional[int] = None
    ) -> str:
        """Record a markdown failure; the original content is kept unchanged."""
        message = getattr(error, "message", None) or str(error) or "Markdown parse error"
        self.add_error(ErrorKind.MARKDOWN, message, content=content, position=position)
        return content

    def handle_directive_error(
        self, directive: str, error: Exception, position: Optional[int] = None
    ) -> str:
        """Record a rejected directive and return its inline error marker."""
        message = getattr(error, "message", None) or str(error) or "Question directive error"
        self.add_error(
            ErrorKind.QUESTION_DIRECTIVE, message, content=directive, position=position
        )
        return f'<span class="directive-error">Directive error: {html.escape(directive)}</span>'

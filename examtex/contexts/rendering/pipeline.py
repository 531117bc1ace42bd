"""
Render Pipeline

Compiles author content (markdown, math, question directives) into an HTML fragment.

Modes:
    FULL         markdown -> directives (numbered) -> math
    LIGHTWEIGHT  directives (generic labels) -> math, compact ceilings
    PREVIEW      LIGHTWEIGHT on input truncated to PreviewLimits.MAX_CHARS

Tabular environments are lifted out before the first step and restored after the
last in every mode.

render() never raises for malformed author content. Failures are isolated to the
span that caused them and reported through RenderResult.error / warnings.

Example:
    >>> from examtex.contexts.rendering import render, RenderConfig, RenderMode
    >>> result = render(r"Solve \\subp $x^2 = 4$ \\subp $x^3 = 8$")
    >>> result.metadata.formula_count
    2
    >>> preview = render(long_text, RenderConfig(mode=RenderMode.PREVIEW))
"""

from dataclasses import dataclass, field
from typing import List, Optional

from examtex.contexts.rendering.cache import RenderCache, get_shared_cache, make_cache_key
from examtex.contexts.rendering.config import ErrorHandling, RenderConfig, RenderMode
from examtex.contexts.rendering.diagnostics import ErrorCollector, ErrorKind, ErrorRecord
from examtex.contexts.rendering.directives import (
    DirectiveProcessor,
    NumberingPolicy,
    count_question_directives,
)
from examtex.contexts.rendering.logger import _log_debug, _log_warning
from examtex.contexts.rendering.markdown import MarkdownTransformer, count_markdown_elements
from examtex.contexts.rendering.math_spans import (
    MathSpanRenderer,
    Typesetter,
    count_formulas,
    typeset,
)
from examtex.contexts.rendering.patterns import PreviewLimits
from examtex.contexts.rendering.tables import TableRenderer


@dataclass(frozen=True)
class RenderMetadata:
    """
    Counts taken from the original, untransformed input.

    They depend only on the input, never on cache state or on whether a
    substitution succeeded.
    """

    formula_count: int = 0
    question_directive_count: int = 0
    markdown_element_count: int = 0

    @classmethod
    def from_content(cls, content: str) -> "RenderMetadata":
        return cls(
            formula_count=count_formulas(content),
            question_directive_count=count_question_directives(content),
            markdown_element_count=count_markdown_elements(content),
        )


@dataclass
class RenderResult:
    """
    Result of one render call.

    Attributes:
        html: Compiled HTML fragment
        error: Summary message, set iff an error-severity record was collected
        warnings: Messages of all warning and info records, in order
        metadata: Counts from the original input
        records: Every ErrorRecord collected during the call
        cache_hit: True when html came from the cache
    """

    html: str
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    metadata: RenderMetadata = field(default_factory=RenderMetadata)
    records: List[ErrorRecord] = field(default_factory=list)
    cache_hit: bool = False


def truncate_for_preview(content: str, max_chars: int = PreviewLimits.MAX_CHARS) -> str:
    """
    Cut content to max_chars and append the truncation marker.

    The cut is purely positional and may split a formula or directive; downstream
    steps tolerate the dangling delimiter.
    """
    if len(content) <= max_chars:
        return content
    return content[:max_chars] + PreviewLimits.MARKER


class RenderPipeline:
    """
    Mode dispatcher for the rendering steps.

    The pipeline holds no per-call state: each render() builds its own
    ErrorCollector and step instances, so one pipeline may serve concurrent callers.

    Args:
        config: RenderConfig (default: RenderConfig())
        cache: RenderCache to consult; defaults to the process-shared cache for
            config.cache.max_entries. Ignored when config.cache.enabled is False.
        typesetter: Math engine callable (default: typeset over latex2mathml)
    """

    def __init__(
        self,
        config: RenderConfig = None,
        cache: RenderCache = None,
        typesetter: Typesetter = typeset,
    ):
        self.config = config if config is not None else RenderConfig()
        self.typesetter = typesetter

        if not self.config.cache.enabled:
            self.cache = None
        elif cache is not None:
            self.cache = cache
        else:
            self.cache = get_shared_cache(self.config.cache.max_entries)

        if self.config.error_handling is ErrorHandling.STRICT:
            _log_warning("Strict error handling is not implemented; rendering leniently")

    def render(self, content: Optional[str]) -> RenderResult:
        if not content:
            return RenderResult(html="")

        metadata = RenderMetadata.from_content(content)
        collector = ErrorCollector()

        cache_key = make_cache_key(content, self.config.mode)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                _log_debug(f"Cache hit: {cache_key}")
                return RenderResult(html=cached, metadata=metadata, cache_hit=True)

        if self.config.mode is RenderMode.FULL:
            html = self._render_full(content, collector)
        elif self.config.mode is RenderMode.LIGHTWEIGHT:
            html = self._render_lightweight(content, collector)
        else:
            html = self._render_preview(content, collector)

        if self.cache is not None:
            self.cache.set(cache_key, html)

        return self._build_result(html, metadata, collector)

    def _render_full(self, content: str, collector: ErrorCollector) -> str:
        features = self.config.features
        tables = TableRenderer(collector, typesetter=self.typesetter)
        processed = tables.extract(content)

        if features.markdown:
            processed = MarkdownTransformer().transform(processed)

        # features.auto_numbering is reserved: FULL always numbers
        if features.question_syntax:
            processed = DirectiveProcessor(NumberingPolicy.FULL, collector).process(processed)

        processed = MathSpanRenderer.full(collector, typesetter=self.typesetter).render(processed)

        return tables.restore(processed)

    def _render_lightweight(self, content: str, collector: ErrorCollector) -> str:
        tables = TableRenderer(collector, typesetter=self.typesetter)
        processed = tables.extract(content)

        if self.config.features.question_syntax:
            processed = DirectiveProcessor(NumberingPolicy.SIMPLIFIED, collector).process(
                processed
            )

        processed = MathSpanRenderer.compact(collector, typesetter=self.typesetter).render(
            processed
        )

        return tables.restore(processed)

    def _render_preview(self, content: str, collector: ErrorCollector) -> str:
        truncated = truncate_for_preview(content)
        if truncated != content:
            collector.add_info(
                ErrorKind.MARKDOWN,
                f"Content truncated to {PreviewLimits.MAX_CHARS} characters for preview",
                position=PreviewLimits.MAX_CHARS,
            )
        return self._render_lightweight(truncated, collector)

    @staticmethod
    def _build_result(
        html: str, metadata: RenderMetadata, collector: ErrorCollector
    ) -> RenderResult:
        error = None
        if collector.has_errors():
            error = f"Rendering produced {collector.error_count} error(s)"

        return RenderResult(
            html=html,
            error=error,
            warnings=[record.message for record in collector.warnings],
            metadata=metadata,
            records=collector.records,
        )


def render(
    content: Optional[str],
    config: RenderConfig = None,
    cache: RenderCache = None,
) -> RenderResult:
    """
    Render content with config.

    Args:
        content: Author content; None or "" yields an empty result
        config: RenderConfig (default: RenderConfig())
        cache: Cache to use instead of the process-shared one

    Returns:
        RenderResult
    """
    return RenderPipeline(config, cache=cache).render(content)

"""
Rendering Context

Responsibilities:
- Compiles question content (markdown, math, exam directives) to HTML fragments
- Caches compiled HTML with bounded capacity and lazy expiry
- Collects per-call errors and warnings without ever raising on author content

Owns: Directive expansion, markdown substitution, math typesetting calls, render cache
Never: Stores or fetches authored content, serves HTTP
"""

from examtex.contexts.rendering.cache import (
    CacheEntry,
    CacheStats,
    RenderCache,
    get_shared_cache,
    make_cache_key,
)
from examtex.contexts.rendering.config import (
    CacheSettings,
    ErrorHandling,
    RenderConfig,
    RenderFeatures,
    RenderMode,
    load_render_config,
)
from examtex.contexts.rendering.diagnostics import (
    ErrorCollector,
    ErrorKind,
    ErrorRecord,
    Severity,
)
from examtex.contexts.rendering.directives import DirectiveProcessor, NumberingPolicy
from examtex.contexts.rendering.exceptions import (
    MarkdownParseError,
    MathRenderError,
    MathSyntaxError,
    QuestionDirectiveError,
    RenderError,
)
from examtex.contexts.rendering.markdown import MarkdownTransformer
from examtex.contexts.rendering.math_spans import MathSpanRenderer, typeset
from examtex.contexts.rendering.pipeline import (
    RenderMetadata,
    RenderPipeline,
    RenderResult,
    render,
)
from examtex.contexts.rendering.tables import TableRenderer

__all__ = [
    # Entry points
    "render",
    "RenderPipeline",
    "RenderResult",
    "RenderMetadata",
    # Configuration
    "RenderConfig",
    "RenderMode",
    "RenderFeatures",
    "CacheSettings",
    "ErrorHandling",
    "load_render_config",
    # Pipeline steps
    "DirectiveProcessor",
    "NumberingPolicy",
    "MarkdownTransformer",
    "MathSpanRenderer",
    "TableRenderer",
    "typeset",
    # Cache
    "RenderCache",
    "CacheEntry",
    "CacheStats",
    "get_shared_cache",
    "make_cache_key",
    # Diagnostics
    "ErrorCollector",
    "ErrorRecord",
    "ErrorKind",
    "Severity",
    "RenderError",
    "MathRenderError",
    "MathSyntaxError",
    "QuestionDirectiveError",
    "MarkdownParseError",
]

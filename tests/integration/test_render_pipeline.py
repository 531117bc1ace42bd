"""
Integration tests for the render pipeline - runs every step with latex2mathml.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from examtex.contexts.rendering import (
    CacheSettings,
    ErrorHandling,
    ErrorKind,
    RenderCache,
    RenderConfig,
    RenderFeatures,
    RenderMode,
    RenderPipeline,
    render,
)
from examtex.contexts.rendering.cache import clear_shared_caches

FULL = RenderConfig()
LIGHTWEIGHT = RenderConfig(mode=RenderMode.LIGHTWEIGHT)
PREVIEW = RenderConfig(mode=RenderMode.PREVIEW)
NO_CACHE = RenderConfig(cache=CacheSettings(enabled=False))


@pytest.fixture
def cache():
    return RenderCache(max_entries=10)


@pytest.fixture(autouse=True)
def isolated_shared_caches():
    clear_shared_caches()
    yield
    clear_shared_caches()


@pytest.mark.integration
def test_full_mode_numbers_sub_questions(cache):
    """Test sequential sub-question numbering in FULL mode."""
    result = render(r"\subp A \subp B", FULL, cache)

    first = result.html.index('<span class="subproblem-number">(1)</span> A')
    second = result.html.index('<span class="subproblem-number">(2)</span> B')
    assert first < second
    assert result.error is None
    assert result.warnings == []


@pytest.mark.integration
def test_full_mode_runs_every_step(cache):
    """Test markdown, directives and math all applied in FULL mode."""
    content = "**Find** the roots. \\subp $x^2 = 4$ \\subsubp $$\\frac{1}{2}$$"

    result = render(content, FULL, cache)

    assert "<strong>Find</strong>" in result.html
    assert "(1)</span>" in result.html
    assert "i</span>" in result.html
    assert '<span class="math math-inline"><math' in result.html
    assert '<div class="math math-display"><math' in result.html
    assert "$" not in result.html
    assert result.metadata.formula_count == 2
    assert result.metadata.question_directive_count == 2
    assert result.metadata.markdown_element_count == 1


@pytest.mark.integration
def test_lightweight_mode_uses_generic_labels(cache):
    """Test LIGHTWEIGHT mode skips numbering and markdown."""
    result = render(r"**b** \subp A \subp B", LIGHTWEIGHT, cache)

    assert "(sub-part)" in result.html
    assert "(1)" not in result.html
    assert "**b**" in result.html


@pytest.mark.integration
def test_disabled_features_leave_content(cache):
    """Test feature flags turn off markdown and directive expansion."""
    config = RenderConfig(features=RenderFeatures(markdown=False, question_syntax=False))

    assert render("**b**", config, cache).html == "**b**"
    assert render(r"\subp A", config, cache).html == r"\subp A"


@pytest.mark.integration
def test_auto_numbering_flag_is_ignored(cache):
    """Test FULL mode numbers sub-questions even with auto_numbering off."""
    config = RenderConfig(features=RenderFeatures(auto_numbering=False))
    assert "(1)</span>" in render(r"\subp A", config, cache).html


@pytest.mark.integration
def test_empty_input_touches_nothing(cache):
    """Test empty and missing content return an empty result without cache access."""
    for content in ("", None):
        result = render(content, FULL, cache)

        assert result.html == ""
        assert result.error is None
        assert result.warnings == []
        assert result.metadata.formula_count == 0
        assert result.metadata.question_directive_count == 0
        assert result.metadata.markdown_element_count == 0

    stats = cache.stats()
    assert (stats.hits, stats.misses, stats.sets) == (0, 0, 0)


@pytest.mark.integration
def test_cache_hit_returns_identical_html(cache):
    """Test a repeated render is served from cache with the same HTML."""
    content = r"Evaluate $\sqrt{2}$ \choice"

    first = render(content, FULL, cache)
    hits_before = cache.hits
    second = render(content, FULL, cache)

    assert cache.hits == hits_before + 1
    assert second.cache_hit is True
    assert first.cache_hit is False
    assert second.html == first.html


@pytest.mark.integration
def test_metadata_independent_of_cache(cache):
    """Test metadata is the same whether or not the cache answered."""
    content = "*note* $a$ $$b$$ \\fill"

    first = render(content, FULL, cache)
    second = render(content, FULL, cache)

    assert second.cache_hit
    assert first.metadata == second.metadata


@pytest.mark.integration
def test_mode_is_part_of_cache_key(cache):
    """Test the same content in two modes does not share a cache entry."""
    render(r"\subp A", FULL, cache)
    render(r"\subp A", LIGHTWEIGHT, cache)

    assert cache.misses == 2
    assert len(cache) == 2


@pytest.mark.integration
def test_cache_disabled(cache):
    """Test a disabled cache is never consulted."""
    pipeline = RenderPipeline(NO_CACHE, cache=cache)
    pipeline.render("text")
    pipeline.render("text")

    assert pipeline.cache is None
    assert len(cache) == 0


@pytest.mark.integration
def test_malformed_formula_isolated(cache):
    """Test one bad formula is marked while the rest renders."""
    content = r"Good $x^2$ bad $\frac{1}{2$"

    result = render(content, FULL, cache)

    assert "<msup>" in result.html
    assert r'<span class="math-error">LaTeX error: \frac{1}{2</span>' in result.html
    assert result.error == "Rendering produced 1 error(s)"
    math_errors = [r for r in result.records if r.kind is ErrorKind.MATH]
    assert len(math_errors) == 1
    assert math_errors[0].content == r"\frac{1}{2"


@pytest.mark.integration
def test_strict_mode_still_renders_leniently(cache):
    """Test STRICT error handling falls back to lenient behaviour."""
    config = RenderConfig(error_handling=ErrorHandling.STRICT)

    result = render(r"$\frac{1}{2$", config, cache)

    assert result.error is not None
    assert "math-error" in result.html


@pytest.mark.integration
def test_preview_truncates_but_counts_original(cache):
    """Test PREVIEW truncation with metadata from the untruncated input."""
    content = "A" * 150 + r" \subp $x$"

    result = render(content, PREVIEW, cache)

    assert result.html == "A" * 100 + "..."
    assert result.warnings == ["Content truncated to 100 characters for preview"]
    assert result.error is None
    assert result.metadata.formula_count == 1
    assert result.metadata.question_directive_count == 1


@pytest.mark.integration
def test_preview_bisected_formula_is_tolerated(cache):
    """Test a formula cut by truncation leaves a visible delimiter, not an error."""
    content = "A" * 95 + "$x^2 + y^2$"

    result = render(content, PREVIEW, cache)

    assert result.error is None
    assert result.html.endswith("$x^2 ...")
    assert "Unterminated math delimiter" in result.warnings


@pytest.mark.integration
def test_short_preview_is_not_truncated(cache):
    """Test PREVIEW content under the limit renders like LIGHTWEIGHT."""
    result = render(r"\subp $x$", PREVIEW, cache)

    assert "(sub-part)" in result.html
    assert "<math" in result.html
    assert result.warnings == []


@pytest.mark.integration
def test_empty_sub_question_warns(cache):
    """Test an empty body is a warning, not an error."""
    result = render(r"\subp \subp B", FULL, cache)

    assert result.error is None
    assert result.warnings == ["Empty sub-question body"]


@pytest.mark.integration
def test_table_in_full_mode(cache):
    """Test tabular environments survive the markdown and directive steps."""
    content = "Table:\n\\begin{tabular}{|l|r|} *a* & $x^2$ \\\\ \\hline b & 2 \\\\ \\end{tabular}"

    result = render(content, FULL, cache)

    assert '<table class="latex-table latex-table-bordered"' in result.html
    assert "*a*" in result.html
    assert "<msup>" in result.html
    assert "__TABLE_PLACEHOLDER" not in result.html


@pytest.mark.integration
def test_concurrent_renders_keep_separate_diagnostics():
    """Test concurrent calls never see each other's errors."""
    contents = [r"bad $\frac{1}{2$", "good $x$"] * 10

    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(lambda c: render(c, NO_CACHE), contents))

    for content, result in zip(contents, results):
        if content.startswith("bad"):
            assert result.error == "Rendering produced 1 error(s)"
        else:
            assert result.error is None
            assert result.records == []


@pytest.mark.integration
@pytest.mark.parametrize("config", [FULL, LIGHTWEIGHT], ids=["full", "lightweight"])
def test_choice_inside_math_renders_as_blank(config, cache):
    """Test a \\choice inside a formula typesets as spaced brackets."""
    result = render(r"Pick $\choice$", config, cache)

    assert "<math" in result.html
    assert "quad" not in result.html
    assert "choice" not in result.html
    assert result.error is None
    assert result.warnings == []


@pytest.mark.integration
def test_fill_inside_math_warns(cache):
    """Test a directive with no math alias is reported instead of passing silently."""
    result = render(r"Blank: $$\fill$$", FULL, cache)

    assert result.error is None
    assert result.warnings == [r"Question directive \fill inside math span is not expanded"]
    assert result.records[0].kind is ErrorKind.QUESTION_DIRECTIVE


@pytest.mark.integration
def test_escaped_dollars_stay_text(cache):
    """Test escaped dollars are prose, never math delimiters."""
    result = render(r"Costs \$5 and \$6, solve $x$", FULL, cache)

    assert result.html.startswith(r"Costs \$5 and \$6, solve <span")
    assert result.html.count("<math") == 1
    assert result.metadata.formula_count == 1
    assert result.warnings == []


@pytest.mark.integration
def test_markdown_skips_math_spans(cache):
    """Test '*' inside formulas is left for the math engine."""
    result = render(r"$a*b$ and $c*d$", FULL, cache)

    assert "<em>" not in result.html
    assert result.html.count("<math") == 2
    assert result.metadata.markdown_element_count == 0
    assert result.error is None


@pytest.mark.integration
def test_records_in_collection_order(cache):
    """Test records are reported in the order they were collected."""
    result = render(r"\subp \subp $\frac{1}{2$", FULL, cache)

    assert [record.severity.value for record in result.records] == ["warning", "error"]


@pytest.mark.integration
def test_feature_flags_share_cache_entries(cache):
    """Test the cache key ignores feature flags, so flag sets need their own cache."""
    no_markdown = RenderConfig(features=RenderFeatures(markdown=False))

    render("**b**", FULL, cache)
    shared = render("**b**", no_markdown, cache)
    separate = render("**b**", no_markdown, RenderCache(max_entries=10))

    assert shared.cache_hit
    assert shared.html == "<strong>b</strong>"
    assert separate.html == "**b**"

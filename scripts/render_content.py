#!/usr/bin/env python3
"""
Question Content Rendering CLI

Renders question content files (markdown, LaTeX math, exam directives) to HTML
fragments using the rendering context.

Commands:
    render - Render a single content file to HTML
    stats  - Render files twice through one cache and report cache counters

Examples:\n

    render_content.py render questions/q1.md                       # Full mode to stdout

    render_content.py render questions/q1.md --mode preview        # Preview rendering

    render_content.py render questions/q1.md -o out/q1.html        # Write to file

    render_content.py render questions/q1.md --config configs/render.yaml

    render_content.py stats questions/*.md                         # Cache behaviour
"""

import time
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from examtex.contexts.rendering import (
    CacheSettings,
    RenderCache,
    RenderConfig,
    RenderFeatures,
    RenderMode,
    RenderPipeline,
    load_render_config,
)
from examtex.contexts.rendering.logger import (
    _log_info,
    log_render_result,
    setup_rendering_logger,
)

load_dotenv()

app = typer.Typer(
    help="Render exam question content to HTML fragments",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("render")
def render_command(
    content_path: Annotated[
        Path,
        typer.Argument(help="Content file to render", exists=True, dir_okay=False),
    ],
    mode: Annotated[
        Optional[RenderMode],
        typer.Option("--mode", "-m", help="Render mode (overrides --config)"),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="YAML render config (default: EXAMTEX_RENDER_CONFIG)"),
    ] = None,
    no_markdown: Annotated[
        bool, typer.Option("--no-markdown", help="Disable markdown substitutions")
    ] = False,
    no_questions: Annotated[
        bool, typer.Option("--no-questions", help="Disable question directive expansion")
    ] = False,
    no_cache: Annotated[bool, typer.Option("--no-cache", help="Bypass the render cache")] = False,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write HTML here instead of stdout"),
    ] = None,
    log_dir: Annotated[
        Optional[Path],
        typer.Option("--log-dir", help="Directory for render.log (default: EXAMTEX_LOGS_PATH)"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every warning")] = False,
):
    """Render one content file."""
    base = load_render_config(config_path)
    config = RenderConfig(
        mode=mode or base.mode,
        features=RenderFeatures(
            markdown=base.features.markdown and not no_markdown,
            question_syntax=base.features.question_syntax and not no_questions,
            auto_numbering=base.features.auto_numbering,
        ),
        error_handling=base.error_handling,
        cache=CacheSettings(
            enabled=base.cache.enabled and not no_cache,
            max_entries=base.cache.max_entries,
        ),
    )

    setup_rendering_logger(log_dir, mode=config.mode.value)

    _log_info(f"Rendering {content_path} ({config.mode.value} mode)")
    content = content_path.read_text(encoding="utf-8")
    start = time.perf_counter()
    result = RenderPipeline(config).render(content)
    log_render_result(content_path.name, result, time.perf_counter() - start, verbose=verbose)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.html, encoding="utf-8")
        typer.secho(f"Wrote {output}", fg=typer.colors.GREEN)
    else:
        typer.echo(result.html)

    if result.error:
        raise typer.Exit(code=1)


@app.command("stats")
def stats_command(
    content_paths: Annotated[
        List[Path],
        typer.Argument(help="Content files to render", exists=True, dir_okay=False),
    ],
    mode: Annotated[RenderMode, typer.Option("--mode", "-m", help="Render mode")] = RenderMode.FULL,
    max_entries: Annotated[
        int, typer.Option("--max-entries", help="Cache capacity", min=1)
    ] = 200,
):
    """Render every file twice through a fresh cache and print its counters."""
    cache = RenderCache(max_entries=max_entries)
    pipeline = RenderPipeline(
        RenderConfig(mode=mode, cache=CacheSettings(max_entries=max_entries)), cache=cache
    )

    for _ in range(2):
        for path in content_paths:
            pipeline.render(path.read_text(encoding="utf-8"))

    stats = cache.stats()
    typer.echo(f"Entries:   {stats.size}/{stats.max_entries}")
    typer.echo(f"Hits:      {stats.hits}")
    typer.echo(f"Misses:    {stats.misses}")
    typer.echo(f"Sets:      {stats.sets}")
    typer.echo(f"Evictions: {stats.evictions}")
    typer.echo(f"Hit rate:  {stats.hit_rate:.1%}")


if __name__ == "__main__":
    app()

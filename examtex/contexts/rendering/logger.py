"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from examtex.utils.logger import session_dir
from examtex.utils.logger import setup_logger as _setup_logger
from examtex.utils.text_processing import truncate_display

load_dotenv()

CONTEXT_PREFIX = "[render]"
LOGS_PATH = Path(os.getenv("EXAMTEX_LOGS_PATH", "outs/logs"))


def setup_rendering_logger(log_dir: Path = None, mode: str = "full") -> Path:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this rendering session (defaults to a timestamped
            directory under EXAMTEX_LOGS_PATH)
        mode: Render mode recorded in the provenance header

    Returns:
        Path to log file

    Example:
        from examtex.contexts.rendering.logger import setup_rendering_logger, _log_info

        log_file = setup_rendering_logger(log_dir, mode="preview")
        _log_info("Rendering question bank...")
    """
    if log_dir is None:
        log_dir = session_dir(LOGS_PATH, "render")

    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"Render mode": mode},
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_render_result(
    source_name: str,
    result,  # RenderResult
    elapsed_time: float,
    verbose: bool = False,
) -> None:
    """
    Log a render result with its diagnostics.

    Args:
        source_name: Identifier of the rendered content (file name, question id)
        result: RenderResult from RenderPipeline.render()
        elapsed_time: Time taken to render
        verbose: Show every warning instead of the first few (default: False)
    """
    metadata = result.metadata
    summary = (
        f"{metadata.formula_count} formulas, "
        f"{metadata.question_directive_count} directives, "
        f"{metadata.markdown_element_count} markdown elements"
    )

    if result.error:
        _log_error(f"{source_name}: {result.error} ({elapsed_time:.3f}s)")
        for i, record in enumerate(result.records, 1):
            if record.severity.value == "error":
                _log_error(f"  Error {i}: {record.message} [{truncate_display(record.content or '', 60)}]")
    else:
        cached = " (cached)" if result.cache_hit else ""
        _log_success(f"{source_name}: rendered{cached}, {summary} ({elapsed_time:.3f}s)")

    if result.warnings:
        _log_warning(f"{len(result.warnings)} warnings detected")
        warning_limit = len(result.warnings) if verbose else 3
        for i, warn in enumerate(result.warnings[:warning_limit], 1):
            _log_debug(f"  Warning {i}: {warn}")
        if len(result.warnings) > warning_limit:
            _log_debug(f"  ... and {len(result.warnings) - warning_limit} more warnings")

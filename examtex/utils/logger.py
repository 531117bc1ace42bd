"""
Logger setup shared by every context.

Each logging session writes to its own timestamped directory so repeated runs never
interleave. Context-specific prefixes and helpers live in contexts/{context}/logger.py.
"""

import sys
from datetime import datetime
from pathlib import Path

from loguru import logger

import examtex

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {message}"
CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <level>{message}</level>"

# Console colours; levels not listed keep loguru's defaults
LEVEL_COLORS = {
    "DEBUG": "<dim>",
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def session_dir(base_dir: Path, context_name: str) -> Path:
    """
    Directory for one logging session, e.g. outs/logs/render_20261019_123456.
    """
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return Path(base_dir) / f"{context_name}_{stamp}"


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: dict = None,
    console_level: str = "INFO",
    console: bool = True,
) -> Path:
    """
    Replace loguru's handlers with a session file sink and an optional console sink.

    The file sink records DEBUG and above; the console shows console_level and above.
    A provenance header is written first so every log identifies the run.

    Args:
        context_name: Context identifier, used for the log file name (e.g. "render")
        log_dir: Session directory; created if missing
        extra_provenance: Additional key-value pairs for the provenance header
        console_level: Minimum level echoed to stderr (default: INFO)
        console: Set False for file-only logging (default: True)

    Returns:
        Path to log file
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()

    for level_name, color in LEVEL_COLORS.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG", encoding="utf-8")

    # stderr keeps stdout free for rendered HTML
    if console:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    log_provenance(context_name, extra_provenance)

    return log_file


def log_provenance(context_name: str, extra_context: dict = None) -> None:
    """Write the session header: package version, interpreter, command and settings."""
    logger.info("=" * 80)
    logger.info(f"examtex {examtex.__version__} [{context_name}]")
    logger.info(f"Command: {' '.join(sys.argv)}")
    logger.info(f"Working directory: {Path.cwd()}")
    logger.info(f"Python: {sys.version.split()[0]}")

    for key, value in (extra_context or {}).items():
        logger.info(f"{key}: {value}")

    logger.info("=" * 80)

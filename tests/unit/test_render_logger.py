"""Unit tests for rendering context logging."""

import sys

import pytest
from loguru import logger

from examtex.contexts.rendering import RenderConfig, render
from examtex.contexts.rendering.cache import RenderCache
from examtex.contexts.rendering.logger import log_render_result, setup_rendering_logger
from examtex.utils.logger import session_dir


@pytest.fixture
def restore_default_sink():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.mark.unit
def test_session_dir_is_timestamped(tmp_path):
    directory = session_dir(tmp_path, "render")
    assert directory.parent == tmp_path
    assert directory.name.startswith("render_")


@pytest.mark.unit
def test_setup_rendering_logger_writes_provenance(tmp_path, restore_default_sink):
    log_file = setup_rendering_logger(tmp_path, mode="preview")

    assert log_file == tmp_path / "render.log"
    text = log_file.read_text()
    assert "Render mode: preview" in text
    assert "examtex" in text


@pytest.mark.unit
def test_log_render_result_reports_errors(tmp_path, restore_default_sink):
    log_file = setup_rendering_logger(tmp_path)
    result = render(r"$\frac{1}{2$", RenderConfig(), RenderCache(max_entries=5))

    log_render_result("q1.md", result, 0.01)

    text = log_file.read_text()
    assert "[render] q1.md: Rendering produced 1 error(s)" in text
    assert "Unbalanced braces in formula" in text

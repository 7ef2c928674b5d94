"""Tests for logging configuration."""

import io
import json

import pytest
import structlog
from structlog.testing import capture_logs

from fieldsweep.config import Settings
from fieldsweep.logging import (
    build_processors,
    configure_logging,
    experiment_context,
    get_logger,
)


@pytest.fixture
def restore_structlog():
    yield
    structlog.reset_defaults()


def test_json_renderer_outside_development():
    processors = build_processors(json_output=True)

    assert isinstance(processors[-1], structlog.processors.JSONRenderer)
    assert processors[0] is structlog.contextvars.merge_contextvars


def test_console_renderer_in_development():
    processors = build_processors(json_output=False)

    assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


def test_experiment_context_is_cleared_after_block():
    with experiment_context("sweep", "abc123"):
        bound = structlog.contextvars.get_contextvars()
        assert bound["experiment"] == "sweep"
        assert bound["experiment_id"] == "abc123"

    assert "experiment" not in structlog.contextvars.get_contextvars()


def test_logger_created_before_capture_is_captured():
    logger = get_logger("tests.logging", component="index")

    with capture_logs() as logs:
        logger.warning("row_skipped", row=3)

    assert logs == [{"event": "row_skipped", "log_level": "warning", "component": "index", "row": 3}]


def test_configured_json_lines_carry_experiment(restore_structlog):
    stream = io.StringIO()
    configure_logging(Settings(environment="production", log_level="INFO"), stream=stream)
    logger = get_logger("tests.logging", component="runner")

    with experiment_context("sweep", "abc123"):
        logger.info("combination_complete", combination="title", score=0.5)
    logger.debug("below_level")

    lines = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert len(lines) == 1
    entry = lines[0]
    assert entry["event"] == "combination_complete"
    assert entry["level"] == "info"
    assert entry["component"] == "runner"
    assert entry["experiment"] == "sweep"
    assert entry["experiment_id"] == "abc123"
    assert "timestamp" in entry

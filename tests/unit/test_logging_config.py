"""
Unit tests for structured logging configuration.
"""

import io
import json
import logging

from studysheet.core.context import sync_request_context
from studysheet.core.logging_config import ROOT_LOGGER, configure_logging


def _capture(fmt):
    stream = io.StringIO()
    configure_logging(level=logging.DEBUG, format=fmt, stream=stream)
    return stream


def teardown_function(_):
    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


def test_structured_output_includes_correlation_id():
    stream = _capture("structured")
    with sync_request_context("req_log123"):
        logging.getLogger("studysheet.core.store").info(
            "Saved sheet", extra={"topics": 2}
        )

    entry = json.loads(stream.getvalue().strip())
    assert entry["message"] == "Saved sheet"
    assert entry["level"] == "INFO"
    assert entry["logger"] == "studysheet.core.store"
    assert entry["correlation_id"] == "req_log123"
    assert entry["extra"] == {"topics": 2}


def test_structured_output_without_context():
    stream = _capture("structured")
    logging.getLogger("studysheet").warning("plain")
    assert json.loads(stream.getvalue())["correlation_id"] == "-"


def test_human_output_strips_root_prefix():
    stream = _capture("human")
    with sync_request_context("cli_abc"):
        logging.getLogger("studysheet.core.seed").info("Normalized seed")

    line = stream.getvalue().strip()
    assert "[INFO] [cli_abc] core.seed: Normalized seed" in line


def test_reconfigure_replaces_handlers():
    _capture("human")
    _capture("structured")
    assert len(logging.getLogger(ROOT_LOGGER).handlers) == 1


def test_level_filters_records():
    stream = io.StringIO()
    configure_logging(level=logging.WARNING, stream=stream)
    logging.getLogger("studysheet.x").info("hidden")
    assert stream.getvalue() == ""

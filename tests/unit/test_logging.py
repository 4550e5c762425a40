"""Unit tests for the Folio log formatter."""

from __future__ import annotations

import logging

from folio.core.logging import ROOT_LOGGER_NAME, FolioLogFormatter, record_extras, setup_logging


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="folio.services.metadata_synthesizer",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Content store lookup failed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_content_context_is_inline_and_rest_is_json() -> None:
    line = FolioLogFormatter().format(
        _record(error="timeout", collection="news", route="/news/a", attempt=2)
    )

    head, _, tail = line.partition("Content store lookup failed ")
    assert "| WARNING  | folio.services.metadata_synthesizer |" in head
    assert tail == 'route=/news/a collection=news {"attempt": 2, "error": "timeout"}'


def test_blank_context_values_are_dropped() -> None:
    line = FolioLogFormatter().format(_record(route="/about", slug=None, operation=""))

    assert line.endswith("| Content store lookup failed route=/about")


def test_formatter_without_extras_is_plain() -> None:
    line = FolioLogFormatter().format(_record())

    assert line.endswith("| Content store lookup failed")


def test_record_extras_ignores_builtin_attributes() -> None:
    record = _record(kind="carousel")
    record.message = record.getMessage()

    assert record_extras(record) == {"kind": "carousel"}


def test_setup_logging_installs_single_handler() -> None:
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    original_handlers = list(logger.handlers)
    original_propagate = logger.propagate
    original_level = logger.level
    logger.handlers = []
    try:
        setup_logging()
        setup_logging("DEBUG")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, FolioLogFormatter)
        assert logger.handlers[0].level == logging.DEBUG
        assert logger.propagate is False
        assert logger.level == logging.DEBUG
    finally:
        logger.handlers = original_handlers
        logger.propagate = original_propagate
        logger.setLevel(original_level)

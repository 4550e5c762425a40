"""Logging setup for Folio.

Services log with `extra={...}`. The content coordinates every lookup carries
(route, collection, slug, operation) are rendered inline so lines can be
grepped by page; anything else is appended as a JSON object:

    2024-01-15 10:30:45 | WARNING  | folio.services.metadata_synthesizer | Content store lookup failed route=/news/a collection=news {"error": "timeout"}
"""

import json
import logging
import sys

ROOT_LOGGER_NAME = "folio"

CONTEXT_KEYS = ("route", "collection", "slug", "operation")

# Attributes every LogRecord carries; anything else arrived through `extra`
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


def record_extras(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class FolioLogFormatter(logging.Formatter):
    """Pipe-separated line with inline content context and JSON for the rest."""

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        parts = [
            self.formatTime(record, self.datefmt),
            f"{record.levelname:<8}",
            record.name,
            record.message,
        ]
        line = " | ".join(parts)

        extras = record_extras(record)
        context = []
        for key in CONTEXT_KEYS:
            value = extras.pop(key, None)
            if value is not None and value != "":
                context.append(f"{key}={value}")
        if context:
            line = f"{line} {' '.join(context)}"
        if extras:
            line = f"{line} {json.dumps(extras, default=str, ensure_ascii=False, sort_keys=True)}"

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            line = f"{line}\n{record.exc_text}"
        return line


def setup_logging(level: str | int = logging.INFO) -> None:
    """Attach one stdout handler to the `folio` logger; later calls only adjust the level."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(FolioLogFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

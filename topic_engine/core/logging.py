"""Engine log output: one readable line per record, `extra` fields appended as JSON."""

import json
import logging
import sys
from typing import Any

LOGGER_NAME = "topic_engine"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord carries; anything else came in through `extra=`.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


class JSONExtrasFormatter(logging.Formatter):
    """Render `timestamp | LEVEL | logger | message` plus sorted scoring extras."""

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        line = " | ".join(
            (self.formatTime(record, self.datefmt), f"{record.levelname:<8}", record.name, record.message)
        )

        extras = record_extras(record)
        if extras:
            try:
                line = f"{line} {json.dumps(extras, default=str, ensure_ascii=False, sort_keys=True)}"
            except (TypeError, ValueError):
                pass

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            line = f"{line}\n{record.exc_text}"
        return line


def setup_logging(level: str | int = logging.INFO) -> None:
    """Attach a stdout handler to the `topic_engine` logger once; later calls only change the level."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if logger.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONExtrasFormatter(datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

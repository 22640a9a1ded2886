"""
Logging setup for the label designer.

JSON lines for production, plain lines for development. Both carry the
label context (field, template, symbology) when a log call passes it via
extra={...}.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from label_designer.config import Settings, get_settings

# Record attributes set through extra={...} by the services
CONTEXT_FIELDS = ("template_id", "field_id", "symbology")


def label_context(record: logging.LogRecord) -> dict[str, Any]:
    return {
        name: getattr(record, name)
        for name in CONTEXT_FIELDS
        if getattr(record, name, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    {"timestamp": "...", "level": "WARNING", "logger": "label_designer.services.renderer",
     "message": "...", "field_id": "bc", "symbology": "EAN13"}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **label_context(record),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    """Readable lines, label context appended in brackets."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = label_context(record)
        if context:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return line


def setup_logging(settings: Settings | None = None) -> logging.Logger:
    """
    Configure the `label_designer` logger.

    Debug settings give readable lines at DEBUG level, otherwise JSON at
    settings.log_level. Calling it again replaces the previous handler.

    Returns:
        The package logger
    """
    settings = settings or get_settings()

    log_level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level)
    formatter = HumanFormatter() if settings.debug else JSONFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    package_logger = logging.getLogger("label_designer")
    package_logger.setLevel(log_level)
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.propagate = False

    return package_logger

"""
Logging configuration for the relay.

- Cloud Run (K_SERVICE set): google-cloud-logging, so entries land in
  Cloud Logging with trace correlation
- Anywhere else: one JSON object per line on stdout

LOG_LEVEL selects the root level (default INFO).
"""

import json
import logging
import os
from datetime import UTC, datetime


class JsonFormatter(logging.Formatter):
    """
    Render log records as single-line JSON.

    Fields passed as `extra={"extra_fields": {...}}` are merged into the
    top-level object.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record as a JSON string.

        Args:
            record: The log record to format.

        Returns:
            One line of JSON with timestamp, severity, logger name, message,
            any extra_fields and the formatted exception if present.
        """
        log_object = {
            "timestamp": datetime.now(UTC).isoformat(),
            "severity": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_object.update(extra_fields)

        if record.exc_info:
            log_object["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_object, default=str)


def _log_level() -> int:
    """Root level from LOG_LEVEL; unknown names fall back to INFO."""
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def setup_global_logging() -> None:
    """
    Configure the root logger once per process.

    On Cloud Run the google-cloud-logging client attaches its own handler.
    If it cannot be initialized, a plain text handler is used and a
    warning is logged.
    """
    level = _log_level()

    if os.getenv("K_SERVICE") is not None:
        try:
            import google.cloud.logging

            client = google.cloud.logging.Client()
            client.setup_logging(log_level=level)
            logging.info("Cloud Logging initialized for Cloud Run.")
            return
        except Exception as e:
            logging.basicConfig(
                level=level,
                format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            )
            logging.warning(f"Cloud Logging setup failed, using basic config: {e}")
            return

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    # Replace earlier stream handlers so repeated setup does not duplicate lines
    for existing in list(root_logger.handlers):
        if type(existing) is logging.StreamHandler:
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

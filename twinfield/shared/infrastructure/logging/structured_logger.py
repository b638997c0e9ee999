import json
import logging
from datetime import UTC, datetime

# Context keys the SDK passes through ``extra=`` on its log calls.
CONTEXT_FIELDS = ("office", "chunk", "size", "tag", "position")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, carrying whichever SDK context the record has."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (name, getattr(record, name))
            for name in CONTEXT_FIELDS
            if hasattr(record, name)
        )
        if record.exc_info:
            payload["error_type"] = record.exc_info[0].__name__
            payload["error"] = str(record.exc_info[1])
        return json.dumps(payload, default=str)


def configure_json_logging(
    level: int = logging.INFO, logger_name: str = "twinfield"
) -> logging.Logger:
    """Send the SDK's own loggers to stderr as JSON, leaving the host's root logger alone."""
    sdk_logger = logging.getLogger(logger_name)
    if not any(isinstance(handler.formatter, JsonFormatter) for handler in sdk_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        sdk_logger.addHandler(handler)
        sdk_logger.propagate = False
    sdk_logger.setLevel(level)
    return sdk_logger

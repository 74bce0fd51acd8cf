"""
Structured logging for the criteria engine

Events are logged as short snake_case names ("criteria_template_loaded") with
their data in ``extra``. JSON lines are the default; ``LOG_FORMAT=text`` gives
plain lines for local use.
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

from core.config import settings

# Record attributes that JsonFormatter would otherwise repeat next to ``event``
_DROPPED_FIELDS = ("message", "msg", "color_message")


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter emitting the event name plus app and environment"""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["event"] = record.getMessage()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["app"] = settings.app_name
        log_record["version"] = settings.app_version
        log_record["environment"] = settings.environment

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        for field in _DROPPED_FIELDS:
            log_record.pop(field, None)


def build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    return logging.Formatter(
        "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging() -> None:
    """Install a single stdout handler on the root logger from settings"""
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(build_formatter(settings.log_format))
    root_logger.addHandler(console_handler)


class LoggerAdapter(logging.LoggerAdapter):
    """Adapter merging bound context (e.g. fund_type) into every record's extra"""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        # Per-call extra wins over bound context
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    def with_context(self, **context) -> "LoggerAdapter":
        """Adapter on the same logger with additional bound context"""
        return LoggerAdapter(self.logger, {**self.extra, **context})


def get_logger(name: str, **context) -> LoggerAdapter:
    """
    Get a logger with optional bound context

    Example:
        logger = get_logger(__name__)
        logger.with_context(fund_type="vc").warning("leaf_scores_missing", extra={"missing": [...]})
    """
    return LoggerAdapter(logging.getLogger(name), context)


setup_logging()

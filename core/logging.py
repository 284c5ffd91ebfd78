"""
Structured logging for OPR Digital

JSON lines in deployed environments, plain text for development and tests.
Both formats surface the report context the domains log with (``domain``,
``record_id``, ``channel``, ``status``, ``phase``) as first-class fields.
"""
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from core.config import settings

CONTEXT_FIELDS = ("domain", "record_id", "channel", "status", "phase")

_DOMAIN_PREFIX = re.compile(r"^(d\d+_[a-z]+|core|database)")


def domain_for(logger_name: str) -> Optional[str]:
    """Package domain of a module logger, e.g. ``d9_delivery`` for ``d9_delivery.orchestrator``"""
    match = _DOMAIN_PREFIX.match(logger_name)
    return match.group(1) if match else None


def report_context(record: logging.LogRecord) -> Dict[str, str]:
    """Context fields set on ``record``, with the domain inferred from the logger name when absent"""
    context = {}
    for field in CONTEXT_FIELDS:
        value = getattr(record, field, None)
        if value is not None:
            context[field] = getattr(value, "value", value)
    if "domain" not in context:
        domain = domain_for(record.name)
        if domain:
            context["domain"] = domain
    return {key: str(value) for key, value in context.items()}


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter emitting one object per record with report context on top"""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        for field in CONTEXT_FIELDS:
            log_record.pop(field, None)
        log_record.update(report_context(record))

        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record["app"] = settings.app_name
        log_record["environment"] = settings.environment
        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


class ContextTextFormatter(logging.Formatter):
    """Text formatter appending ``[key=value ...]`` report context"""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = report_context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} [{pairs}]"


def build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    return ContextTextFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging() -> None:
    """Configure the root logger from settings"""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(build_formatter(settings.log_format))
    root_logger.addHandler(console_handler)

    for noisy in ("uvicorn", "httpx", "asyncio", "playwright"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.database_echo else logging.WARNING)


class LoggerAdapter(logging.LoggerAdapter):
    """Carries fixed context (usually ``domain``) into every record"""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        # Call-site extra wins over the adapter's fixed context
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str, **context) -> LoggerAdapter:
    """
    Example:
        logger = get_logger(__name__, domain="d9_delivery")
        logger.info("Report synced", extra={"record_id": record.id, "channel": "remote"})
    """
    return LoggerAdapter(logging.getLogger(name), context)


setup_logging()

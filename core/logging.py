"""
Logging configuration for the booking client.

Staging and production emit one JSON object per line with the booking
context (tier, date, time, party size, table) as top-level keys, so a
degraded availability check or a rejected submit can be filtered on
directly.
"""
import logging
import sys
from enum import Enum
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger
from core.settings import settings


# Availability queries are logged as {"date", "time", "partySize"}
QUERY_FIELDS = {"date": "reservation_date", "time": "reservation_time", "partySize": "party_size"}


class BookingJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that flattens booking context into the log line."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = self.formatTime(record, self.datefmt)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['component'] = record.name.rsplit('.', 1)[-1]

        query = log_record.pop('query', None)
        if isinstance(query, dict):
            for key, field_name in QUERY_FIELDS.items():
                if key in query:
                    log_record.setdefault(field_name, query[key])

        for key, value in list(log_record.items()):
            if isinstance(value, Enum):
                log_record[key] = value.value

        log_record['app_name'] = settings.app_name
        log_record['environment'] = settings.app_env

        if record.exc_info:
            log_record['exc_info'] = self.formatException(record.exc_info)


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Configure the root logger for an application embedding the client.

    Args:
        level: Log level name (defaults to settings.log_level)
        json_output: Force JSON on or off (defaults to on outside development)
    """
    level = (level or settings.log_level).upper()
    use_json = settings.app_env in ["production", "staging"] if json_output is None else json_output

    if use_json:
        formatter = BookingJsonFormatter(
            fmt='%(timestamp)s %(level)s %(name)s %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    else:
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # requests/urllib3 log every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.DEBUG if settings.debug else logging.WARNING)

    get_logger(__name__).info(
        "Logging configured",
        extra={"log_level": level, "environment": settings.app_env, "json_logging": use_json}
    )


def get_logger(name: str) -> logging.Logger:
    """Logger for a client module (pass __name__)."""
    return logging.getLogger(name)


class LogContext:
    """
    Attach the same booking fields to every record logged in a block.

    Example:
        with LogContext("services.booking_wizard", table_number="T02") as ctx:
            ctx.log("info", "Reservation created", reservation_id="r-1")
    """

    def __init__(self, logger_name: str, **context: Any):
        self.context = context
        self.logger = get_logger(logger_name)

    def __enter__(self) -> 'LogContext':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.logger.error(
                f"Unhandled {exc_type.__name__} during booking operation",
                extra=self.context,
                exc_info=True
            )

    def log(self, level: str, message: str, **extra_fields: Any) -> None:
        """Log at the given level name with the block's fields merged in."""
        log_method = getattr(self.logger, level.lower())
        log_method(message, extra={**self.context, **extra_fields})

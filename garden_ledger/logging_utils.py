"""
Logging utilities for the ledger.

Provides a structured JSON formatter for machine-readable logs, named
ledger loggers, and an adapter that stamps every record with the store
it came from.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any

LEDGER_LOGGER = "garden_ledger"

# Diagnostic loggers, silent unless enabled through configuration
STORE_ACTIONS_LOGGER = f"{LEDGER_LOGGER}.store.actions"
SELECTOR_CACHE_LOGGER = f"{LEDGER_LOGGER}.selectors.cache"

# LogRecord attributes that are not caller context
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


def _context_value(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class StructuredJsonFormatter(logging.Formatter):
    """
    Render each record as one JSON object per line.

    Every object has ``timestamp`` (UTC, ISO 8601, taken from the record),
    ``level``, ``logger`` and ``message``. An ``exception`` field is added
    when the record carries exception info, and any ``extra`` context
    (such as a store's root and head) is merged in. Context values that
    are not JSON are rendered with ``str()``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(
            (key, _context_value(value))
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        return json.dumps(entry, default=str)


def configure_structured_logging(
    level: int = logging.INFO,
    logger_name: str | None = LEDGER_LOGGER,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """
    Send a logger's records to ``stream`` as JSON lines.

    Any handlers already on the logger are replaced.

    Args:
        level: Level set on the logger
        logger_name: Logger to configure; None for the root logger
        stream: Output stream (default: stdout)

    Returns:
        The configured logger
    """
    target = logging.getLogger(logger_name)
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())
    target.handlers[:] = [handler]
    target.setLevel(level)
    return target


def get_ledger_logger(name: str) -> logging.Logger:
    """Logger for a ledger component, e.g. ``get_ledger_logger("store.actions")``."""
    return logging.getLogger(f"{LEDGER_LOGGER}.{name}")


def set_diagnostics(store_log: bool = False, selector_cache_log: bool = False) -> None:
    """Enable or silence the per-action and per-selector diagnostic loggers."""
    logging.getLogger(STORE_ACTIONS_LOGGER).setLevel(logging.DEBUG if store_log else logging.WARNING)
    logging.getLogger(SELECTOR_CACHE_LOGGER).setLevel(
        logging.DEBUG if selector_cache_log else logging.WARNING
    )


class LedgerLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds store context to all log messages.

    Used by the chain store to tag records with its root and head.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Add extra context to log record."""
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs

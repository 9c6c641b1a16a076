"""Logging setup and contract-scoped loggers for the installments engine."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, MutableMapping, TextIO

# Record attributes copied into JSON output when a log call carries them
CONTEXT_FIELDS = ("contract_id", "installment_number", "customer_id", "outcome")


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
    stream: TextIO | None = None,
) -> None:
    """Configure logging for the installments engine.

    Parameters
    ----------
    level : str
        Log level name; unknown names fall back to INFO.
    format_type : str
        ``"standard"`` for human-readable lines or ``"json"`` for one JSON
        object per line.
    stream : TextIO | None
        Destination, stdout by default.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    logging.getLogger("installments").setLevel(log_level)

    # Producer and sample-data libraries are chatty at DEBUG
    for noisy in ("confluent_kafka", "faker"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


class JsonFormatter(logging.Formatter):
    """Render records as JSON, including contract context fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value

        if isinstance(getattr(record, "extra", None), dict):
            payload.update(record.extra)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        # Decimal amounts and enums are written as strings
        return json.dumps(payload, default=str, ensure_ascii=False)


class ContractLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that tags every record with a contract id."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def contract_logger(
    logger: logging.Logger,
    contract_id: str,
    **context: Any,
) -> ContractLoggerAdapter:
    """Wrap ``logger`` so its records carry ``contract_id`` and ``context``.

    >>> log = contract_logger(logging.getLogger("installments"), "ct-001")
    >>> log.extra["contract_id"]
    'ct-001'
    """
    return ContractLoggerAdapter(logger, {"contract_id": contract_id, **context})


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(name)

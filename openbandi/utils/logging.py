"""
Structured logging for OpenBandi, built on structlog.

Every log line carries the app name and version. Lines emitted during a
reconciliation run also carry its ``run_id``, bound through
``structlog.contextvars`` so nested services pick it up without passing it
around. Bank account numbers are masked before rendering.

Renderers:
- dev_mode: coloured console output
- json_logs: one JSON object per line
- otherwise: ``timestamp level event key=value`` lines
"""

import logging
import sys
import time
import uuid
from typing import Any, cast

import structlog
from structlog.types import EventDict, Processor

RUN_ID_KEY = "run_id"

# Keys whose values are account identifiers; only the last 4 characters survive
ACCOUNT_KEYS = frozenset({"iban", "counterpart_account", "account_number"})
# Keys whose values are dropped entirely
SECRET_KEYS = frozenset({"password", "api_key", "secret", "token"})


# ============================================================================
# Run ID
# ============================================================================


def bind_run_id(run_id: str | None = None) -> str:
    """Bind a run ID to every log line emitted from the current context.

    Returns:
        The bound run ID (a new UUID4 when none is given)
    """
    run_id = run_id or uuid.uuid4().hex
    structlog.contextvars.bind_contextvars(**{RUN_ID_KEY: run_id})
    return run_id


def clear_run_id() -> None:
    structlog.contextvars.unbind_contextvars(RUN_ID_KEY)


# ============================================================================
# Processors
# ============================================================================


def mask_account(value: Any) -> str:
    """``IT60X0542811101000000123456`` -> ``***********************3456``."""
    text = str(value).replace(" ", "")
    if len(text) <= 4:
        return "*" * len(text)
    return "*" * (len(text) - 4) + text[-4:]


def mask_sensitive_values(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask account numbers and drop credentials."""
    for key in event_dict.keys() & ACCOUNT_KEYS:
        if event_dict[key]:
            event_dict[key] = mask_account(event_dict[key])
    for key in event_dict.keys() & SECRET_KEYS:
        event_dict[key] = "***"
    return event_dict


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    from openbandi import __version__

    event_dict.setdefault("app", "openbandi")
    event_dict.setdefault("version", __version__)
    return event_dict


def _renderer(json_logs: bool, dev_mode: bool) -> list[Processor]:
    if dev_mode:
        return [structlog.dev.ConsoleRenderer(colors=True)]
    if json_logs:
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"])]


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    dev_mode: bool = True,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Logs go to stderr so command output on stdout stays clean.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        json_logs: Render JSON lines (ignored in dev mode)
        dev_mode: Render coloured console output
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        mask_sensitive_values,
        *_renderer(json_logs, dev_mode),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper(), logging.INFO),
        force=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger.

    Usage:
        logger = get_logger(__name__)
        logger.info("transaction_reconciled", transaction_id="tx-1", confidence=92)
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


class LogPerformance:
    """
    Time a block and log ``<operation>_completed`` or ``<operation>_failed``.

    Extra keyword arguments are added to both events. The measured time stays
    available as ``duration`` (seconds) after the block exits; exceptions
    propagate.

    Usage:
        with LogPerformance("reconciliation_batch", logger, threshold=70) as perf:
            ...
        record_batch_duration(perf.duration)
    """

    def __init__(self, operation: str, logger: structlog.stdlib.BoundLogger, **context: Any):
        self.operation = operation
        self.logger = logger
        self.context = context
        self.duration: float = 0.0
        self._started: float = 0.0

    def __enter__(self) -> "LogPerformance":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.duration = time.perf_counter() - self._started
        elapsed_ms = round(self.duration * 1000, 2)

        if exc_type is None:
            self.logger.info(f"{self.operation}_completed", duration_ms=elapsed_ms, **self.context)
            return

        self.logger.error(
            f"{self.operation}_failed",
            duration_ms=elapsed_ms,
            error=str(exc_val),
            error_type=exc_type.__name__,
            **self.context,
        )


def log_transaction_reconciled(
    logger: structlog.stdlib.BoundLogger,
    transaction_id: str,
    expense_id: str,
    confidence: int,
    mode: str,
) -> None:
    """Audit line for an accepted reconciliation."""
    logger.info(
        "transaction_reconciled",
        action="reconcile",
        resource="bank_transaction",
        transaction_id=transaction_id,
        expense_id=expense_id,
        confidence=confidence,
        mode=mode,
    )


configure_logging()

"""Prometheus metrics for bank import and reconciliation.

The HTTP exporter is only started when ``metrics_enabled`` is set; the
counters are always updated so they can be scraped from a host process.
"""

from prometheus_client import Counter, Histogram, start_http_server

from ..utils.logging import get_logger

logger = get_logger(__name__)

# ============================================================================
# Metric Definitions
# ============================================================================

bank_transactions_imported_total = Counter(
    "openbandi_banking_transactions_imported_total",
    "Total number of bank transactions imported",
    ["status"],  # success/error/duplicate
)

reconciliations_performed_total = Counter(
    "openbandi_banking_reconciliations_performed_total",
    "Total number of transaction reconciliations performed",
    ["mode", "status"],  # auto/manual, success/failure
)

matching_confidence_scores = Histogram(
    "openbandi_banking_matching_confidence_scores",
    "Distribution of accepted matching confidence scores (0-100)",
    ["mode"],
    buckets=(30, 50, 60, 70, 75, 80, 85, 90, 95, 100),
)

reconciliation_batch_duration_seconds = Histogram(
    "openbandi_banking_reconciliation_batch_duration_seconds",
    "Time taken by a batch reconciliation run",
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0),
)


# ============================================================================
# Metrics Server
# ============================================================================

_server_started = False


def start_metrics_server(port: int = 8000) -> bool:
    """Start the Prometheus HTTP exporter once per process.

    Returns:
        True if the exporter is running after the call
    """
    global _server_started
    if _server_started:
        return True
    try:
        start_http_server(port)
    except OSError as e:
        logger.warning("metrics_server_unavailable", port=port, error=str(e))
        return False
    _server_started = True
    logger.info("metrics_server_started", port=port)
    return True


# ============================================================================
# Convenience Functions
# ============================================================================


def record_transaction_import(status: str, count: int = 1) -> None:
    """Record imported statement rows (success, error, duplicate)."""
    if count:
        bank_transactions_imported_total.labels(status=status).inc(count)


def record_reconciliation(mode: str, status: str = "success", confidence: int | None = None) -> None:
    """Record a reconciliation attempt.

    Args:
        mode: "auto" or "manual"
        status: "success" or "failure"
        confidence: Confidence of the accepted match, if any
    """
    reconciliations_performed_total.labels(mode=mode, status=status).inc()
    if confidence is not None:
        matching_confidence_scores.labels(mode=mode).observe(confidence)


def record_batch_duration(seconds: float) -> None:
    reconciliation_batch_duration_seconds.observe(seconds)

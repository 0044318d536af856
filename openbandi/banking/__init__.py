"""Bank statement import and expense reconciliation.

This module implements:
- Bank statement import (CSV invoice listings and bank exports, MT940, CAMT.053 XML)
- Weighted multi-factor match scoring
- Batch auto-reconciliation and a manual review queue
- Prometheus metrics monitoring

Architecture: Domain-Driven Design (DDD) + Hexagonal Architecture
"""

__all__ = [
    "BankTransaction",
    "Expense",
    "ReconciliationMatch",
    "MatchSuggestion",
    "ReconciliationResult",
    "ImportResult",
    # Metrics
    "start_metrics_server",
    "record_transaction_import",
    "record_reconciliation",
]

from .domain.models import BankTransaction, Expense
from .domain.value_objects import MatchSuggestion, ReconciliationMatch, ReconciliationResult
from .infrastructure.importers.base import ImportResult
from .metrics import record_reconciliation, record_transaction_import, start_metrics_server

"""Application services for bank reconciliation."""

from .reconciliation_service import ReconciliationService, filter_suggestions

__all__ = ["ReconciliationService", "filter_suggestions"]

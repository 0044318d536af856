"""Application layer: use cases built on the matchers and the ledger store."""

from .services import ReconciliationService

__all__ = ["ReconciliationService"]

"""Bank reconciliation CLI."""

from .banking_cli import app

__all__ = ["app"]

"""Database storage for the ledger."""

"""Adapters for the ledger store and bank statement files."""

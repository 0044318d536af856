"""SQLAlchemy base, engine setup and ledger tables."""

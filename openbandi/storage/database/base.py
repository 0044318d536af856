"""Declarative base and engine setup."""

from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import DateTime, MetaData, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from openbandi.exceptions import StorageError, wrap_exception
from openbandi.utils.logging import get_logger

logger = get_logger(__name__)

# Naming convention for constraints
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for ledger tables.

    The integer ``id`` keeps insertion order; business identifiers live in
    their own unique columns.
    """

    metadata = metadata

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )


def sqlite_url(path: Path | str) -> str:
    """``ledger.db`` -> ``sqlite:///ledger.db``."""
    return f"sqlite:///{path}"


def init_db(database_url: str) -> sessionmaker:
    """Create the engine and tables, and return a session factory.

    Raises:
        StorageError: If the database cannot be opened or is not a database
    """
    # Table classes must be registered on the metadata before create_all
    from . import models  # noqa: F401

    try:
        engine = create_engine(database_url, echo=False, pool_pre_ping=True)
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        raise wrap_exception(
            e, "Cannot open ledger database", exception_class=StorageError, url=database_url
        ) from e

    logger.debug("ledger_database_ready", url=engine.url.render_as_string(hide_password=True))
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

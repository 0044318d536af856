"""Session handling for the ledger database.

Usage:
    with session_scope(session_factory) as db:
        db.add(record)
        db.commit()

The session is rolled back on any exception and always closed. Driver errors
surface as ``StorageError``; domain errors raised inside the block propagate
unchanged.
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from openbandi.exceptions import StorageError, wrap_exception
from openbandi.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Open a session, rolling back and closing it on the way out.

    You must call ``db.commit()`` to persist changes.

    Raises:
        StorageError: If the database driver fails inside the block
    """
    db = session_factory()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error("db_session_error_rollback", error=str(e), error_type=type(e).__name__)
        db.rollback()
        raise wrap_exception(e, "Ledger database error", exception_class=StorageError) from e
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

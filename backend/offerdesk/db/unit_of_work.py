"""
Transaction boundary shared by every service that writes.
"""
from contextlib import contextmanager
from typing import Iterator
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from offerdesk.errors import PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Run a block of writes as one transaction.

    Commits when the block exits cleanly. Any exception rolls the whole block
    back; raw SQLAlchemy errors are re-raised as PersistenceError so callers
    only ever see the typed error taxonomy.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Transaction rolled back: %s", e)
        raise PersistenceError(f"Datastore write failed: {e}") from e
    except Exception:
        db.rollback()
        raise

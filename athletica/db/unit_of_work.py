"""
Atomic commit boundary for multi-row writes.

A state-machine operation mutates the session row, one or more exercise
logs and possibly a new set log in memory.  The service stages them on
the SQLModel session and commits once inside :func:`unit_of_work`.  If
the store rejects the write, the transaction is rolled back, which also
expires the in-memory projection so the next read reloads the last
confirmed state, and :class:`PersistenceFailure` is raised for the
caller to retry.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from athletica.core.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(session: Session, operation: str) -> Iterator[Session]:
    """Commit everything staged in the block, or roll it all back."""
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Rolled back '%s': %s", operation, exc)
        raise PersistenceFailure(f"Could not save '{operation}'; no changes were applied") from exc
    except Exception:
        session.rollback()
        raise

"""Helpers shared by the SQLAlchemy repositories."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session

from cardwise.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(db: Session, operation: str) -> Iterator[None]:
    """
    Report connection-level database failures as StorageUnavailableError.

    The session is rolled back so it can be reused. Integrity and programming
    errors are left alone; they are bugs, not outages.
    """
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        db.rollback()
        logger.error(f"Storage unavailable during {operation}: {e}")
        raise StorageUnavailableError() from e


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)

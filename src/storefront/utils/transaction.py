"""
Transaction management utilities for database operations.

Services run their writes inside transaction_scope so a failure
anywhere in a multi-statement operation rolls the whole unit back.
"""

from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.utils.exceptions import ConflictError, ValidationError
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


@contextmanager
def transaction_scope(db: Session, auto_commit: bool = True):
    """
    Context manager for database transactions with automatic rollback.

    Usage:
        with transaction_scope(db):
            db.add(Product(name="Mug"))

    Args:
        db: SQLAlchemy session
        auto_commit: Whether to commit automatically (default: True)

    Yields:
        Session: Database session

    Raises:
        ConflictError: On a unique constraint violation
        ValidationError: On a foreign key violation
        Exception: Re-raises anything else after rollback

    Note:
        Does NOT close the session, the request dependency owns it.
    """
    try:
        yield db
        if auto_commit:
            db.commit()
            logger.debug("Transaction committed successfully")
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Transaction rolled back on integrity error: {e.orig}")
        raise translate_integrity_error(e) from e
    except Exception as e:
        db.rollback()
        logger.error(f"Transaction rolled back due to error: {e}")
        raise


def translate_integrity_error(error: IntegrityError):
    """Map a driver integrity error onto an application error."""
    code = getattr(error.orig, "pgcode", None) or getattr(error.orig, "sqlstate", None)
    text = str(error.orig).lower()

    if code == FOREIGN_KEY_VIOLATION or "foreign key" in text:
        return ValidationError("Referenced record does not exist")
    if code == UNIQUE_VIOLATION or "unique" in text:
        return ConflictError("Record already exists")
    return ConflictError("Integrity constraint violated")

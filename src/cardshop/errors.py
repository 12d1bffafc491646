"""Domain error taxonomy and translation of store failures into it.

Services raise the ``LedgerError`` subclasses directly. Anything coming out of
SQLAlchemy is funnelled through :func:`store_boundary`, which maps it onto the
same taxonomy so callers never inspect driver-specific error shapes.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    status_code = 500
    default_message = "Request failed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LedgerError):
    status_code = 400
    default_message = "Invalid request"


class NotFound(LedgerError):
    status_code = 404
    default_message = "Not found"


class CapacityExceeded(LedgerError):
    status_code = 409
    default_message = "Event is full"


class AlreadyRegistered(LedgerError):
    status_code = 409
    default_message = "You have already registered for this event!"


class DuplicateCustomer(LedgerError):
    status_code = 409
    default_message = "A customer with this phone/email already exists."


class AttendanceRequired(LedgerError):
    status_code = 403
    default_message = "Customer did not join that event."


class InsufficientBalance(LedgerError):
    status_code = 409
    default_message = "Not enough packs to withdraw."


class TransientStoreError(LedgerError):
    status_code = 503
    default_message = "Service temporarily unavailable, please try again"


class UnknownStoreError(LedgerError):
    status_code = 500
    default_message = "Internal server error"


# constraint name -> (SQLite column signature, domain error)
CONSTRAINT_ERRORS = {
    "uq_registration_event_customer": (
        "event_registrations.event_id, event_registrations.customer_id",
        AlreadyRegistered,
    ),
    "uq_customer_contact_info": (
        "customers.contact_info",
        DuplicateCustomer,
    ),
    # adjust_balance absorbs this one itself; reaching here means a write outside it
    "uq_customer_pack_key": (
        "customer_packs.customer_id, customer_packs.game_title, customer_packs.pack_type",
        TransientStoreError,
    ),
}


def constraint_name(exc: IntegrityError):
    """Best-effort name of the constraint an IntegrityError tripped on, or None."""
    diag = getattr(exc.orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name in CONSTRAINT_ERRORS:
        return name
    message = str(exc.orig)
    for name, (signature, _) in CONSTRAINT_ERRORS.items():
        if name in message or signature in message:
            return name
    return None


def translate_store_error(exc: SQLAlchemyError) -> LedgerError:
    if isinstance(exc, IntegrityError):
        name = constraint_name(exc)
        if name is not None:
            return CONSTRAINT_ERRORS[name][1]()
        logger.error("Unmapped integrity error", exc_info=exc)
        return UnknownStoreError()
    if isinstance(exc, (OperationalError, PoolTimeoutError)):
        logger.warning("Transient store failure: %s", exc)
        return TransientStoreError()
    logger.error("Unexpected store failure", exc_info=exc)
    return UnknownStoreError()


@contextmanager
def store_boundary():
    """Re-raise any SQLAlchemy error from the block as a LedgerError."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise translate_store_error(exc) from exc

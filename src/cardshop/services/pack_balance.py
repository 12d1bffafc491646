"""Per-customer pack storage: balance adjustments and their audit trail.

Every successful adjustment changes exactly one ``customer_packs`` row and appends
exactly one ``pack_transactions`` row in the same transaction, so the sum of the
audit amounts for a key always equals the stored quantity.
"""
import logging
from datetime import datetime

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models
from ..database import transaction
from ..errors import (
    AttendanceRequired,
    InsufficientBalance,
    NotFound,
    ValidationError,
    store_boundary,
)

logger = logging.getLogger(__name__)


def _pack_key(customer_id: int, game_title: str, pack_type: str):
    return (
        models.CustomerPack.customer_id == customer_id,
        models.CustomerPack.game_title == game_title,
        models.CustomerPack.pack_type == pack_type,
    )


def _require_attendance(db: Session, customer_id: int, event_id):
    if event_id is None:
        raise AttendanceRequired("You must select the Event this customer played in.")
    registration = (
        db.query(models.EventRegistration.id)
        .filter(
            models.EventRegistration.customer_id == customer_id,
            models.EventRegistration.event_id == event_id,
        )
        .first()
    )
    if registration is None:
        logger.warning("Deposit refused: customer %s did not join event %s", customer_id, event_id)
        raise AttendanceRequired("Customer did not join that event.")


def _apply_delta(db: Session, customer_id: int, game_title: str, pack_type: str, delta: int) -> int:
    """Conditional in-place change of one balance row; returns the number of rows changed."""
    # check and write in one statement; the row lock serializes writers on this key
    changed = db.execute(
        update(models.CustomerPack)
        .where(
            *_pack_key(customer_id, game_title, pack_type),
            models.CustomerPack.quantity + delta >= 0,
        )
        .values(quantity=models.CustomerPack.quantity + delta, last_updated=datetime.now())
        .execution_options(synchronize_session=False)
    )
    return changed.rowcount


def _pack_exists(db: Session, customer_id: int, game_title: str, pack_type: str) -> bool:
    return (
        db.query(models.CustomerPack.id)
        .filter(*_pack_key(customer_id, game_title, pack_type))
        .first()
        is not None
    )


def adjust_balance(
    db: Session,
    customer_id: int,
    game_title: str,
    delta: int,
    pack_type: str = None,
    event_id: int = None,
):
    """Apply a signed ``delta`` to a customer's pack balance and return the audit row.

    - delta > 0 is a deposit and must name an event the customer registered for.
    - delta < 0 is a withdrawal and may not take the balance below zero.
    - delta == 0 changes no quantity but still gets an audit row.
    - The balance row is created on the first non-negative change for its key.
    """
    game_title = (game_title or "").strip()
    pack_type = (pack_type or "").strip() or models.DEFAULT_PACK_TYPE
    if not game_title:
        raise ValidationError("game_title is required")

    with transaction(db):
        if db.get(models.Customer, customer_id) is None:
            raise NotFound("Customer not found")
        if delta > 0:
            _require_attendance(db, customer_id, event_id)
        elif event_id is not None and db.get(models.Event, event_id) is None:
            raise NotFound("Event not found")

        if _apply_delta(db, customer_id, game_title, pack_type, delta) == 0:
            if _pack_exists(db, customer_id, game_title, pack_type):
                raise InsufficientBalance("Not enough packs to withdraw.")
            if delta < 0:
                raise InsufficientBalance("No packs found to withdraw.")
            try:
                with db.begin_nested():
                    db.add(
                        models.CustomerPack(
                            customer_id=customer_id,
                            game_title=game_title,
                            pack_type=pack_type,
                            quantity=delta,
                        )
                    )
                    db.flush()
            except IntegrityError:
                # another first deposit created the row after our check; add to it instead
                logger.info(
                    "Balance row for customer %s %s/%s appeared concurrently",
                    customer_id, game_title, pack_type,
                )
                if _apply_delta(db, customer_id, game_title, pack_type, delta) == 0:
                    raise InsufficientBalance("Not enough packs to withdraw.")

        entry = models.PackTransaction(
            customer_id=customer_id,
            game_title=game_title,
            pack_type=pack_type,
            amount=delta,
            event_id=event_id,
        )
        db.add(entry)
        db.flush()
    logger.info(
        "Customer %s packs %+d %s/%s (event %s)", customer_id, delta, game_title, pack_type, event_id
    )
    return entry


def get_balance(db: Session, customer_id: int, game_title: str, pack_type: str = None):
    """Stored quantity for a key, 0 when no row exists yet."""
    pack_type = pack_type or models.DEFAULT_PACK_TYPE
    with store_boundary():
        quantity = (
            db.query(models.CustomerPack.quantity)
            .filter(*_pack_key(customer_id, game_title, pack_type))
            .scalar()
        )
    return quantity or 0


def balance_reconciles(db: Session, customer_id: int, game_title: str, pack_type: str = None) -> bool:
    """True when the audit log for a key sums to its stored quantity."""
    pack_type = pack_type or models.DEFAULT_PACK_TYPE
    with store_boundary():
        audited = (
            db.query(func.coalesce(func.sum(models.PackTransaction.amount), 0))
            .filter(
                models.PackTransaction.customer_id == customer_id,
                models.PackTransaction.game_title == game_title,
                models.PackTransaction.pack_type == pack_type,
            )
            .scalar()
        )
    return audited == get_balance(db, customer_id, game_title, pack_type)


def list_storage(db: Session):
    """Every non-empty balance with its owner, most recently touched first."""
    with store_boundary():
        rows = (
            db.query(
                models.CustomerPack.id.label("pack_id"),
                models.Customer.id.label("customer_id"),
                models.Customer.name,
                models.Customer.contact_info,
                models.CustomerPack.game_title,
                models.CustomerPack.pack_type,
                models.CustomerPack.quantity,
                models.CustomerPack.last_updated,
            )
            .join(models.Customer, models.CustomerPack.customer_id == models.Customer.id)
            .filter(models.CustomerPack.quantity > 0)
            .order_by(models.CustomerPack.last_updated.desc(), models.CustomerPack.id.desc())
            .all()
        )
    return [dict(row._mapping) for row in rows]


def storage_history(db: Session, customer_id: int):
    """Audit entries of one customer, newest first, with the event they were tied to."""
    with store_boundary():
        rows = (
            db.query(
                models.PackTransaction.transaction_date,
                models.PackTransaction.game_title,
                models.PackTransaction.pack_type,
                models.PackTransaction.amount,
                models.Event.title.label("event_name"),
                models.Event.event_date,
            )
            .outerjoin(models.Event, models.PackTransaction.event_id == models.Event.id)
            .filter(models.PackTransaction.customer_id == customer_id)
            .order_by(models.PackTransaction.transaction_date.desc(), models.PackTransaction.id.desc())
            .all()
        )
    return [dict(row._mapping) for row in rows]

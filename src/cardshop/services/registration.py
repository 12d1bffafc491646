"""Event registration: capacity claim, customer resolution and the registration row.

``join_event`` is a single transaction. The capacity check and the player-count
increment are one conditional UPDATE, so two concurrent joins for the last seat
cannot both pass the check.
"""
import logging

from sqlalchemy import not_, update
from sqlalchemy.orm import Session

from .. import crud, models
from ..database import transaction
from ..errors import CapacityExceeded, NotFound

logger = logging.getLogger(__name__)


def join_event(db: Session, event_id: int, player_name: str, contact_info: str, has_paid: bool = False):
    """Register a player for an event and return the new registration.

    Raises ValidationError for a blank name/contact, NotFound for an unknown event,
    CapacityExceeded when the event is full and AlreadyRegistered when this contact
    is already on the list. Nothing is written unless every step succeeds.
    """
    player_name, contact_info = crud.require_identity(player_name, contact_info)
    with transaction(db):
        claimed = db.execute(
            update(models.Event)
            .where(
                models.Event.id == event_id,
                models.Event.current_players < models.Event.max_players,
            )
            .values(current_players=models.Event.current_players + 1)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount == 0:
            if db.get(models.Event, event_id) is None:
                raise NotFound("Event not found")
            logger.info("Event %s is full", event_id)
            raise CapacityExceeded("Event is full")

        customer = crud.resolve_customer(db, player_name, contact_info)

        registration = models.EventRegistration(
            event_id=event_id,
            customer_id=customer.id,
            has_paid=bool(has_paid),
        )
        db.add(registration)
        # a duplicate (event_id, customer_id) fails here and becomes AlreadyRegistered
        db.flush()
    logger.info("Customer %s joined event %s", registration.customer_id, event_id)
    return registration


def toggle_payment(db: Session, registration_id: int):
    """Flip ``has_paid`` on a registration and return the registration."""
    with transaction(db):
        toggled = db.execute(
            update(models.EventRegistration)
            .where(models.EventRegistration.id == registration_id)
            .values(has_paid=not_(models.EventRegistration.has_paid))
            .execution_options(synchronize_session=False)
        )
        if toggled.rowcount == 0:
            raise NotFound("Registration not found")
    registration = db.get(models.EventRegistration, registration_id)
    logger.info("Registration %s has_paid=%s", registration_id, registration.has_paid)
    return registration

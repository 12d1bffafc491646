import logging
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import transaction
from ..errors import NotFound, ValidationError, store_boundary

logger = logging.getLogger(__name__)


def require_identity(name, contact_info):
    """Return stripped (name, contact_info); both must be non-empty."""
    name = (name or "").strip()
    contact_info = (contact_info or "").strip()
    if not name or not contact_info:
        raise ValidationError("Name and Contact Info are required.")
    return name, contact_info


# Customers

def get_customer(db: Session, customer_id: int):
    with store_boundary():
        return db.get(models.Customer, customer_id)


def get_customer_by_contact(db: Session, contact_info: str):
    with store_boundary():
        return (
            db.query(models.Customer)
            .filter(models.Customer.contact_info == contact_info)
            .first()
        )


def resolve_customer(db: Session, name: str, contact_info: str):
    """Find a customer by contact or add one inside the caller's transaction.

    An existing customer keeps the stored name; ``name`` is only used for new rows.
    """
    customer = get_customer_by_contact(db, contact_info)
    if customer is not None:
        return customer
    customer = models.Customer(name=name, contact_info=contact_info)
    db.add(customer)
    db.flush()
    logger.info("Created customer %s", customer.id)
    return customer


def create_customer(db: Session, customer: schemas.CustomerCreate):
    name, contact_info = require_identity(customer.name, customer.contact_info)
    with transaction(db):
        db_customer = models.Customer(name=name, contact_info=contact_info)
        db.add(db_customer)
        db.flush()
    db.refresh(db_customer)
    logger.info("Created customer %s", db_customer.id)
    return db_customer


def list_customers(db: Session, search: str = None):
    query = db.query(models.Customer)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(models.Customer.name.like(pattern), models.Customer.contact_info.like(pattern))
        )
    with store_boundary():
        return query.order_by(models.Customer.created_at.desc(), models.Customer.id.desc()).all()


def search_customers(db: Session, q: str, limit: int = 5):
    with store_boundary():
        return (
            db.query(models.Customer)
            .filter(models.Customer.name.like(f"%{q or ''}%"))
            .order_by(models.Customer.name)
            .limit(limit)
            .all()
        )


def recent_events_for_customer(db: Session, customer_id: int, limit: int = 5):
    with store_boundary():
        return (
            db.query(models.Event)
            .join(models.EventRegistration, models.EventRegistration.event_id == models.Event.id)
            .filter(models.EventRegistration.customer_id == customer_id)
            .order_by(models.Event.event_date.desc())
            .limit(limit)
            .all()
        )


# Events

def get_event(db: Session, event_id: int):
    with store_boundary():
        return db.get(models.Event, event_id)


def create_event(db: Session, event: schemas.EventCreate):
    with transaction(db):
        db_event = models.Event(
            title=event.title,
            game_title=event.game_title,
            event_date=event.event_date,
            entry_fee=event.entry_fee,
            max_players=event.max_players,
            current_players=0,
            description=event.description,
        )
        db.add(db_event)
        db.flush()
    db.refresh(db_event)
    logger.info("Scheduled event %s (%s players max)", db_event.id, db_event.max_players)
    return db_event


def list_events(db: Session, include_past: bool = False):
    """Events newest first; only those not yet started unless ``include_past``."""
    query = db.query(models.Event)
    if not include_past:
        query = query.filter(models.Event.event_date >= datetime.now())
    with store_boundary():
        return query.order_by(models.Event.event_date.desc()).all()


def list_event_players(db: Session, event_id: int):
    """Registered players of an event, unpaid first, then newest registration first."""
    if get_event(db, event_id) is None:
        raise NotFound("Event not found")
    with store_boundary():
        rows = (
            db.query(
                models.EventRegistration.id.label("registration_id"),
                models.Customer.name,
                models.Customer.contact_info,
                models.EventRegistration.registered_at,
                models.EventRegistration.has_paid,
            )
            .join(models.Customer, models.EventRegistration.customer_id == models.Customer.id)
            .filter(models.EventRegistration.event_id == event_id)
            .order_by(
                models.EventRegistration.has_paid.asc(),
                models.EventRegistration.registered_at.desc(),
                models.EventRegistration.id.desc(),
            )
            .all()
        )
    return [dict(row._mapping) for row in rows]

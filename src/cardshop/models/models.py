from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    String,
    Float,
    Text,
    CheckConstraint,
    UniqueConstraint,
    ForeignKey,
    DateTime,
    Index,
)
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime

Base = declarative_base()

DEFAULT_PACK_TYPE = "Standard Booster"


class Customer(Base):
    __tablename__ = "customers"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    contact_info = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    __table_args__ = (
        UniqueConstraint("contact_info", name="uq_customer_contact_info"),
    )


class Event(Base):
    __tablename__ = "events"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    game_title = Column(String(100), nullable=False)
    event_date = Column(DateTime, nullable=False, index=True)
    entry_fee = Column(Float, nullable=False, default=0)
    max_players = Column(Integer, nullable=False)
    # mirrors the number of registrations; only join_event writes it
    current_players = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    __table_args__ = (
        CheckConstraint("max_players > 0", name="ck_event_max_players_positive"),
        CheckConstraint("entry_fee >= 0", name="ck_event_entry_fee_non_negative"),
        CheckConstraint(
            "current_players >= 0 AND current_players <= max_players",
            name="ck_event_current_players_in_range",
        ),
    )


class EventRegistration(Base):
    __tablename__ = "event_registrations"
    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    registered_at = Column(DateTime, default=datetime.now, nullable=False)
    has_paid = Column(Boolean, nullable=False, default=False)

    event = relationship("Event")
    customer = relationship("Customer")

    __table_args__ = (
        UniqueConstraint("event_id", "customer_id", name="uq_registration_event_customer"),
    )


class CustomerPack(Base):
    __tablename__ = "customer_packs"
    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    game_title = Column(String(100), nullable=False)
    pack_type = Column(String(100), nullable=False, default=DEFAULT_PACK_TYPE)
    quantity = Column(Integer, nullable=False, default=0)
    last_updated = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    customer = relationship("Customer")

    __table_args__ = (
        UniqueConstraint("customer_id", "game_title", "pack_type", name="uq_customer_pack_key"),
        CheckConstraint("quantity >= 0", name="ck_customer_pack_quantity_non_negative"),
        Index("ix_customer_packs_last_updated", "last_updated"),
    )


class PackTransaction(Base):
    """Append-only audit row, one per successful balance change."""

    __tablename__ = "pack_transactions"
    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    game_title = Column(String(100), nullable=False)
    pack_type = Column(String(100), nullable=False)
    amount = Column(Integer, nullable=False)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=True)
    transaction_date = Column(DateTime, default=datetime.now, nullable=False)

    event = relationship("Event")

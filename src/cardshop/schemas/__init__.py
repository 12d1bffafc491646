"""Schemas package re-exports for easy imports from `src.cardshop.schemas`."""
from .schemas import (
    Message,
    JoinEventRequest,
    StorageUpdateRequest,
    StorageEntry,
    StorageHistoryEntry,
    EventBase,
    EventCreate,
    Event,
    EventPlayer,
    CustomerCreate,
    Customer,
    CustomerSummary,
    CustomerCreated,
    RecentEvent,
)

__all__ = [
    "Message",
    "JoinEventRequest",
    "StorageUpdateRequest",
    "StorageEntry",
    "StorageHistoryEntry",
    "EventBase",
    "EventCreate",
    "Event",
    "EventPlayer",
    "CustomerCreate",
    "Customer",
    "CustomerSummary",
    "CustomerCreated",
    "RecentEvent",
]

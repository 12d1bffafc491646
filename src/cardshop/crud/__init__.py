"""CRUD package re-exports for easy imports from `src.cardshop.crud`."""
from .crud import (
    require_identity,
    get_customer,
    get_customer_by_contact,
    resolve_customer,
    create_customer,
    list_customers,
    search_customers,
    recent_events_for_customer,
    get_event,
    create_event,
    list_events,
    list_event_players,
)

__all__ = [
    "require_identity",
    "get_customer",
    "get_customer_by_contact",
    "resolve_customer",
    "create_customer",
    "list_customers",
    "search_customers",
    "recent_events_for_customer",
    "get_event",
    "create_event",
    "list_events",
    "list_event_players",
]

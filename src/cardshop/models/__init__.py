"""Models package re-exports for easy imports from `src.cardshop.models`."""
from .models import (
    Base,
    Customer,
    Event,
    EventRegistration,
    CustomerPack,
    PackTransaction,
    DEFAULT_PACK_TYPE,
)

__all__ = [
    "Base",
    "Customer",
    "Event",
    "EventRegistration",
    "CustomerPack",
    "PackTransaction",
    "DEFAULT_PACK_TYPE",
]

"""Services package re-exports for easy imports from `src.cardshop.services`."""
from .registration import join_event, toggle_payment
from .pack_balance import (
    adjust_balance,
    get_balance,
    balance_reconciles,
    list_storage,
    storage_history,
)

__all__ = [
    "join_event",
    "toggle_payment",
    "adjust_balance",
    "get_balance",
    "balance_reconciles",
    "list_storage",
    "storage_history",
]

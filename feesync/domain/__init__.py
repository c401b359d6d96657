"""Domain package."""

from .cart import Cart, CartSnapshot, FeeLineRef, LineItem
from .fee_rules import FeeAction, FeeActionKind, reconcile
from .preference import Preference, PreferenceStore
from .removal_flow import RemovalState

__all__ = [
    # Cart
    "Cart",
    "CartSnapshot",
    "FeeLineRef",
    "LineItem",
    # Reconciliation
    "FeeAction",
    "FeeActionKind",
    "reconcile",
    # Preference
    "Preference",
    "PreferenceStore",
    # Removal dialog
    "RemovalState",
]

"""Removal confirmation dialog states and allowed transitions."""
from __future__ import annotations

from typing import Mapping


class RemovalState:
    CLOSED = "closed"
    OPEN = "open"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: Mapping[str, frozenset[str]] = {
    RemovalState.CLOSED: frozenset({RemovalState.OPEN}),
    RemovalState.OPEN: frozenset({RemovalState.CONFIRMED, RemovalState.CANCELLED}),
    RemovalState.CONFIRMED: frozenset({RemovalState.CLOSED}),
    RemovalState.CANCELLED: frozenset({RemovalState.CLOSED}),
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())

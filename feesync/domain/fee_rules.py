"""Fee reconciliation decision table (single source of truth).

Rules are evaluated in order and the first match wins:

1. Empty merchandise subtotal: remove any fee line. The caller also clears
   the preference.
2. Preference other than wants-fee: remove any fee line.
3. Wants-fee with a positive subtotal: add the fee, fix its quantity, or do
   nothing when the line already carries the desired amount.

The table only looks at the snapshot and the preference, so applying its
action and reconciling again with the refreshed cart always yields NONE.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from feesync.core.constants import DEFAULT_FEE_RATE
from feesync.core.fee_math import calculate_fee
from feesync.domain.cart import CartSnapshot
from feesync.domain.preference import Preference


class FeeActionKind:
    NONE = "none"
    REMOVE = "remove"
    ADD = "add"
    SET_QUANTITY = "set_quantity"


@dataclass(frozen=True, slots=True)
class FeeAction:
    kind: str
    key: str | None = None
    amount: int | None = None

    @classmethod
    def none(cls) -> FeeAction:
        return cls(FeeActionKind.NONE)

    @classmethod
    def remove(cls, key: str) -> FeeAction:
        return cls(FeeActionKind.REMOVE, key=key, amount=0)

    @classmethod
    def add(cls, amount: int) -> FeeAction:
        return cls(FeeActionKind.ADD, amount=amount)

    @classmethod
    def set_quantity(cls, key: str, amount: int) -> FeeAction:
        return cls(FeeActionKind.SET_QUANTITY, key=key, amount=amount)

    @property
    def mutates(self) -> bool:
        return self.kind != FeeActionKind.NONE


def _remove_if_present(snapshot: CartSnapshot) -> FeeAction:
    if snapshot.existing_fee is None:
        return FeeAction.none()
    return FeeAction.remove(snapshot.existing_fee.key)


def reconcile(
    snapshot: CartSnapshot,
    preference: str,
    rate: Decimal = DEFAULT_FEE_RATE,
) -> FeeAction:
    """Decide the single mutation that brings the fee line in line with intent."""
    if snapshot.subtotal_excluding_fee <= 0:
        return _remove_if_present(snapshot)

    if preference != Preference.WANTS_FEE:
        return _remove_if_present(snapshot)

    desired = calculate_fee(snapshot.subtotal_excluding_fee, rate)
    existing = snapshot.existing_fee
    if existing is None:
        return FeeAction.add(desired)
    if existing.quantity == desired:
        return FeeAction.none()
    return FeeAction.set_quantity(existing.key, desired)

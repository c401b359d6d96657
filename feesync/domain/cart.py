"""Cart document types and the per-pass snapshot derived from them."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class LineItem:
    """Single line of the remote cart document."""

    key: str
    sku: str | None
    quantity: int
    final_line_price: int
    variant_id: int | None = None
    title: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "sku": self.sku,
            "quantity": int(self.quantity),
            "final_line_price": int(self.final_line_price),
            "variant_id": self.variant_id,
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LineItem:
        quantity = int(data.get("quantity", 0))
        if quantity < 0:
            raise ValueError(f"Negative quantity for line item {data.get('key')!r}")
        variant_id = data.get("variant_id", data.get("id"))
        return cls(
            key=str(data["key"]),
            sku=data.get("sku"),
            quantity=quantity,
            final_line_price=int(data.get("final_line_price", 0)),
            variant_id=int(variant_id) if variant_id is not None else None,
            title=str(data.get("title", "")),
        )


@dataclass
class Cart:
    items: list[LineItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Cart:
        raw_items = data.get("items")
        if not isinstance(raw_items, list):
            raise ValueError("Cart document has no items list")
        return cls(items=[LineItem.from_dict(item) for item in raw_items])

    def fee_items(self, fee_sku: str) -> list[LineItem]:
        return [item for item in self.items if item.sku == fee_sku]

    def merchandise(self, fee_sku: str) -> list[LineItem]:
        return [item for item in self.items if item.sku != fee_sku]


@dataclass(frozen=True, slots=True)
class FeeLineRef:
    key: str
    quantity: int


@dataclass(frozen=True, slots=True)
class CartSnapshot:
    """Point-in-time view of the cart used for exactly one reconciliation."""

    subtotal_excluding_fee: int
    item_count_excluding_fee: int
    existing_fee: FeeLineRef | None = None

    @property
    def has_fee(self) -> bool:
        return self.existing_fee is not None

    @classmethod
    def from_cart(cls, cart: Cart, fee_sku: str) -> CartSnapshot:
        merchandise = cart.merchandise(fee_sku)
        fee_items = cart.fee_items(fee_sku)
        if len(fee_items) > 1:
            logger.warning(
                "Cart holds %s fee line items; reconciling against the first (%s)",
                len(fee_items),
                fee_items[0].key,
            )
        existing = (
            FeeLineRef(key=fee_items[0].key, quantity=fee_items[0].quantity)
            if fee_items
            else None
        )
        return cls(
            subtotal_excluding_fee=sum(item.final_line_price for item in merchandise),
            item_count_excluding_fee=sum(item.quantity for item in merchandise),
            existing_fee=existing,
        )

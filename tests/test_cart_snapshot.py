from __future__ import annotations

import pytest

from feesync.domain.cart import Cart, CartSnapshot, FeeLineRef

FEE_SKU = "PAYPAL-FEE-3-5"


def _cart(*items: dict) -> Cart:
    return Cart.from_dict({"items": list(items)})


def test_snapshot_excludes_fee_line_from_subtotal_and_count() -> None:
    cart = _cart(
        {"key": "a", "sku": "BB-1", "quantity": 2, "final_line_price": 4000},
        {"key": "fee", "sku": FEE_SKU, "quantity": 175, "final_line_price": 175},
        {"key": "b", "sku": None, "quantity": 1, "final_line_price": 1000},
    )

    snapshot = CartSnapshot.from_cart(cart, FEE_SKU)

    assert snapshot.subtotal_excluding_fee == 5000
    assert snapshot.item_count_excluding_fee == 3
    assert snapshot.existing_fee == FeeLineRef(key="fee", quantity=175)
    assert snapshot.has_fee


def test_snapshot_of_empty_cart() -> None:
    snapshot = CartSnapshot.from_cart(_cart(), FEE_SKU)

    assert snapshot.subtotal_excluding_fee == 0
    assert snapshot.item_count_excluding_fee == 0
    assert snapshot.existing_fee is None


def test_snapshot_with_only_fee_line_has_zero_subtotal() -> None:
    cart = _cart({"key": "fee", "sku": FEE_SKU, "quantity": 70, "final_line_price": 70})

    snapshot = CartSnapshot.from_cart(cart, FEE_SKU)

    assert snapshot.subtotal_excluding_fee == 0
    assert snapshot.existing_fee is not None


def test_cart_document_without_items_is_rejected() -> None:
    with pytest.raises(ValueError):
        Cart.from_dict({"token": "abc"})


def test_negative_quantity_is_rejected() -> None:
    with pytest.raises(ValueError):
        _cart({"key": "a", "sku": "X", "quantity": -1, "final_line_price": 0})

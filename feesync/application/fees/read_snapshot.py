"""Use case: read one cart snapshot for a reconciliation pass."""
from __future__ import annotations

import logging
from typing import Any

from feesync.core.exceptions import StoreUnavailableException
from feesync.domain.cart import CartSnapshot

logger = logging.getLogger(__name__)


async def read_snapshot(client: Any, fee_sku: str) -> CartSnapshot | None:
    """Return a fresh snapshot, or None when the cart store is unavailable.

    None means "skip this pass and wait for the next trigger". It is never
    an empty cart.
    """
    try:
        cart = await client.get_cart()
    except StoreUnavailableException as exc:
        logger.warning("Cart snapshot unavailable: %s", exc.message)
        return None
    return CartSnapshot.from_cart(cart, fee_sku)

"""Use case: execute a reconciliation action against the cart store."""
from __future__ import annotations

import logging
from typing import Any

from feesync.application.fees.read_snapshot import read_snapshot
from feesync.core.config import FeeConfig
from feesync.core.exceptions import ConfigurationMissingException
from feesync.core.fee_math import format_money
from feesync.domain.fee_rules import FeeAction, FeeActionKind

logger = logging.getLogger(__name__)


async def apply_fee_action(action: FeeAction, *, client: Any, fee: FeeConfig) -> None:
    """Issue at most one store mutation for ``action``.

    Store errors propagate to the caller; nothing local is changed here.
    """
    if action.kind == FeeActionKind.NONE:
        return

    if action.kind == FeeActionKind.ADD:
        if not fee.variant_id:
            raise ConfigurationMissingException("FEE_VARIANT_ID")
        logger.info(
            "Adding fee line item: %s (quantity=%s, variant=%s)",
            format_money(action.amount),
            action.amount,
            fee.variant_id,
        )
        await client.add_line_item(fee.variant_id, action.amount, fee.line_item_properties)
        return

    if action.kind == FeeActionKind.SET_QUANTITY:
        logger.info("Updating fee line %s to %s", action.key, format_money(action.amount))
        await client.change_line_item(quantity=action.amount, key=action.key)
        return

    if action.kind == FeeActionKind.REMOVE:
        logger.info("Removing fee line %s", action.key)
        await client.change_line_item(quantity=0, key=action.key)
        return

    raise ValueError(f"Unknown fee action: {action.kind}")


async def remove_fee(*, client: Any, fee: FeeConfig) -> bool:
    """Remove the fee line regardless of preference or subtotal.

    Returns False when the fee line could not be removed.
    """
    snapshot = await read_snapshot(client, fee.sku)
    if snapshot is None:
        return False
    if snapshot.existing_fee is None:
        return True
    await apply_fee_action(FeeAction.remove(snapshot.existing_fee.key), client=client, fee=fee)
    return True

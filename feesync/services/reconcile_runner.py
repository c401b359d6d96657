"""Single-flight reconciliation pipeline.

One pass reads a fresh snapshot, runs the decision table and issues at most
one store mutation. Passes never overlap: a trigger that arrives while a pass
is in flight marks the runner dirty and waits; when the current pass ends the
runner performs one more pass covering every trigger that arrived meanwhile,
and all waiting callers receive that final outcome.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from feesync.application.fees.apply_action import apply_fee_action
from feesync.application.fees.read_snapshot import read_snapshot
from feesync.core.config import FeeConfig
from feesync.core.exceptions import (
    ConfigurationMissingException,
    FeeSyncException,
    InventoryRejectedException,
    StoreUnavailableException,
)
from feesync.domain.cart import CartSnapshot
from feesync.domain.fee_rules import FeeAction, reconcile
from feesync.domain.preference import PreferenceStore

logger = logging.getLogger(__name__)


class ErrorKey:
    STORE_UNAVAILABLE = "store_unavailable"
    CONFIGURATION_MISSING = "configuration_missing"
    INVENTORY_REJECTED = "inventory_rejected"


@dataclass
class ReconcileOutcome:
    ok: bool
    action: FeeAction = field(default_factory=FeeAction.none)
    snapshot: CartSnapshot | None = None
    error_key: str | None = None
    error: FeeSyncException | None = None
    preference_cleared: bool = False

    @property
    def changed_cart(self) -> bool:
        return self.ok and self.action.mutates


def _error_key(exc: FeeSyncException) -> str:
    if isinstance(exc, ConfigurationMissingException):
        return ErrorKey.CONFIGURATION_MISSING
    if isinstance(exc, InventoryRejectedException):
        return ErrorKey.INVENTORY_REJECTED
    return ErrorKey.STORE_UNAVAILABLE


class ReconcileRunner:
    def __init__(self, client: Any, preferences: PreferenceStore, fee: FeeConfig):
        self._client = client
        self._preferences = preferences
        self._fee = fee
        self._inflight: asyncio.Future[ReconcileOutcome] | None = None
        self._rerun_requested = False
        self.passes = 0

    @property
    def busy(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def run(self) -> ReconcileOutcome:
        if self.busy:
            self._rerun_requested = True
        else:
            self._inflight = asyncio.ensure_future(self._drain())
        # A cancelled caller must not cancel a pass whose write may be on the wire.
        return await asyncio.shield(self._inflight)

    async def _drain(self) -> ReconcileOutcome:
        while True:
            # Triggers that arrived before this pass reads the cart are covered by it.
            self._rerun_requested = False
            outcome = await self._pass()
            if not self._rerun_requested:
                return outcome
            logger.debug("Triggers arrived during pass %s; reconciling again", self.passes)

    async def _pass(self) -> ReconcileOutcome:
        self.passes += 1
        snapshot = await read_snapshot(self._client, self._fee.sku)
        if snapshot is None:
            return ReconcileOutcome(
                False,
                error_key=ErrorKey.STORE_UNAVAILABLE,
                error=StoreUnavailableException("read_snapshot"),
            )

        preference_cleared = False
        if snapshot.subtotal_excluding_fee <= 0 and self._preferences.wants_fee():
            self._preferences.clear()
            preference_cleared = True
            logger.info("Cart is empty; fee preference cleared")

        action = reconcile(snapshot, self._preferences.get(), self._fee.rate)
        try:
            await apply_fee_action(action, client=self._client, fee=self._fee)
        except FeeSyncException as exc:
            logger.error("Fee action %s failed: %s", action.kind, exc.message)
            return ReconcileOutcome(
                False,
                action=action,
                snapshot=snapshot,
                error_key=_error_key(exc),
                error=exc,
                preference_cleared=preference_cleared,
            )

        return ReconcileOutcome(
            True,
            action=action,
            snapshot=snapshot,
            preference_cleared=preference_cleared,
        )

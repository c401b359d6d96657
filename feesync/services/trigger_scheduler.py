"""Trigger scheduler: routes page and cart events into reconciliation passes.

Immediate triggers (checkbox toggle, cart updated, page init, add-to-cart
completed) run a pass right away. Quantity controls fire in bursts, so they
are debounced: each event cancels the pending timer and arms a new one, and
only the timer that survives the quiescence window runs a pass. The cart is
read when the timer fires, never when the event arrives.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from feesync.core.config import FeeConfig
from feesync.core.constants import (
    CART_CHECKBOXES,
    CHECKBOX_PRODUCT,
    ENGINE_ORIGIN,
    FEE_CHANGED_EVENT,
    MSG_ADDING_FEE,
    MSG_FEE_OUT_OF_STOCK,
    MSG_REMOVING_FEE,
    MSG_UPDATE_FAILED,
    MSG_VARIANT_MISSING,
)
from feesync.core.events import EventBus
from feesync.domain.preference import PreferenceStore
from feesync.interfaces.page import Checkbox, Page
from feesync.services.reconcile_runner import ErrorKey, ReconcileOutcome, ReconcileRunner
from feesync.services.ui_sync import UISyncLayer

logger = logging.getLogger(__name__)

_USER_MESSAGES = {
    ErrorKey.CONFIGURATION_MISSING: MSG_VARIANT_MISSING,
    ErrorKey.INVENTORY_REJECTED: MSG_FEE_OUT_OF_STOCK,
}


class TriggerScheduler:
    def __init__(
        self,
        *,
        runner: ReconcileRunner,
        preferences: PreferenceStore,
        page: Page,
        ui: UISyncLayer,
        events: EventBus,
        fee: FeeConfig,
    ):
        self._runner = runner
        self._preferences = preferences
        self._page = page
        self._ui = ui
        self._events = events
        self._fee = fee
        self._timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Checkbox bindings
    # ------------------------------------------------------------------

    def _set_cart_checkboxes(self, checked: bool) -> None:
        for element_id in CART_CHECKBOXES:
            checkbox = self._page.find_checkbox(element_id)
            if checkbox is not None:
                checkbox.checked = checked

    def sync_checkboxes_from_storage(self) -> None:
        if self._preferences.wants_fee():
            self._set_cart_checkboxes(True)

    def bind_checkboxes(self) -> list[Callable[[], None]]:
        """Attach listeners to the current checkbox elements."""
        checked = self._preferences.wants_fee()
        bindings: list[Callable[[], None]] = []
        for element_id in CART_CHECKBOXES:
            checkbox = self._page.find_checkbox(element_id)
            if checkbox is None:
                continue
            checkbox.checked = checked
            bindings.append(checkbox.add_listener(self.on_checkbox_toggled))

        product_checkbox = self._page.find_checkbox(CHECKBOX_PRODUCT)
        if product_checkbox is not None:
            product_checkbox.checked = checked
            bindings.append(product_checkbox.add_listener(self.on_product_checkbox_toggled))
        return bindings

    # ------------------------------------------------------------------
    # Immediate triggers
    # ------------------------------------------------------------------

    def _handle_outcome(self, outcome: ReconcileOutcome, *, alert: bool = True) -> None:
        snapshot = outcome.snapshot
        if snapshot is not None and snapshot.subtotal_excluding_fee <= 0:
            self._set_cart_checkboxes(False)

        if outcome.ok:
            return

        if outcome.error_key == ErrorKey.INVENTORY_REJECTED:
            self._preferences.clear()
            self._set_cart_checkboxes(False)

        message = _USER_MESSAGES.get(outcome.error_key)
        if alert and message:
            self._page.alert(message)
        if outcome.error_key == ErrorKey.STORE_UNAVAILABLE:
            logger.info("Reconciliation skipped; waiting for the next trigger")

    async def _run_immediate(self, trigger: str) -> ReconcileOutcome:
        logger.debug("Reconciliation triggered by %s", trigger)
        outcome = await self._runner.run()
        self._handle_outcome(outcome)
        if outcome.changed_cart:
            await self._ui.refresh_cart_fragment()
        return outcome

    async def on_page_init(self) -> ReconcileOutcome:
        return await self._run_immediate("page_init")

    async def on_add_to_cart_completed(self) -> ReconcileOutcome:
        return await self._run_immediate("add_to_cart")

    async def on_cart_updated(self, **detail: Any) -> ReconcileOutcome | None:
        if detail.get("origin") == ENGINE_ORIGIN:
            return None
        return await self._run_immediate("cart_updated")

    async def on_checkbox_toggled(self, checkbox: Checkbox) -> ReconcileOutcome:
        checked = checkbox.checked
        previous = self._preferences.get()

        checkbox.disabled = True
        self._page.show_loader(MSG_ADDING_FEE if checked else MSG_REMOVING_FEE)

        if checked:
            self._preferences.set_wants_fee()
        else:
            self._preferences.clear()
        await self._events.emit(FEE_CHANGED_EVENT, checked=checked, origin=ENGINE_ORIGIN)

        outcome = await self._runner.run()
        self._handle_outcome(outcome, alert=False)
        if outcome.ok:
            self._page.reload()
            return outcome

        self._page.hide_loader()
        logger.error("Checkbox update failed: %s", outcome.error_key)
        self._page.alert(_USER_MESSAGES.get(outcome.error_key, MSG_UPDATE_FAILED))
        checkbox.checked = not checked
        checkbox.disabled = False
        if outcome.error_key != ErrorKey.INVENTORY_REJECTED:
            self._preferences.restore(previous)
        return outcome

    def on_product_checkbox_toggled(self, checkbox: Checkbox) -> None:
        """Store intent from the product page; it is applied on add-to-cart."""
        if checkbox.checked:
            self._preferences.set_wants_fee()
        else:
            self._preferences.clear()
        self._set_cart_checkboxes(checkbox.checked)

    # ------------------------------------------------------------------
    # Debounced triggers
    # ------------------------------------------------------------------

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None

    def schedule_debounced(self) -> None:
        self.cancel_pending()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._fee.debounce_seconds, self._fire_timer)

    def on_quantity_control(self) -> None:
        """Increase, decrease or remove-line control was clicked."""
        self.schedule_debounced()

    def on_quantity_input(self) -> None:
        """Quantity field received input or change."""
        self.schedule_debounced()

    def cancel_pending(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire_timer(self) -> None:
        self._timer = None
        task = asyncio.ensure_future(self._run_immediate("quantity_change"))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Debounced reconciliation crashed: %s", exc)

    async def wait_idle(self) -> None:
        """Wait for debounced passes that already fired."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        self.cancel_pending()
        await self.wait_idle()

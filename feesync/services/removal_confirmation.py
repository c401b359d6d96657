"""Confirmation dialog for explicitly removing the fee line item.

This is the only path that removes the fee without consulting the decision
table. It is opened by the dedicated remove control only; no automated
trigger reaches it.
"""
from __future__ import annotations

import logging
from typing import Any

from feesync.application.fees.apply_action import remove_fee
from feesync.core.config import FeeConfig
from feesync.core.constants import (
    CART_CHECKBOXES,
    CHECKBOX_PRODUCT,
    REMOVE_DIALOG_ID,
)
from feesync.core.exceptions import FeeSyncException
from feesync.domain.preference import PreferenceStore
from feesync.domain.removal_flow import RemovalState, can_transition
from feesync.interfaces.page import Page
from feesync.services.ui_sync import UISyncLayer

logger = logging.getLogger(__name__)

REMOVE_DIALOG_MARKUP = f"""
<div class="paypal-fee-modal-overlay" id="{REMOVE_DIALOG_ID}">
  <div class="paypal-fee-modal">
    <div class="paypal-fee-modal__header">
      <h3 class="paypal-fee-modal__title">Remove PayPal fee?</h3>
    </div>
    <div class="paypal-fee-modal__body">
      <p class="paypal-fee-modal__message">
        You are removing the PayPal fee from the cart.<br>
        This means you <strong>will NOT pay with PayPal</strong>.
      </p>
      <p class="paypal-fee-modal__warning-text">
        IMPORTANT: PayPal orders without the fee will not be processed.
      </p>
    </div>
    <div class="paypal-fee-modal__footer">
      <button class="paypal-fee-modal__button--cancel" data-modal-cancel>Cancel</button>
      <button class="paypal-fee-modal__button--confirm" data-modal-confirm>Confirm removal</button>
    </div>
  </div>
</div>
"""


class RemovalConfirmation:
    def __init__(
        self,
        *,
        page: Page,
        client: Any,
        preferences: PreferenceStore,
        ui: UISyncLayer,
        fee: FeeConfig,
    ):
        self._page = page
        self._client = client
        self._preferences = preferences
        self._ui = ui
        self._fee = fee
        self.state = RemovalState.CLOSED
        self.installed = False

    def install(self) -> None:
        if self.installed:
            return
        self._page.inject_dialog(REMOVE_DIALOG_ID, REMOVE_DIALOG_MARKUP)
        self.installed = True

    def _transition(self, target: str) -> bool:
        if not can_transition(self.state, target):
            logger.debug("Ignoring removal dialog transition %s -> %s", self.state, target)
            return False
        self.state = target
        return True

    def _close(self) -> None:
        self._page.set_dialog_visible(REMOVE_DIALOG_ID, False)
        self._page.set_scroll_locked(False)
        self.state = RemovalState.CLOSED

    def open(self) -> bool:
        """Handle activation of the remove-fee control."""
        if not self._transition(RemovalState.OPEN):
            return False
        self._page.set_dialog_visible(REMOVE_DIALOG_ID, True)
        self._page.set_scroll_locked(True)
        return True

    def cancel(self) -> bool:
        if not self._transition(RemovalState.CANCELLED):
            return False
        self._close()
        return True

    def on_overlay_click(self) -> bool:
        return self.cancel()

    def on_key(self, key: str) -> bool:
        if key != "Escape" or self.state != RemovalState.OPEN:
            return False
        return self.cancel()

    async def confirm(self) -> bool:
        """Clear the preference, remove the fee and refresh the cart.

        Returns whether the store accepted the removal. The preference is
        cleared before the request goes out; a failed removal is completed by
        the next automatic pass.
        """
        if not self._transition(RemovalState.CONFIRMED):
            return False
        logger.info("PayPal fee removal confirmed by the user")
        self._close()

        self._preferences.clear()
        for element_id in (*CART_CHECKBOXES, CHECKBOX_PRODUCT):
            checkbox = self._page.find_checkbox(element_id)
            if checkbox is not None:
                checkbox.checked = False

        try:
            removed = await remove_fee(client=self._client, fee=self._fee)
        except FeeSyncException as exc:
            logger.error("Confirmed fee removal failed: %s", exc.message)
            removed = False

        await self._ui.refresh_cart_fragment()
        return removed

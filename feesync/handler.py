"""Host-facing handle wiring the fee engine together.

Example:
```python
settings = load_settings()
handler = FeeHandler(settings, page=my_page_adapter)
await handler.init()
...
handler.scheduler.on_quantity_control()    # quantity stepper clicked
handler.removal.open()                     # remove-fee control activated
await handler.close()
```
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from feesync.application.fees.read_snapshot import read_snapshot
from feesync.core.config import FeeConfig, Settings
from feesync.core.constants import CART_UPDATED_EVENT, ENGINE_ORIGIN
from feesync.core.events import EventBus
from feesync.core.exceptions import FeeSyncException
from feesync.core.fee_math import calculate_fee
from feesync.domain.cart import CartSnapshot
from feesync.domain.fee_rules import FeeAction, reconcile
from feesync.domain.preference import PreferenceStore, SessionStorage
from feesync.integrations.cart_client import ShopCartClient
from feesync.integrations.session_storage import RedisSessionStorage
from feesync.interfaces.page import Page
from feesync.services.reconcile_runner import ReconcileOutcome, ReconcileRunner
from feesync.services.removal_confirmation import RemovalConfirmation
from feesync.services.trigger_scheduler import TriggerScheduler
from feesync.services.ui_sync import UISyncLayer

logger = logging.getLogger(__name__)


class FeeHandler:
    def __init__(
        self,
        settings: Settings,
        *,
        page: Page,
        client: Any | None = None,
        storage: SessionStorage | None = None,
        events: EventBus | None = None,
    ):
        self.settings = settings
        self.config: FeeConfig = settings.fee
        self.page = page
        self.client = client or ShopCartClient(
            settings.shop_base_url, timeout=settings.request_timeout
        )
        self.storage = storage or RedisSessionStorage(
            settings.session_id,
            redis_url=settings.redis_url,
            ttl_seconds=settings.session_ttl_seconds,
        )
        self.preferences = PreferenceStore(
            self.storage, self.config.session_key_added, self.config.session_key_declined
        )
        self.events = events or EventBus()
        self.ui = UISyncLayer(page, self.client, settings.cart_section_type)
        self.runner = ReconcileRunner(self.client, self.preferences, self.config)
        self.scheduler = TriggerScheduler(
            runner=self.runner,
            preferences=self.preferences,
            page=page,
            ui=self.ui,
            events=self.events,
            fee=self.config,
        )
        self.removal = RemovalConfirmation(
            page=page,
            client=self.client,
            preferences=self.preferences,
            ui=self.ui,
            fee=self.config,
        )
        self._unsubscribers: list = []
        self.initialized = False

    async def init(self) -> ReconcileOutcome | None:
        """Install the dialog, bind listeners and align the fee with the cart."""
        if self.initialized:
            return None
        self.initialized = True
        self.removal.install()
        self.scheduler.sync_checkboxes_from_storage()
        self.ui.bind(self.scheduler.bind_checkboxes)
        self._unsubscribers.append(
            self.events.subscribe(CART_UPDATED_EVENT, self.scheduler.on_cart_updated)
        )
        return await self.scheduler.on_page_init()

    def calculate_fee(self, subtotal: int) -> int:
        return calculate_fee(subtotal, Decimal(self.config.rate))

    async def read_snapshot(self) -> CartSnapshot | None:
        return await read_snapshot(self.client, self.config.sku)

    def reconcile(self, snapshot: CartSnapshot, preference: str | None = None) -> FeeAction:
        if preference is None:
            preference = self.preferences.get()
        return reconcile(snapshot, preference, self.config.rate)

    async def add_to_cart(
        self,
        variant_id: int,
        quantity: int = 1,
        properties: dict[str, str] | None = None,
    ) -> ReconcileOutcome | None:
        """Add merchandise without leaving the page, then align the fee."""
        try:
            await self.client.add_line_item(variant_id, quantity, properties)
        except FeeSyncException as exc:
            logger.warning("Add to cart failed for variant %s: %s", variant_id, exc.message)
            return None

        outcome = await self.scheduler.on_add_to_cart_completed()
        await self.events.emit(CART_UPDATED_EVENT, origin=ENGINE_ORIGIN)
        return outcome

    async def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.ui.unbind_all()
        await self.scheduler.close()
        close = getattr(self.client, "close", None)
        if close is not None:
            await close()

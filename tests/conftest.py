"""Shared pytest fixtures: an in-memory shop cart, fake clients and pages."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from feesync.core.config import FeeConfig, Settings
from feesync.core.events import EventBus
from feesync.core.exceptions import StoreUnavailableException
from feesync.domain.cart import Cart
from feesync.domain.preference import PreferenceStore
from feesync.handler import FeeHandler
from feesync.integrations.session_storage import RedisSessionStorage
from feesync.interfaces.page import HeadlessPage

FEE_SKU = "PAYPAL-FEE-3-5"
FEE_VARIANT_ID = 52038356861271
SECTION_ID = "main-cart"
SECTION_MARKUP = f'<section data-section-type="cart" data-section-id="{SECTION_ID}"></section>'


@dataclass
class ShopState:
    """Cart document with the merge/remove rules of the shop's AJAX API."""

    items: list[dict[str, Any]] = field(default_factory=list)
    prices: dict[int, int] = field(default_factory=dict)
    fee_variant_id: int = FEE_VARIANT_ID
    fee_sku: str = FEE_SKU
    _next_key: int = 1

    def _new_key(self, variant_id: int) -> str:
        key = f"{variant_id}:{self._next_key}"
        self._next_key += 1
        return key

    def add(self, variant_id: int, quantity: int, properties: dict | None = None) -> dict:
        for item in self.items:
            if item["variant_id"] == variant_id:
                item["quantity"] += quantity
                item["final_line_price"] = item["unit_price"] * item["quantity"]
                return item
        is_fee = variant_id == self.fee_variant_id
        unit_price = 1 if is_fee else self.prices.get(variant_id, 1000)
        item = {
            "key": self._new_key(variant_id),
            "variant_id": variant_id,
            "sku": self.fee_sku if is_fee else f"SKU-{variant_id}",
            "quantity": quantity,
            "unit_price": unit_price,
            "final_line_price": unit_price * quantity,
            "properties": properties or {},
        }
        self.items.append(item)
        return item

    def change(self, quantity: int, key: str | None = None, line: int | None = None) -> bool:
        if key is not None:
            matches = [item for item in self.items if item["key"] == key]
        elif line is not None and 0 < line <= len(self.items):
            matches = [self.items[line - 1]]
        else:
            matches = []
        if not matches:
            return False
        item = matches[0]
        if quantity <= 0:
            self.items.remove(item)
        else:
            item["quantity"] = quantity
            item["final_line_price"] = item["unit_price"] * quantity
        return True

    def document(self) -> dict[str, Any]:
        return {"items": [dict(item) for item in self.items]}

    def fee_lines(self) -> list[dict[str, Any]]:
        return [item for item in self.items if item["sku"] == self.fee_sku]

    def merch_key(self, variant_id: int) -> str:
        return next(item["key"] for item in self.items if item["variant_id"] == variant_id)


@dataclass
class FakeCartClient:
    """Async cart client over ShopState that yields on every call."""

    shop: ShopState = field(default_factory=ShopState)
    calls: list[tuple] = field(default_factory=list)
    fail_get: bool = False
    fail_mutation: Exception | None = None
    fail_section: bool = False
    section_markup: str = SECTION_MARKUP

    async def get_cart(self) -> Cart:
        await asyncio.sleep(0)
        self.calls.append(("get",))
        if self.fail_get:
            raise StoreUnavailableException("get_cart", "connection refused")
        return Cart.from_dict(self.shop.document())

    async def add_line_item(self, variant_id, quantity, properties=None) -> dict:
        await asyncio.sleep(0)
        self.calls.append(("add", variant_id, quantity))
        if self.fail_mutation is not None:
            raise self.fail_mutation
        return {"items": [self.shop.add(variant_id, quantity, properties)]}

    async def change_line_item(self, *, quantity, key=None, line=None) -> Cart:
        await asyncio.sleep(0)
        self.calls.append(("change", key, quantity))
        if self.fail_mutation is not None:
            raise self.fail_mutation
        self.shop.change(quantity, key=key, line=line)
        return Cart.from_dict(self.shop.document())

    async def fetch_section(self, section_id: str) -> str:
        await asyncio.sleep(0)
        self.calls.append(("section", section_id))
        if self.fail_section:
            raise StoreUnavailableException("fetch_section", "HTTP 500")
        return self.section_markup

    @property
    def mutations(self) -> list[tuple]:
        return [call for call in self.calls if call[0] in ("add", "change")]

    @property
    def reads(self) -> int:
        return sum(1 for call in self.calls if call[0] == "get")


@pytest.fixture()
def shop() -> ShopState:
    return ShopState(prices={1: 2000, 2: 1000, 3: 500})


@pytest.fixture()
def fake_client(shop: ShopState) -> FakeCartClient:
    return FakeCartClient(shop=shop)


@pytest.fixture()
def fee_config() -> FeeConfig:
    return FeeConfig(debounce_seconds=0.05)


@pytest.fixture()
def settings(fee_config: FeeConfig) -> Settings:
    return Settings(shop_base_url="http://shop.test", session_id="test-session", fee=fee_config)


@pytest.fixture()
def storage() -> RedisSessionStorage:
    return RedisSessionStorage("test-session", redis_url=None)


@pytest.fixture()
def preferences(storage: RedisSessionStorage, fee_config: FeeConfig) -> PreferenceStore:
    return PreferenceStore(storage, fee_config.session_key_added, fee_config.session_key_declined)


@pytest.fixture()
def page() -> HeadlessPage:
    return HeadlessPage(section_id=SECTION_ID)


@pytest.fixture()
async def handler(settings, page, fake_client, storage):
    instance = FeeHandler(
        settings, page=page, client=fake_client, storage=storage, events=EventBus()
    )
    try:
        yield instance
    finally:
        await instance.close()

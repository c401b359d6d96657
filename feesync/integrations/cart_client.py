"""
Async HTTP client for the shop's AJAX cart endpoints.

Endpoints used:
- GET  /cart.js                   current cart document
- POST /cart/add.js               add line items
- POST /cart/change.js            change a line item quantity (by key or line)
- GET  /cart?section_id=<id>      rendered cart section markup

Network failures and bodies that cannot be decoded or parsed are raised as
StoreUnavailableException so the pipeline can abort without touching local
state. An add refused for stock reasons is raised as InventoryRejectedException.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any
from urllib.parse import urljoin

import aiohttp

from feesync.core.exceptions import InventoryRejectedException, StoreUnavailableException
from feesync.domain.cart import Cart

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class ShopCartClient:
    """
    Client for the remote cart store.

    Usage:
    ```python
    client = ShopCartClient("https://shop.example.com")
    cart = await client.get_cart()
    await client.change_line_item(quantity=0, key=cart.items[0].key)
    await client.close()
    ```
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    def _url(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    async def _request_json(
        self,
        operation: str,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        session = await self._get_session()
        try:
            async with session.request(
                method, self._url(path), json=payload, headers=JSON_HEADERS
            ) as response:
                if response.status >= 400:
                    body = await self._error_body(response)
                    raise StoreUnavailableException(
                        operation, f"HTTP {response.status} {body.get('description', '')}".strip()
                    )
                data = await response.json(content_type=None)
        except (
            aiohttp.ClientError,
            asyncio.TimeoutError,
            json.JSONDecodeError,
            UnicodeDecodeError,
        ) as exc:
            raise StoreUnavailableException(operation, exc) from exc

        if not isinstance(data, dict):
            raise StoreUnavailableException(operation, f"unexpected payload {type(data).__name__}")
        return data

    @staticmethod
    async def _error_body(response: aiohttp.ClientResponse) -> dict[str, Any]:
        try:
            body = await response.json(content_type=None)
        except (aiohttp.ClientError, json.JSONDecodeError, ValueError):
            return {}
        return body if isinstance(body, dict) else {}

    async def get_cart(self) -> Cart:
        data = await self._request_json("get_cart", "GET", "/cart.js")
        try:
            return Cart.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreUnavailableException("get_cart", exc) from exc

    async def add_line_item(
        self,
        variant_id: int,
        quantity: int,
        properties: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        item: dict[str, Any] = {"id": int(variant_id), "quantity": int(quantity)}
        if properties:
            item["properties"] = dict(properties)

        session = await self._get_session()
        try:
            async with session.post(
                self._url("/cart/add.js"), json={"items": [item]}, headers=JSON_HEADERS
            ) as response:
                if response.status >= 400:
                    body = await self._error_body(response)
                    description = str(body.get("description") or body.get("message") or "")
                    logger.error(
                        "Add line item rejected (HTTP %s): %s", response.status, description
                    )
                    if "out of stock" in description.lower() or "sold out" in description.lower():
                        raise InventoryRejectedException(description)
                    raise StoreUnavailableException(
                        "add_line_item", f"HTTP {response.status} {description}".strip()
                    )
                data = await response.json(content_type=None)
        except (
            aiohttp.ClientError,
            asyncio.TimeoutError,
            json.JSONDecodeError,
            UnicodeDecodeError,
        ) as exc:
            raise StoreUnavailableException("add_line_item", exc) from exc

        if not isinstance(data, dict):
            raise StoreUnavailableException("add_line_item", "unexpected payload")
        return data

    async def change_line_item(
        self,
        *,
        quantity: int,
        key: str | None = None,
        line: int | None = None,
    ) -> Cart:
        if key is None and line is None:
            raise ValueError("change_line_item needs a key or a 1-based line index")
        payload: dict[str, Any] = {"quantity": int(quantity)}
        if key is not None:
            payload["id"] = key
        else:
            payload["line"] = int(line)

        data = await self._request_json("change_line_item", "POST", "/cart/change.js", payload)
        try:
            return Cart.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreUnavailableException("change_line_item", exc) from exc

    async def fetch_section(self, section_id: str) -> str:
        session = await self._get_session()
        try:
            async with session.get(
                self._url("/cart"), params={"section_id": section_id}
            ) as response:
                if response.status >= 400:
                    raise StoreUnavailableException("fetch_section", f"HTTP {response.status}")
                return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as exc:
            raise StoreUnavailableException("fetch_section", exc) from exc

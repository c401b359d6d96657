"""HTTP-level tests for the cart client against an in-process shop server."""
from __future__ import annotations

from dataclasses import dataclass

import pytest
from aiohttp import web
from aiohttp import test_utils

from feesync.core.exceptions import InventoryRejectedException, StoreUnavailableException
from feesync.integrations.cart_client import ShopCartClient

from conftest import FEE_VARIANT_ID, SECTION_ID, SECTION_MARKUP, ShopState


@dataclass
class ShopServer:
    client: ShopCartClient
    requests: list[tuple[str, dict]]
    flags: dict


def make_shop_app(
    shop: ShopState, requests: list[tuple[str, dict]], flags: dict
) -> web.Application:
    async def get_cart(_request: web.Request) -> web.Response:
        if flags.get("broken"):
            return web.Response(status=502, text="bad gateway")
        if flags.get("garbage"):
            return web.Response(text="<html>not json</html>", content_type="text/html")
        if flags.get("undecodable"):
            return web.Response(body=b'{"items": [\xff\xfe]}', content_type="application/json")
        return web.json_response(shop.document())

    async def add(request: web.Request) -> web.Response:
        body = await request.json()
        requests.append(("add", body))
        item = body["items"][0]
        if item["id"] in flags.get("sold_out", ()):
            return web.json_response(
                {"status": 422, "message": "Cart Error", "description": "The product is already out of stock."},
                status=422,
            )
        added = shop.add(item["id"], item["quantity"], item.get("properties"))
        if flags.get("undecodable_add"):
            return web.Response(body=b'{"items": [\xff]}', content_type="application/json")
        return web.json_response({"items": [added]})

    async def change(request: web.Request) -> web.Response:
        body = await request.json()
        requests.append(("change", body))
        if not shop.change(body["quantity"], key=body.get("id"), line=body.get("line")):
            return web.json_response({"status": 400, "description": "no such line"}, status=400)
        return web.json_response(shop.document())

    async def section(request: web.Request) -> web.Response:
        if request.query.get("section_id") != SECTION_ID:
            return web.Response(status=404)
        if flags.get("undecodable_section"):
            return web.Response(body=b"<section \xff\xfe>", content_type="text/html", charset="utf-8")
        return web.Response(text=SECTION_MARKUP, content_type="text/html")

    app = web.Application()
    app.router.add_get("/cart.js", get_cart)
    app.router.add_post("/cart/add.js", add)
    app.router.add_post("/cart/change.js", change)
    app.router.add_get("/cart", section)
    return app


@pytest.fixture()
async def shop_server(shop: ShopState):
    requests: list[tuple[str, dict]] = []
    flags: dict = {}
    server = test_utils.TestServer(make_shop_app(shop, requests, flags))
    await server.start_server()
    client = ShopCartClient(str(server.make_url("/")), timeout=5)
    try:
        yield ShopServer(client, requests, flags)
    finally:
        await client.close()
        await server.close()


@pytest.mark.asyncio
async def test_get_cart_parses_line_items(shop, shop_server) -> None:
    client = shop_server.client
    shop.add(1, 2)
    shop.add(FEE_VARIANT_ID, 140)

    cart = await client.get_cart()

    assert [item.sku for item in cart.items] == ["SKU-1", "PAYPAL-FEE-3-5"]
    assert cart.items[0].final_line_price == 4000
    assert cart.items[1].quantity == 140


@pytest.mark.asyncio
async def test_add_line_item_posts_items_payload(shop, shop_server) -> None:
    client, requests = shop_server.client, shop_server.requests

    await client.add_line_item(FEE_VARIANT_ID, 70, {"_paypal_fee": "true"})

    assert requests == [
        ("add", {"items": [{"id": FEE_VARIANT_ID, "quantity": 70, "properties": {"_paypal_fee": "true"}}]})
    ]
    assert shop.fee_lines()[0]["quantity"] == 70


@pytest.mark.asyncio
async def test_change_line_item_by_key_and_by_line(shop, shop_server) -> None:
    client, requests = shop_server.client, shop_server.requests
    shop.add(1, 1)
    shop.add(2, 1)

    cart = await client.change_line_item(quantity=3, key=shop.merch_key(1))
    assert cart.items[0].quantity == 3

    cart = await client.change_line_item(quantity=0, line=2)
    assert len(cart.items) == 1
    assert requests[-1] == ("change", {"quantity": 0, "line": 2})


@pytest.mark.asyncio
async def test_change_line_item_requires_target(shop_server) -> None:
    client = shop_server.client
    with pytest.raises(ValueError):
        await client.change_line_item(quantity=1)


@pytest.mark.asyncio
async def test_out_of_stock_add_raises_inventory_rejected(shop, shop_server) -> None:
    client = shop_server.client
    shop_server.flags["sold_out"] = {FEE_VARIANT_ID}

    with pytest.raises(InventoryRejectedException) as exc_info:
        await client.add_line_item(FEE_VARIANT_ID, 35)

    assert "out of stock" in exc_info.value.description
    assert shop.fee_lines() == []


@pytest.mark.asyncio
async def test_server_error_is_store_unavailable(shop, shop_server) -> None:
    client = shop_server.client
    shop_server.flags["broken"] = True

    with pytest.raises(StoreUnavailableException) as exc_info:
        await client.get_cart()
    assert exc_info.value.operation == "get_cart"


@pytest.mark.asyncio
async def test_unparseable_cart_is_store_unavailable(shop, shop_server) -> None:
    client = shop_server.client
    shop_server.flags["garbage"] = True

    with pytest.raises(StoreUnavailableException):
        await client.get_cart()


@pytest.mark.asyncio
async def test_undecodable_cart_body_is_store_unavailable(shop, shop_server) -> None:
    shop_server.flags["undecodable"] = True

    with pytest.raises(StoreUnavailableException) as exc_info:
        await shop_server.client.get_cart()
    assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


@pytest.mark.asyncio
async def test_undecodable_add_response_is_store_unavailable(shop_server) -> None:
    shop_server.flags["undecodable_add"] = True

    with pytest.raises(StoreUnavailableException) as exc_info:
        await shop_server.client.add_line_item(FEE_VARIANT_ID, 70)
    assert exc_info.value.operation == "add_line_item"


@pytest.mark.asyncio
async def test_unknown_line_change_is_store_unavailable(shop_server) -> None:
    client = shop_server.client
    with pytest.raises(StoreUnavailableException):
        await client.change_line_item(quantity=0, key="missing")


@pytest.mark.asyncio
async def test_connection_refused_is_store_unavailable() -> None:
    client = ShopCartClient("http://127.0.0.1:9", timeout=2)
    try:
        with pytest.raises(StoreUnavailableException):
            await client.get_cart()
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_fetch_section_returns_markup(shop_server) -> None:
    client = shop_server.client

    markup = await client.fetch_section(SECTION_ID)

    assert f'data-section-id="{SECTION_ID}"' in markup
    with pytest.raises(StoreUnavailableException):
        await client.fetch_section("unknown")


@pytest.mark.asyncio
async def test_undecodable_section_is_store_unavailable(shop_server) -> None:
    shop_server.flags["undecodable_section"] = True

    with pytest.raises(StoreUnavailableException) as exc_info:
        await shop_server.client.fetch_section(SECTION_ID)
    assert exc_info.value.operation == "fetch_section"

"""Integrations package - remote cart store and session storage."""

from feesync.integrations.cart_client import ShopCartClient
from feesync.integrations.session_storage import RedisSessionStorage

__all__ = ["RedisSessionStorage", "ShopCartClient"]

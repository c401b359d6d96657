"""Cart fragment refresh and checkbox listener lifecycle.

The layer owns every listener registration made against cart elements.
Swapping the cart section replaces those elements, so after each swap the
old registrations are released and the binder is run again against the new
elements.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from feesync.core.exceptions import StoreUnavailableException
from feesync.interfaces.page import Page

logger = logging.getLogger(__name__)

Unbind = Callable[[], None]
Binder = Callable[[], list[Unbind]]


class RefreshResult:
    OK = "ok"
    FALLBACK = "fallback"


class UISyncLayer:
    def __init__(self, page: Page, client: Any, section_type: str):
        self._page = page
        self._client = client
        self._section_type = section_type
        self._binder: Binder | None = None
        self._bindings: list[Unbind] = []

    def bind(self, binder: Binder) -> None:
        self._binder = binder
        self.rebind()

    def rebind(self) -> None:
        self.unbind_all()
        if self._binder is not None:
            self._bindings = list(self._binder())

    def unbind_all(self) -> None:
        for unbind in self._bindings:
            unbind()
        self._bindings = []

    @property
    def binding_count(self) -> int:
        return len(self._bindings)

    def _fallback(self, reason: str) -> str:
        logger.warning("Cart fragment refresh failed (%s); reloading page", reason)
        self._page.reload()
        return RefreshResult.FALLBACK

    async def refresh_cart_fragment(self) -> str:
        section_id = self._page.find_section_id(self._section_type)
        if not section_id:
            return self._fallback("cart section not found")

        try:
            markup = await self._client.fetch_section(section_id)
        except StoreUnavailableException as exc:
            return self._fallback(exc.message)

        if not self._page.replace_section(section_id, markup):
            return self._fallback(f"section {section_id} missing from response")

        self.rebind()
        return RefreshResult.OK

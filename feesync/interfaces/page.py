"""Page surface the engine reads from and renders into.

The engine never touches markup directly. A host adapter implements
:class:`Page`; :class:`HeadlessPage` is an in-process implementation used by
the CLI and by tests, with checkboxes that are replaced (and lose their
listeners) whenever the cart section is swapped.
"""
from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from feesync.core.constants import CART_CHECKBOXES, CART_SECTION_TYPE

logger = logging.getLogger(__name__)

CheckboxListener = Callable[["Checkbox"], Any]


@dataclass(eq=False)
class Checkbox:
    element_id: str
    checked: bool = False
    disabled: bool = False
    listeners: list[CheckboxListener] = field(default_factory=list)

    def add_listener(self, listener: CheckboxListener) -> Callable[[], None]:
        self.listeners.append(listener)

        def _remove() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return _remove

    async def dispatch_change(self) -> list[Any]:
        results = []
        for listener in list(self.listeners):
            result = listener(self)
            if inspect.isawaitable(result):
                result = await result
            results.append(result)
        return results


class Page(Protocol):
    def find_checkbox(self, element_id: str) -> Checkbox | None: ...

    def find_section_id(self, section_type: str) -> str | None: ...

    def replace_section(self, section_id: str, markup: str) -> bool: ...

    def inject_dialog(self, dialog_id: str, markup: str) -> None: ...

    def set_dialog_visible(self, dialog_id: str, visible: bool) -> None: ...

    def set_scroll_locked(self, locked: bool) -> None: ...

    def show_loader(self, message: str) -> None: ...

    def hide_loader(self) -> None: ...

    def alert(self, message: str) -> None: ...

    def reload(self) -> None: ...


@dataclass
class HeadlessPage:
    """In-memory page that records everything rendered into it."""

    section_id: str | None = "main-cart"
    section_type: str = CART_SECTION_TYPE
    checkbox_ids: tuple[str, ...] = CART_CHECKBOXES
    section_markup: str = ""
    checkboxes: dict[str, Checkbox] = field(default_factory=dict)
    dialogs: dict[str, str] = field(default_factory=dict)
    visible_dialogs: set[str] = field(default_factory=set)
    scroll_locked: bool = False
    loader_message: str | None = None
    alerts: list[str] = field(default_factory=list)
    reload_count: int = 0
    replaced_sections: int = 0

    def __post_init__(self) -> None:
        for element_id in self.checkbox_ids:
            self.checkboxes.setdefault(element_id, Checkbox(element_id))

    def find_checkbox(self, element_id: str) -> Checkbox | None:
        return self.checkboxes.get(element_id)

    def find_section_id(self, section_type: str) -> str | None:
        if section_type != self.section_type:
            return None
        return self.section_id

    def replace_section(self, section_id: str, markup: str) -> bool:
        if f'data-section-id="{section_id}"' not in markup:
            return False
        self.section_markup = markup
        self.replaced_sections += 1
        # New elements carry their old checked state but none of the listeners.
        for element_id in CART_CHECKBOXES:
            old = self.checkboxes.get(element_id)
            if old is not None:
                self.checkboxes[element_id] = Checkbox(element_id, checked=old.checked)
        return True

    def inject_dialog(self, dialog_id: str, markup: str) -> None:
        self.dialogs[dialog_id] = markup

    def set_dialog_visible(self, dialog_id: str, visible: bool) -> None:
        if visible:
            self.visible_dialogs.add(dialog_id)
        else:
            self.visible_dialogs.discard(dialog_id)

    def set_scroll_locked(self, locked: bool) -> None:
        self.scroll_locked = locked

    def show_loader(self, message: str) -> None:
        self.loader_message = message

    def hide_loader(self) -> None:
        self.loader_message = None

    def alert(self, message: str) -> None:
        logger.info("Page alert: %s", message)
        self.alerts.append(message)

    def reload(self) -> None:
        self.reload_count += 1

    async def toggle(self, element_id: str, checked: bool) -> list[Any]:
        """Simulate the user changing a checkbox and await its listeners."""
        checkbox = self.checkboxes[element_id]
        checkbox.checked = checked
        return await checkbox.dispatch_change()

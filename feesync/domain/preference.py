"""Session-scoped opt-in preference for the surcharge."""
from __future__ import annotations

from typing import Protocol


class Preference:
    """Tri-state user intent stored in session storage."""

    WANTS_FEE = "wants_fee"
    DECLINED = "declined"
    UNSET = "unset"


class SessionStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class PreferenceStore:
    """get/set/clear operations over a session key/value storage."""

    def __init__(self, storage: SessionStorage, added_key: str, declined_key: str) -> None:
        self._storage = storage
        self._added_key = added_key
        self._declined_key = declined_key

    def get(self) -> str:
        if self._storage.get_item(self._added_key) == "true":
            return Preference.WANTS_FEE
        if self._storage.get_item(self._declined_key) == "true":
            return Preference.DECLINED
        return Preference.UNSET

    def wants_fee(self) -> bool:
        return self.get() == Preference.WANTS_FEE

    def set_wants_fee(self) -> None:
        self._storage.set_item(self._added_key, "true")
        self._storage.remove_item(self._declined_key)

    def clear(self) -> None:
        self._storage.remove_item(self._added_key)

    def restore(self, previous: str) -> None:
        """Reinstate a value previously returned by :meth:`get`."""
        if previous == Preference.WANTS_FEE:
            self.set_wants_fee()
            return
        self.clear()
        if previous == Preference.DECLINED:
            self._storage.set_item(self._declined_key, "true")

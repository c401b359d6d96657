"""Environment-driven configuration objects for the fee engine."""
from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

from feesync.core import constants
from feesync.core.exceptions import ConfigurationException


def _optional_int(value: str | None, default: int | None) -> int | None:
    if value is None:
        return default
    value = value.strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationException(f"Invalid integer value: {value!r}") from exc


def _decimal(value: str | None, default: Decimal) -> Decimal:
    if not value:
        return default
    try:
        return Decimal(value.strip())
    except InvalidOperation as exc:
        raise ConfigurationException(f"Invalid decimal value: {value!r}") from exc


@dataclass(slots=True)
class FeeConfig:
    sku: str = constants.DEFAULT_FEE_SKU
    rate: Decimal = constants.DEFAULT_FEE_RATE
    variant_id: int | None = constants.DEFAULT_FEE_VARIANT_ID
    session_key_added: str = constants.SESSION_KEY_ADDED
    session_key_declined: str = constants.SESSION_KEY_DECLINED
    debounce_seconds: float = constants.DEBOUNCE_SECONDS

    @property
    def line_item_properties(self) -> dict[str, str]:
        return {constants.FEE_LINE_PROPERTY: "true", "Note": constants.FEE_LINE_NOTE}


@dataclass(slots=True)
class Settings:
    shop_base_url: str
    redis_url: str | None = None
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    session_ttl_seconds: int = constants.SESSION_TTL_SECONDS
    request_timeout: float = constants.REQUEST_TIMEOUT_SECONDS
    cart_section_type: str = constants.CART_SECTION_TYPE
    log_level: str = "INFO"
    fee: FeeConfig = field(default_factory=FeeConfig)


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    base_url = os.getenv("SHOP_BASE_URL")
    if not base_url:
        raise ConfigurationException("SHOP_BASE_URL environment variable is not set")

    debounce_ms = _optional_int(os.getenv("FEE_DEBOUNCE_MS"), None)
    fee = FeeConfig(
        sku=os.getenv("FEE_SKU", constants.DEFAULT_FEE_SKU),
        rate=_decimal(os.getenv("FEE_RATE"), constants.DEFAULT_FEE_RATE),
        variant_id=_optional_int(os.getenv("FEE_VARIANT_ID"), constants.DEFAULT_FEE_VARIANT_ID),
        debounce_seconds=(
            debounce_ms / 1000 if debounce_ms is not None else constants.DEBOUNCE_SECONDS
        ),
    )

    return Settings(
        shop_base_url=base_url.rstrip("/"),
        redis_url=os.getenv("REDIS_URL") or None,
        session_id=os.getenv("FEE_SESSION_ID") or uuid.uuid4().hex,
        session_ttl_seconds=int(os.getenv("FEE_SESSION_TTL", str(constants.SESSION_TTL_SECONDS))),
        request_timeout=float(
            os.getenv("SHOP_REQUEST_TIMEOUT", str(constants.REQUEST_TIMEOUT_SECONDS))
        ),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        fee=fee,
    )

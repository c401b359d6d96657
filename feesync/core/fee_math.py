"""Fee arithmetic in integer minor currency units."""
from __future__ import annotations

import math
from decimal import Decimal

from feesync.core.constants import DEFAULT_FEE_RATE


def calculate_fee(subtotal: int, rate: Decimal = DEFAULT_FEE_RATE) -> int:
    """Return ``ceil(subtotal * rate)``.

    Computed with Decimal so that exact products such as ``1000 * 0.035``
    stay exact and never round up by a float artefact.
    """
    if subtotal <= 0:
        return 0
    return int(math.ceil(Decimal(int(subtotal)) * Decimal(rate)))


def format_money(cents: int) -> str:
    euros = f"{int(cents) / 100:.2f}"
    return euros.replace(".", ",") + " €"

"""Shared utilities used across the booking engine."""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union
from uuid import UUID

NIL_UUID = UUID(int=0)

_CENTS = Decimal("0.01")


def is_nil(value: Optional[UUID]) -> bool:
    """True for a missing or all-zero identifier."""
    return value is None or value == NIL_UUID


def utc_now() -> datetime:
    """Timezone-aware current time, the default clock everywhere."""
    return datetime.now(timezone.utc)


def to_money(value: Union[Decimal, float, int, str]) -> Decimal:
    """Quantize a money value to cents.

    Examples:
        >>> to_money("10.005")
        Decimal('10.01')
        >>> to_money(7)
        Decimal('7.00')
    """
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)

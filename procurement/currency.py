"""
EUSD conversion and money rounding.

Every stored amount is normalised to EUSD (amount / exchange_rate) and
rounded half-up to two decimal places before it reaches the calculators.
"""
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional

MONEY_PLACES = Decimal("0.01")


def _to_decimal(value: float | int | str | Decimal) -> Decimal:
    # str() keeps the shortest repr, so 1.005 stays 1.005 rather than 1.00499...
    return value if isinstance(value, Decimal) else Decimal(str(value))


def round_money(value: float | int | str | Decimal) -> float:
    """Round to 2 dp, halves away from zero (1.005 -> 1.01, -1.005 -> -1.01)."""
    return float(_to_decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves up (42.5 -> 43)."""
    return int(_to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percent_of(quantity: float, total: float, cap: Optional[int] = 100) -> int:
    """
    round_half_up(quantity / total * 100), at most *cap*.

    0 when total <= 0 or the ratio is NaN. A ratio that overflows to
    +infinity is reported as *cap*, or 100 when uncapped.
    """
    if total <= 0:
        return 0
    ratio = quantity / total * 100
    if math.isnan(ratio):
        return 0
    if cap is not None and ratio >= cap:
        return cap
    if math.isinf(ratio):
        return 100 if ratio > 0 else 0
    return round_half_up(ratio)


def sum_money(values: Iterable[float]) -> float:
    """Exact decimal sum of money values, rounded to 2 dp."""
    total = Decimal("0")
    for v in values:
        total += _to_decimal(v)
    return round_money(total)


def to_eusd(amount: Optional[float], exchange_rate: Optional[float]) -> Optional[float]:
    """
    Convert a local-currency amount to EUSD.

    Returns None when either input is missing or the rate is zero.
    """
    if amount is None or exchange_rate is None:
        return None
    try:
        rate = _to_decimal(exchange_rate)
        if rate == 0:
            return None
        return round_money(_to_decimal(amount) / rate)
    except InvalidOperation:
        return None

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, places: int = 2) -> float:
    """Round on the decimal representation, halves away from zero.

    ``round()`` uses banker's rounding on the binary value, so 0.125 becomes
    0.12 there; payroll figures must round 0.125 to 0.13.
    """
    exponent = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def round2(value: float) -> float:
    return round_half_up(value, 2)


def round4(value: float) -> float:
    return round_half_up(value, 4)

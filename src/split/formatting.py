"""
Money formatting helpers.

Per-person amounts are always shown with exactly two decimals. The total
echoes the value the user entered: no forced decimals, thousands grouping
on screen, and plain digits in exported text.

Two-decimal rounding works on the exact binary value of the float, so
1.005 (stored as 1.00499999...) shows as 1.00, and exact ties round away
from zero. The on-screen total rounds the shortest decimal text of the
float instead, so 0.0625 shows as 0.063.

Non-finite values print as 'Infinity', '-Infinity' and 'NaN'.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional

from src.models.split import SplitPerson, SplitResult


CENTS = Decimal("0.01")
TOTAL_PRECISION = Decimal("0.001")

# Wide enough for any finite float
_PRECISION = 400


def _non_finite_text(amount: float) -> Optional[str]:
    if math.isnan(amount):
        return "NaN"
    if math.isinf(amount):
        return "Infinity" if amount > 0 else "-Infinity"
    return None


def format_money(amount: float) -> str:
    """Fixed two-decimal rendering, e.g. 164000 -> '164000.00'."""
    special = _non_finite_text(amount)
    if special is not None:
        return special

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        value = Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)
    return format(value, "f")


def format_number(amount: float) -> str:
    """
    Natural numeric text: '300', '300.5', '0.1'.

    Integral values print without a decimal point; others print the
    shortest digits that round-trip. Exponent notation is only used
    outside [1e-6, 1e21).
    """
    special = _non_finite_text(amount)
    if special is not None:
        return special

    if amount == int(amount) and abs(amount) < 1e21:
        return str(int(amount))

    text = repr(float(amount))
    if "e" in text and 1e-6 <= abs(amount) < 1e21:
        text = format(Decimal(text), "f")
    return text


def format_total(amount: float) -> str:
    """
    On-screen rendering of the total: '1,234,567.5'.

    Thousands grouping, at most three fraction digits (ties round up),
    trailing zeros dropped.
    """
    special = _non_finite_text(amount)
    if special is not None:
        return special

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        value = Decimal(repr(float(amount))).quantize(
            TOTAL_PRECISION, rounding=ROUND_HALF_UP
        )
    text = format(value, ",f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_person_amount(person: SplitPerson) -> str:
    """'€92.00'"""
    return f"{person.symbol}{format_money(person.amount)}"


def format_share_line(result: SplitResult, base_symbol: str) -> str:
    """Headline under the total, e.g. 'Split 3 ways = $100.00 each'."""
    return (
        f"Split {result.participant_count} ways = "
        f"{base_symbol}{format_money(result.amount_per_person)} each"
    )

"""
services/billing_cycle.py
-------------------------
Normalizes heterogeneous billing cycles to comparable figures.

Every aggregate in the system (dashboard totals, simulations, exports)
is computed on monthly equivalents, so this module is the single place
where a weekly or yearly price is turned into a per-month amount.

Rounding is round-half-up to whole currency units. Python's built-in
round() is banker's rounding, so the arithmetic goes through Decimal.
"""

from decimal import Decimal, ROUND_HALF_UP

WEEKLY = "weekly"
MONTHLY = "monthly"
YEARLY = "yearly"

BILLING_CYCLES: tuple[str, ...] = (WEEKLY, MONTHLY, YEARLY)

_WEEKS_PER_YEAR = Decimal(52)
_MONTHS_PER_YEAR = Decimal(12)
_ONE = Decimal(1)
_ONE_TENTH = Decimal("0.1")


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(_ONE, rounding=ROUND_HALF_UP))


def monthly_equivalent(amount: int, cycle: str) -> int:
    """
    Convert an amount billed every `cycle` into a per-month amount.

    Args:
        amount: Non-negative amount in whole currency units.
        cycle: 'weekly', 'monthly' or 'yearly'. Any other value is
            treated as already monthly.

    Returns:
        The monthly-equivalent amount, rounded half-up.

    Examples:
        >>> monthly_equivalent(10000, "yearly")
        833
        >>> monthly_equivalent(1000, "weekly")
        4333
    """
    if cycle == YEARLY:
        return _round_half_up(Decimal(amount) / _MONTHS_PER_YEAR)
    if cycle == WEEKLY:
        return _round_half_up(Decimal(amount) * _WEEKS_PER_YEAR / _MONTHS_PER_YEAR)
    return int(amount)


def annual_equivalent(amount: int, cycle: str) -> int:
    """
    Annualize the monthly equivalent.

    This is twelve times the *rounded* monthly figure, so a yearly
    subscription may come back a few units off its billed price
    (10000/yr -> 833/mo -> 9996/yr).
    """
    return monthly_equivalent(amount, cycle) * 12


def percentage(part: int, total: int) -> float:
    """Share of `part` in `total` as a percentage with one decimal (0.0 if total is 0)."""
    if total <= 0:
        return 0.0
    value = Decimal(part) * 100 / Decimal(total)
    return float(value.quantize(_ONE_TENTH, rounding=ROUND_HALF_UP))

from decimal import Decimal, ROUND_HALF_UP

MONEY_QUANT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    """Coerce int/float/str/Decimal into a Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(value) -> Decimal:
    """
    Round to the currency minor unit, half away from zero.
    Every pricing step goes through here so totals never drift.
    """
    return to_decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)

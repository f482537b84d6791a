from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from storefront.utils.money import HUNDRED, ZERO, round_money, to_decimal


def discount_percent(compare_price, selling_price) -> int:
    """Whole-number % off the MRP; 0 when there is no real markdown."""
    if not compare_price or to_decimal(compare_price) <= to_decimal(selling_price):
        return 0
    compare = to_decimal(compare_price)
    percent = (compare - to_decimal(selling_price)) / compare * HUNDRED
    return int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def savings(compare_price, selling_price) -> Decimal:
    if not compare_price or to_decimal(compare_price) <= to_decimal(selling_price):
        return ZERO
    return round_money(to_decimal(compare_price) - to_decimal(selling_price))


def pricing_info(selling_price, compare_price: Optional[Decimal]) -> dict:
    percent = discount_percent(compare_price, selling_price)
    return {
        "selling_price": round_money(selling_price),
        "compare_price": round_money(compare_price) if compare_price else None,
        "discount_percent": percent,
        "savings_amount": savings(compare_price, selling_price),
        "has_discount": percent > 0,
    }

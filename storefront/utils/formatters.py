from decimal import Decimal
from typing import List, Optional

from storefront.constants.gst import GST_RATE_DESCRIPTIONS, SUPPORTED_GST_RATES
from storefront.utils.money import HUNDRED, ZERO, round_money, to_decimal


def format_price(amount) -> str:
    return f"Rs. {round_money(amount):.2f}"


def format_price_with_gst(amount, gst_info: Optional[str] = None) -> str:
    formatted = f"₹{round_money(amount):.2f}"
    if gst_info:
        return f"{formatted} ({gst_info})"
    return formatted


def supported_gst_rates() -> List[int]:
    return list(SUPPORTED_GST_RATES)


def gst_rate_description(rate) -> str:
    return GST_RATE_DESCRIPTIONS.get(rate, f"GST {rate}%")


def blended_gst_percentage(item_tax, subtotal) -> Decimal:
    """
    Average GST rate of an order, for display only.

    With mixed slabs this matches none of the individual line rates, so
    invoices print each line's own rate instead of this figure.
    """
    subtotal = to_decimal(subtotal)
    if subtotal <= 0:
        return ZERO
    return round_money(to_decimal(item_tax) / subtotal * HUNDRED)

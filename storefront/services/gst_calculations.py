"""
GST and order-total calculations for checkout and invoices.

Supports the 0%, 5%, 12% and 18% GST slabs. Amounts are Decimals rounded to
the paisa after every step (see storefront.utils.money.round_money), so the
numbers shown at checkout are the ones printed on the invoice.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from storefront.constants.gst import SHIPPING_GST_RATE, SUPPORTED_GST_RATES
from storefront.utils.money import HUNDRED, ZERO, round_money, to_decimal

logger = logging.getLogger(__name__)


class PricingValidationError(ValueError):
    """Raised when line items can't be priced (bad price, quantity or rate)."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or [message]


class JurisdictionMode(str, Enum):
    SPLIT_LOCAL = "CGST+SGST"
    SINGLE_CROSS = "IGST"


@dataclass(frozen=True)
class LineItem:
    unit_price: Decimal
    quantity: int
    tax_rate_percent: int
    price_includes_tax: bool = True

    # passed through to invoices untouched
    product_id: Optional[int] = None
    name: Optional[str] = None
    hsn_code: Optional[str] = None

    @property
    def line_amount(self) -> Decimal:
        return round_money(to_decimal(self.unit_price) * self.quantity)


@dataclass(frozen=True)
class TaxBreakdown:
    base_amount: Decimal
    tax_amount: Decimal

    @property
    def total(self) -> Decimal:
        return round_money(self.base_amount + self.tax_amount)


@dataclass(frozen=True)
class SplitComponents:
    mode: JurisdictionMode
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return round_money(self.cgst + self.sgst + self.igst)

    def __add__(self, other: "SplitComponents") -> "SplitComponents":
        if other.mode != self.mode:
            raise ValueError("Cannot add tax components of different jurisdictions")
        return SplitComponents(
            mode=self.mode,
            cgst=round_money(self.cgst + other.cgst),
            sgst=round_money(self.sgst + other.sgst),
            igst=round_money(self.igst + other.igst),
        )

    def as_dict(self) -> Dict[str, Decimal]:
        if self.mode is JurisdictionMode.SPLIT_LOCAL:
            return {"cgst": self.cgst, "sgst": self.sgst}
        return {"igst": self.igst}


@dataclass(frozen=True)
class ShippingConfig:
    base_charge: Decimal
    free_above: Optional[Decimal] = None


@dataclass(frozen=True)
class ShippingQuote:
    charge: Decimal
    tax_on_charge: Decimal

    @property
    def total(self) -> Decimal:
        return round_money(self.charge + self.tax_on_charge)


@dataclass(frozen=True)
class LineTaxSummary:
    item: LineItem
    base_amount: Decimal
    tax_amount: Decimal
    split: SplitComponents

    @property
    def line_total(self) -> Decimal:
        return round_money(self.base_amount + self.tax_amount)

    def as_dict(self) -> dict:
        return {
            "product_id": self.item.product_id,
            "name": self.item.name,
            "hsn_code": self.item.hsn_code,
            "unit_price": round_money(self.item.unit_price),
            "quantity": self.item.quantity,
            "gst_percentage": self.item.tax_rate_percent,
            "tax_inclusive": self.item.price_includes_tax,
            "base_amount": self.base_amount,
            "gst_amount": self.tax_amount,
            "line_total": self.line_total,
            **self.split.as_dict(),
        }


@dataclass(frozen=True)
class OrderTaxSummary:
    subtotal: Decimal
    item_tax: Decimal
    shipping_charge: Decimal
    shipping_tax: Decimal
    split: SplitComponents
    discount: Decimal
    grand_total: Decimal
    mode: JurisdictionMode
    lines: Tuple[LineTaxSummary, ...] = field(default_factory=tuple)

    @property
    def total_tax(self) -> Decimal:
        return round_money(self.item_tax + self.shipping_tax)

    @property
    def order_value_before_shipping(self) -> Decimal:
        return round_money(self.subtotal + self.item_tax)

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "item_gst": self.item_tax,
            "shipping_charge": self.shipping_charge,
            "shipping_gst": self.shipping_tax,
            "total_gst": self.total_tax,
            "discount": self.discount,
            "total": self.grand_total,
            "gst_type": self.mode.value,
            "tax_split": self.split.as_dict(),
            "items": [line.as_dict() for line in self.lines],
        }


def resolve_tax(amount, rate_percent, inclusive: bool = True) -> TaxBreakdown:
    """
    Split an amount into its pre-tax base and the GST on it.

    Inclusive:  base = amount * 100 / (100 + rate), tax = amount - base
    Exclusive:  base = amount,                      tax = amount * rate / 100
    """
    amount = to_decimal(amount)
    rate = to_decimal(rate_percent)

    if rate == 0:
        return TaxBreakdown(base_amount=round_money(amount), tax_amount=ZERO)

    if inclusive:
        base_amount = round_money(amount * HUNDRED / (HUNDRED + rate))
        tax_amount = round_money(amount - base_amount)
    else:
        base_amount = round_money(amount)
        tax_amount = round_money(amount * rate / HUNDRED)

    return TaxBreakdown(base_amount=base_amount, tax_amount=tax_amount)


def _normalize_region(region: Optional[str]) -> str:
    return (region or "").strip().casefold()


def classify_jurisdiction(
    delivery_region: str,
    home_region: str,
    linked_regions: Optional[Mapping[str, Iterable[str]]] = None,
) -> JurisdictionMode:
    """
    CGST+SGST when the delivery lands in the seller's own state (or a region
    linked to it, e.g. a union territory), IGST otherwise.
    """
    delivery = _normalize_region(delivery_region)
    home = _normalize_region(home_region)

    # a blank delivery state is never local, even against a blank home state
    if delivery and delivery == home:
        return JurisdictionMode.SPLIT_LOCAL

    for primary, equivalents in (linked_regions or {}).items():
        if _normalize_region(primary) != home:
            continue
        if delivery in {_normalize_region(r) for r in equivalents}:
            return JurisdictionMode.SPLIT_LOCAL

    return JurisdictionMode.SINGLE_CROSS


def split_tax(tax_amount, mode: JurisdictionMode) -> SplitComponents:
    tax = round_money(tax_amount)

    if mode is JurisdictionMode.SPLIT_LOCAL:
        cgst = round_money(tax / 2)
        # sgst takes the odd paisa so both halves always add back up
        sgst = tax - cgst
        return SplitComponents(mode=mode, cgst=cgst, sgst=sgst)

    return SplitComponents(mode=mode, igst=tax)


def quote_shipping(
    order_value,
    base_charge,
    free_above_threshold=None,
    shipping_tax_rate=SHIPPING_GST_RATE,
    mode: JurisdictionMode = JurisdictionMode.SINGLE_CROSS,
) -> ShippingQuote:
    """Shipping is waived at or above the threshold; GST is added on top of the charge."""
    order_value = to_decimal(order_value)

    charge = round_money(base_charge)
    if free_above_threshold is not None and order_value >= to_decimal(free_above_threshold):
        charge = ZERO

    tax_on_charge = resolve_tax(charge, shipping_tax_rate, inclusive=False).tax_amount

    return ShippingQuote(charge=charge, tax_on_charge=tax_on_charge)


def validate_line_items(
    lines: Sequence[LineItem],
    supported_rates: Iterable[int] = SUPPORTED_GST_RATES,
) -> None:
    rates = set(supported_rates)
    errors = []

    for index, line in enumerate(lines, start=1):
        label = line.name or f"Item {index}"

        if to_decimal(line.unit_price) < 0:
            errors.append(f"{label}: price cannot be negative")

        if not isinstance(line.quantity, int) or isinstance(line.quantity, bool) or line.quantity < 1:
            errors.append(f"{label}: quantity must be at least 1")

        if line.tax_rate_percent not in rates:
            errors.append(
                f"{label}: unsupported GST rate {line.tax_rate_percent}% "
                f"(supported: {', '.join(str(r) for r in sorted(rates))})"
            )

    if errors:
        raise PricingValidationError("; ".join(errors), errors)


def compute_order_totals(
    lines: Sequence[LineItem],
    delivery_region: str,
    shipping_config: ShippingConfig,
    home_region: str,
    discount=ZERO,
    *,
    linked_regions: Optional[Mapping[str, Iterable[str]]] = None,
    shipping_tax_rate=SHIPPING_GST_RATE,
    supported_rates: Iterable[int] = SUPPORTED_GST_RATES,
) -> OrderTaxSummary:
    """
    Price a whole order: per-line GST, the CGST/SGST vs IGST split, shipping
    with its own GST, and the coupon discount.

    grand_total = subtotal + item_tax + shipping_charge + shipping_tax - discount
    """
    validate_line_items(lines, supported_rates)

    discount = round_money(discount)
    if discount < 0:
        raise PricingValidationError("Discount cannot be negative")

    mode = classify_jurisdiction(delivery_region, home_region, linked_regions)

    subtotal = ZERO
    item_tax = ZERO
    split = SplitComponents(mode=mode)
    line_summaries = []

    for line in lines:
        # tax is resolved on the whole line amount, never per unit
        breakdown = resolve_tax(line.line_amount, line.tax_rate_percent, line.price_includes_tax)
        line_split = split_tax(breakdown.tax_amount, mode)

        subtotal = round_money(subtotal + breakdown.base_amount)
        item_tax = round_money(item_tax + breakdown.tax_amount)
        split = split + line_split

        line_summaries.append(
            LineTaxSummary(
                item=line,
                base_amount=breakdown.base_amount,
                tax_amount=breakdown.tax_amount,
                split=line_split,
            )
        )

    shipping = quote_shipping(
        round_money(subtotal + item_tax),
        shipping_config.base_charge,
        shipping_config.free_above,
        shipping_tax_rate,
        mode,
    )
    split = split + split_tax(shipping.tax_on_charge, mode)

    grand_total = round_money(
        subtotal + item_tax + shipping.charge + shipping.tax_on_charge - discount
    )

    logger.debug(
        f"Priced {len(lines)} lines ({mode.value}): subtotal={subtotal} "
        f"gst={item_tax} shipping={shipping.charge}+{shipping.tax_on_charge} "
        f"discount={discount} total={grand_total}"
    )

    return OrderTaxSummary(
        subtotal=subtotal,
        item_tax=item_tax,
        shipping_charge=shipping.charge,
        shipping_tax=shipping.tax_on_charge,
        split=split,
        discount=discount,
        grand_total=grand_total,
        mode=mode,
        lines=tuple(line_summaries),
    )

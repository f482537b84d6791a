import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlmodel import Session, select

from storefront.config import settings
from storefront.models.cart import CartItem
from storefront.models.coupon import Coupon
from storefront.models.gst_settings import GSTSettings
from storefront.models.product import Product
from storefront.services.coupon_service import (
    CouponRejected,
    apply_coupon,
    find_coupon,
    normalize_code,
)
from storefront.services.gst_calculations import (
    LineItem,
    OrderTaxSummary,
    PricingValidationError,
    compute_order_totals,
)
from storefront.services.shipping_service import (
    RegionRule,
    load_region_rules,
    resolve_shipping_config,
)
from storefront.utils.cache_helpers import GST_SETTINGS_KEY, SHIPPING_REGIONS_KEY, TTLCache
from storefront.utils.formatters import format_price
from storefront.utils.money import ZERO

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreTaxProfile:
    business_name: str
    business_address: Optional[str]
    state: str
    gst_number: Optional[str]
    gst_enabled: bool
    supported_rates: Tuple[int, ...]


@dataclass(frozen=True)
class CheckoutQuote:
    summary: OrderTaxSummary
    profile: StoreTaxProfile
    coupon: Optional[Coupon] = None
    coupon_code: Optional[str] = None
    coupon_message: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            **self.summary.as_dict(),
            "coupon_code": self.coupon_code,
            "coupon_message": self.coupon_message,
        }


def load_tax_profile(session: Session) -> StoreTaxProfile:
    row = session.get(GSTSettings, 1)

    if not row:
        return StoreTaxProfile(
            business_name=settings.store_name,
            business_address=None,
            state=settings.home_state,
            gst_number=None,
            gst_enabled=True,
            supported_rates=tuple(settings.supported_gst_rates),
        )

    return StoreTaxProfile(
        business_name=row.business_name or settings.store_name,
        business_address=row.business_address,
        state=row.state,
        gst_number=row.gst_number,
        gst_enabled=row.gst_enabled,
        supported_rates=tuple(row.supported_gst_rates or settings.supported_gst_rates),
    )


def get_tax_profile(session: Session, cache: TTLCache) -> StoreTaxProfile:
    return cache.get_or_set(GST_SETTINGS_KEY, lambda: load_tax_profile(session))


def get_region_rules(session: Session, cache: TTLCache) -> List[RegionRule]:
    return cache.get_or_set(SHIPPING_REGIONS_KEY, lambda: load_region_rules(session))


def build_line_items(session: Session, user_id: int, gst_enabled: bool = True) -> List[LineItem]:
    rows = session.exec(
        select(CartItem, Product)
        .join(Product, CartItem.product_id == Product.id)
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.id)
    ).all()

    if not rows:
        raise PricingValidationError("Your cart is empty.")

    lines = []
    for cart_item, product in rows:
        if not product.is_available:
            raise PricingValidationError(f"{product.name} is no longer available")

        lines.append(
            LineItem(
                unit_price=product.price,
                quantity=cart_item.quantity,
                tax_rate_percent=product.gst_percentage if gst_enabled else 0,
                price_includes_tax=product.tax_inclusive,
                product_id=product.id,
                name=product.name,
                hsn_code=product.hsn_code,
            )
        )

    return lines


def quote_checkout(
    session: Session,
    cache: TTLCache,
    user_id: int,
    delivery_state: str,
    coupon_code: Optional[str] = None,
    strict_coupon: bool = False,
) -> CheckoutQuote:
    """
    Price the user's cart for delivery to `delivery_state`.

    A rejected coupon only drops the discount (the reason ends up in
    coupon_message) unless strict_coupon is set, in which case
    CouponRejected propagates.
    """
    profile = get_tax_profile(session, cache)
    shipping_config = resolve_shipping_config(delivery_state, get_region_rules(session, cache))
    lines = build_line_items(session, user_id, profile.gst_enabled)

    def price(discount=ZERO) -> OrderTaxSummary:
        return compute_order_totals(
            lines,
            delivery_state,
            shipping_config,
            profile.state,
            discount,
            linked_regions=settings.linked_regions,
            shipping_tax_rate=settings.shipping_gst_rate if profile.gst_enabled else 0,
            supported_rates=profile.supported_rates if profile.gst_enabled else (0,),
        )

    summary = price()

    if not coupon_code or not normalize_code(coupon_code):
        return CheckoutQuote(summary=summary, profile=profile)

    code = normalize_code(coupon_code)
    coupon = find_coupon(session, code)

    try:
        # coupons are judged on the cart value before shipping
        discount = apply_coupon(code, summary.order_value_before_shipping, coupon)
    except CouponRejected as e:
        logger.info(f"Coupon {code} rejected for user {user_id}: {e.reason}")
        if strict_coupon:
            raise
        return CheckoutQuote(summary=summary, profile=profile, coupon_message=e.message)

    return CheckoutQuote(
        summary=price(discount),
        profile=profile,
        coupon=coupon,
        coupon_code=code,
        coupon_message=f"Coupon applied! You save {format_price(discount)}",
    )

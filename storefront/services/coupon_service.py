import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlmodel import Session, select

from storefront.models.coupon import Coupon
from storefront.utils.formatters import format_price
from storefront.utils.money import HUNDRED, round_money, to_decimal
from storefront.utils.validators import to_naive_utc

logger = logging.getLogger(__name__)


class CouponRejected(Exception):
    """The coupon can't be used; the order goes ahead without a discount."""

    MESSAGES = {
        "not_found": "Invalid coupon",
        "inactive": "This coupon is no longer active",
        "expired": "This coupon has expired",
        "usage_limit_reached": "This coupon has reached its usage limit",
        "below_minimum": "Order value is below the coupon minimum",
    }

    def __init__(self, reason: str, message: Optional[str] = None):
        self.reason = reason
        self.message = message or self.MESSAGES.get(reason, "Coupon rejected")
        super().__init__(self.message)


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def find_coupon(session: Session, code: str) -> Optional[Coupon]:
    return session.exec(
        select(Coupon).where(Coupon.code == normalize_code(code))
    ).first()


def apply_coupon(
    code: str,
    order_subtotal,
    coupon: Optional[Coupon],
    now: Optional[datetime] = None,
) -> Decimal:
    """
    Work out the discount a coupon gives on an order, or raise CouponRejected.
    Fixed discounts never exceed the order value.
    """
    order_subtotal = round_money(order_subtotal)
    now = to_naive_utc(now) or datetime.utcnow()

    if coupon is None or normalize_code(coupon.code) != normalize_code(code):
        raise CouponRejected("not_found")

    if not coupon.is_active:
        raise CouponRejected("inactive")

    expires_at = to_naive_utc(coupon.expires_at)
    if expires_at is not None and expires_at <= now:
        raise CouponRejected("expired")

    if coupon.max_uses is not None and coupon.used_count >= coupon.max_uses:
        raise CouponRejected("usage_limit_reached")

    if coupon.min_order_value and order_subtotal < to_decimal(coupon.min_order_value):
        raise CouponRejected(
            "below_minimum",
            f"Minimum order {format_price(coupon.min_order_value)} required for this coupon",
        )

    value = to_decimal(coupon.discount_value)

    if coupon.discount_type == "percentage":
        return round_money(order_subtotal * value / HUNDRED)

    return round_money(min(value, order_subtotal))


def redeem_coupon(session: Session, coupon: Coupon) -> None:
    coupon.used_count += 1
    session.add(coupon)
    logger.info(f"Coupon {coupon.code} redeemed ({coupon.used_count} uses)")


def release_coupon(session: Session, code: Optional[str]) -> None:
    """Give back the use a cancelled order took."""
    coupon = find_coupon(session, code) if code else None
    if coupon is None or coupon.used_count <= 0:
        return
    coupon.used_count -= 1
    session.add(coupon)
    logger.info(f"Coupon {coupon.code} released ({coupon.used_count} uses)")

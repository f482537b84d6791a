import logging
import random
from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from storefront.constants.order_status import ALLOWED_TRANSITIONS
from storefront.models.address import Address
from storefront.models.cart import CartItem
from storefront.models.order import Order
from storefront.models.order_item import OrderItem
from storefront.models.user import User
from storefront.services.coupon_service import redeem_coupon, release_coupon
from storefront.services.inventory_service import reduce_inventory, restock_order_items
from storefront.services.invoice_service import build_invoice_record
from storefront.services.order_event_service import log_order_event
from storefront.services.pricing_service import CheckoutQuote

logger = logging.getLogger(__name__)


class InvalidStatusTransition(Exception):
    def __init__(self, current: str, new: str):
        self.current = current
        self.new = new
        allowed = ", ".join(ALLOWED_TRANSITIONS.get(current, [])) or "none"
        super().__init__(f"Cannot move order from {current} to {new} (allowed: {allowed})")


def generate_order_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"ORD{now:%Y%m%d}{random.randint(0, 99999):05d}"


def place_order(
    session: Session,
    user: User,
    address: Address,
    quote: CheckoutQuote,
    payment_method: str = "cod",
) -> Order:
    """
    Persist a priced checkout: order, frozen line values, invoice row,
    coupon redemption, stock and the cart, in a single commit.
    """
    summary = quote.summary

    try:
        reduce_inventory(
            session,
            [(line.item.product_id, line.item.quantity) for line in summary.lines],
        )

        now = datetime.utcnow()
        order = Order(
            order_number=generate_order_number(now),
            user_id=user.id,
            delivery_address=address.as_snapshot(),
            delivery_state=address.state,
            subtotal=summary.subtotal,
            item_gst=summary.item_tax,
            shipping_charge=summary.shipping_charge,
            shipping_gst=summary.shipping_tax,
            cgst_amount=summary.split.cgst,
            sgst_amount=summary.split.sgst,
            igst_amount=summary.split.igst,
            total_gst=summary.total_tax,
            discount=summary.discount,
            total=summary.grand_total,
            gst_type=summary.mode.value,
            coupon_code=quote.coupon_code,
            payment_method=payment_method,
            status="pending",
            created_at=now,
            updated_at=now,
        )
        session.add(order)
        session.flush()

        for line in summary.lines:
            session.add(
                OrderItem(
                    order_id=order.id,
                    product_id=line.item.product_id,
                    product_name=line.item.name,
                    hsn_code=line.item.hsn_code,
                    unit_price=line.item.unit_price,
                    quantity=line.item.quantity,
                    gst_percentage=line.item.tax_rate_percent,
                    tax_inclusive=line.item.price_includes_tax,
                    base_amount=line.base_amount,
                    gst_amount=line.tax_amount,
                    cgst_amount=line.split.cgst,
                    sgst_amount=line.split.sgst,
                    igst_amount=line.split.igst,
                    line_total=line.line_total,
                )
            )

        session.add(build_invoice_record(order, quote.profile))

        if quote.coupon is not None:
            redeem_coupon(session, quote.coupon)

        for cart_item in session.exec(
            select(CartItem).where(CartItem.user_id == user.id)
        ).all():
            session.delete(cart_item)

        log_order_event(
            session,
            order.id,
            "order_placed",
            "Order placed",
            created_by=f"user:{user.id}",
            meta={"total": str(summary.grand_total), "payment_method": payment_method},
        )

        session.commit()
    except Exception:
        logger.exception(f"Placing order failed for user {user.id}")
        session.rollback()
        raise

    session.refresh(order)
    logger.info(f"Order {order.order_number} placed for user {user.id}: total {order.total}")
    return order


def change_status(session: Session, order: Order, new_status: str, actor: str = "system") -> Order:
    if new_status not in ALLOWED_TRANSITIONS.get(order.status, []):
        raise InvalidStatusTransition(order.status, new_status)

    previous = order.status
    now = datetime.utcnow()

    order.status = new_status
    order.updated_at = now

    if new_status == "paid":
        order.payment_status = "paid"
    elif new_status == "shipped":
        order.shipped_at = now
    elif new_status == "delivered":
        order.delivered_at = now
        if order.payment_method == "cod":
            order.payment_status = "paid"
    elif new_status == "cancelled":
        restock_order_items(session, order.id)
        release_coupon(session, order.coupon_code)

    session.add(order)
    log_order_event(
        session,
        order.id,
        f"status_{new_status}",
        f"Order {new_status}",
        created_by=actor,
        meta={"from": previous, "to": new_status},
    )
    session.commit()
    session.refresh(order)

    logger.info(f"Order {order.order_number}: {previous} -> {new_status} by {actor}")
    return order

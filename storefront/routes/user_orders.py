from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session, select
from storefront.constants.order_status import CANCELLABLE_STATUSES
from storefront.database import get_session
from storefront.models.invoice import Invoice
from storefront.models.order import Order
from storefront.models.order_item import OrderItem
from storefront.models.user import User
from storefront.services.gst_calculations import JurisdictionMode
from storefront.services.invoice_service import build_invoice_data, get_invoice_pdf
from storefront.services.order_event_service import get_order_timeline
from storefront.services.order_service import InvalidStatusTransition, change_status
from storefront.utils.formatters import blended_gst_percentage
from storefront.utils.token import get_current_user

router = APIRouter()


def _get_user_order(session: Session, order_id: int, user: User) -> Order:
    order = session.get(Order, order_id)
    if not order or order.user_id != user.id:
        raise HTTPException(404, "Order not found")
    return order


def _order_items(session: Session, order_id: int):
    return session.exec(
        select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)
    ).all()


def tax_split(order: Order) -> dict:
    if order.gst_type == JurisdictionMode.SPLIT_LOCAL.value:
        return {"cgst": order.cgst_amount, "sgst": order.sgst_amount}
    return {"igst": order.igst_amount}


@router.get("")
def my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    orders = session.exec(
        select(Order)
        .where(Order.user_id == current_user.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    ).all()

    return [
        {
            "order_id": o.id,
            "order_number": o.order_number,
            "status": o.status,
            "payment_status": o.payment_status,
            "total": o.total,
            "created_at": o.created_at,
        }
        for o in orders
    ]


@router.get("/{order_id}")
def order_detail(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = _get_user_order(session, order_id, current_user)
    items = _order_items(session, order.id)

    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "delivery_address": order.delivery_address,
        "created_at": order.created_at,
        "items": items,
        "summary": {
            "subtotal": order.subtotal,
            "item_gst": order.item_gst,
            "shipping_charge": order.shipping_charge,
            "shipping_gst": order.shipping_gst,
            "total_gst": order.total_gst,
            "discount": order.discount,
            "total": order.total,
            "gst_type": order.gst_type,
            "tax_split": tax_split(order),
            "average_gst_percentage": blended_gst_percentage(order.item_gst, order.subtotal),
            "coupon_code": order.coupon_code,
        },
    }


@router.get("/{order_id}/track")
def track_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = _get_user_order(session, order_id, current_user)

    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "placed_at": order.created_at,
        "shipped_at": order.shipped_at,
        "delivered_at": order.delivered_at,
        "timeline": [
            {"event": e.event_type, "label": e.label, "at": e.created_at}
            for e in get_order_timeline(session, order.id)
        ],
    }


@router.post("/{order_id}/cancel")
def cancel_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = _get_user_order(session, order_id, current_user)

    if order.status not in CANCELLABLE_STATUSES:
        raise HTTPException(400, f"Order cannot be cancelled once {order.status}")

    try:
        order = change_status(session, order, "cancelled", actor=f"user:{current_user.id}")
    except InvalidStatusTransition as e:
        raise HTTPException(400, str(e))

    return {"message": "Order cancelled", "order_id": order.id, "status": order.status}


@router.get("/{order_id}/invoice")
def get_invoice(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = _get_user_order(session, order_id, current_user)
    invoice = session.exec(select(Invoice).where(Invoice.order_id == order.id)).first()
    if not invoice:
        raise HTTPException(404, "Invoice not found for this order")

    return build_invoice_data(invoice, order, _order_items(session, order.id))


@router.get("/{order_id}/invoice/download")
def download_invoice(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = _get_user_order(session, order_id, current_user)
    invoice = session.exec(select(Invoice).where(Invoice.order_id == order.id)).first()
    if not invoice:
        raise HTTPException(404, "Invoice not found for this order")

    pdf = get_invoice_pdf(invoice, order, _order_items(session, order.id))

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="Invoice-{invoice.invoice_number}.pdf"'},
    )

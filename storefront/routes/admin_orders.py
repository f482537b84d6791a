from datetime import date, datetime, time
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, or_, select
from storefront.database import get_session
from storefront.dependencies.admin import require_admin
from storefront.models.order import Order
from storefront.models.user import User
from storefront.schemas.order_schemas import OrderStatus, OrderStatusUpdate
from storefront.services.order_service import InvalidStatusTransition, change_status
from storefront.utils.pagination import paginate

router = APIRouter()


def serialize_order_row(row) -> dict:
    order, user = row
    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "customer": f"{user.first_name} {user.last_name}".strip(),
        "email": user.email,
        "status": order.status,
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "gst_type": order.gst_type,
        "total": order.total,
        "created_at": order.created_at,
    }


@router.get("")
def list_orders(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[OrderStatus] = None,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    session: Session = Depends(get_session),
    admin = Depends(require_admin)
):
    query = select(Order, User).join(User, User.id == Order.user_id)

    if search:
        term = f"%{search.strip()}%"
        query = query.where(
            or_(
                Order.order_number.ilike(term),
                User.email.ilike(term),
                User.first_name.ilike(term),
            )
        )

    if status:
        query = query.where(Order.status == status.value)

    if start_date:
        query = query.where(Order.created_at >= datetime.combine(start_date, time.min))

    if end_date:
        query = query.where(Order.created_at <= datetime.combine(end_date, time.max))

    query = query.order_by(Order.created_at.desc(), Order.id.desc())

    return paginate(
        session=session,
        query=query,
        page=page,
        limit=limit,
        serializer=serialize_order_row,
    )


@router.put("/{order_id}/status")
def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    order = session.get(Order, order_id)
    if not order:
        raise HTTPException(404, "Order not found")

    try:
        order = change_status(session, order, data.status.value, actor=f"admin:{admin.id}")
    except InvalidStatusTransition as e:
        raise HTTPException(400, str(e))

    return {"message": f"Order marked {order.status}", "order_id": order.id, "status": order.status}

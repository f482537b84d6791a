from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from storefront.database import get_session
from storefront.dependencies.admin import require_admin
from storefront.models.coupon import Coupon
from storefront.schemas.coupon_schemas import CouponCreate, CouponUpdate
from storefront.services.coupon_service import find_coupon, normalize_code

router = APIRouter()


@router.get("")
def list_coupons(
    session: Session = Depends(get_session),
    admin = Depends(require_admin)
):
    return session.exec(select(Coupon).order_by(Coupon.created_at.desc())).all()


@router.post("")
def create_coupon(
    data: CouponCreate,
    session: Session = Depends(get_session),
    admin = Depends(require_admin)
):
    code = normalize_code(data.code)
    if find_coupon(session, code):
        raise HTTPException(400, "Coupon code already exists")

    coupon = Coupon(**data.model_dump(exclude={"code"}), code=code)
    session.add(coupon)
    session.commit()
    session.refresh(coupon)

    return {"message": "Coupon created", "coupon": coupon}


@router.put("/{coupon_id}")
def update_coupon(
    coupon_id: int,
    data: CouponUpdate,
    session: Session = Depends(get_session),
    admin = Depends(require_admin)
):
    coupon = session.get(Coupon, coupon_id)
    if not coupon:
        raise HTTPException(404, "Coupon not found")

    updates = data.model_dump(exclude_unset=True)
    discount_type = updates.get("discount_type", coupon.discount_type)
    discount_value = updates.get("discount_value", coupon.discount_value)
    if discount_type == "percentage" and discount_value > 100:
        raise HTTPException(400, "Percentage discount cannot exceed 100")

    for field, value in updates.items():
        setattr(coupon, field, value)

    session.add(coupon)
    session.commit()
    session.refresh(coupon)

    return {"message": "Coupon updated", "coupon": coupon}

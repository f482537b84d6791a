from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from storefront.database import get_session
from storefront.models.address import Address
from storefront.models.user import User
from storefront.schemas.address_schemas import AddressCreate
from storefront.schemas.checkout_schemas import (
    ApplyCouponRequest,
    CheckoutSummaryRequest,
    PlaceOrderRequest,
)
from storefront.services.coupon_service import CouponRejected
from storefront.services.gst_calculations import PricingValidationError
from storefront.services.inventory_service import InsufficientStock
from storefront.services.order_service import place_order
from storefront.services.pricing_service import quote_checkout
from storefront.services.shipping_service import ShippingNotConfigured
from storefront.utils.cache_helpers import TTLCache, get_config_cache
from storefront.utils.token import get_current_user

router = APIRouter()


def _get_user_address(session: Session, address_id: int, user: User) -> Address:
    address = session.get(Address, address_id)
    if not address or address.user_id != user.id:
        raise HTTPException(404, "Address not found")
    return address


def _quote(session, cache, user, address, coupon_code=None, strict_coupon=False):
    try:
        return quote_checkout(
            session,
            cache,
            user.id,
            address.state,
            coupon_code=coupon_code,
            strict_coupon=strict_coupon,
        )
    except PricingValidationError as e:
        raise HTTPException(400, str(e))
    except ShippingNotConfigured as e:
        raise HTTPException(400, str(e))


@router.post("/address")
def save_address(
    data: AddressCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    if data.is_default:
        for existing in session.exec(
            select(Address).where(Address.user_id == current_user.id, Address.is_default == True)  # noqa: E712
        ).all():
            existing.is_default = False
            session.add(existing)

    address = Address(
        user_id=current_user.id,
        full_name=data.full_name,
        phone=data.normalized_phone(),
        address_line1=data.address_line1,
        address_line2=data.address_line2,
        city=data.city,
        state=data.state,
        pincode=data.pincode,
        is_default=data.is_default,
    )

    session.add(address)
    session.commit()
    session.refresh(address)

    return {"message": "Address saved", "address_id": address.id}


@router.get("/addresses")
def list_addresses(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return session.exec(
        select(Address)
        .where(Address.user_id == current_user.id)
        .order_by(Address.is_default.desc(), Address.id)
    ).all()


@router.post("/summary")
def checkout_summary(
    data: CheckoutSummaryRequest,
    session: Session = Depends(get_session),
    cache: TTLCache = Depends(get_config_cache),
    current_user: User = Depends(get_current_user)
):
    address = _get_user_address(session, data.address_id, current_user)
    quote = _quote(session, cache, current_user, address, data.coupon_code)

    return {
        "address": address,
        "summary": quote.as_dict(),
    }


@router.post("/apply-coupon")
def apply_coupon_endpoint(
    data: ApplyCouponRequest,
    session: Session = Depends(get_session),
    cache: TTLCache = Depends(get_config_cache),
    current_user: User = Depends(get_current_user)
):
    address = _get_user_address(session, data.address_id, current_user)

    try:
        quote = _quote(session, cache, current_user, address, data.code, strict_coupon=True)
    except CouponRejected as e:
        raise HTTPException(400, e.message)

    return {
        "message": quote.coupon_message,
        "discount": quote.summary.discount,
        "summary": quote.as_dict(),
    }


@router.post("/place-order")
def place_order_endpoint(
    data: PlaceOrderRequest,
    session: Session = Depends(get_session),
    cache: TTLCache = Depends(get_config_cache),
    current_user: User = Depends(get_current_user)
):
    address = _get_user_address(session, data.address_id, current_user)
    quote = _quote(session, cache, current_user, address, data.coupon_code)

    try:
        order = place_order(session, current_user, address, quote, data.payment_method)
    except InsufficientStock as e:
        raise HTTPException(400, str(e))

    return {
        "message": "Order placed successfully!",
        "order_id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "total": order.total,
        "coupon_message": quote.coupon_message,
        "track_order_url": f"/orders/{order.id}/track",
        "invoice_url": f"/orders/{order.id}/invoice/download",
    }

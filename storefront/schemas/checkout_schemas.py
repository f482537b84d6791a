from pydantic import BaseModel
from typing import Literal, Optional


class CheckoutSummaryRequest(BaseModel):
    address_id: int
    coupon_code: Optional[str] = None

class ApplyCouponRequest(BaseModel):
    address_id: int
    code: str

class PlaceOrderRequest(BaseModel):
    address_id: int
    payment_method: Literal["cod", "upi", "card", "netbanking"] = "cod"
    coupon_code: Optional[str] = None

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from storefront.utils.validators import to_naive_utc


class _CouponExpiry(BaseModel):

    @field_validator("expires_at", check_fields=False)
    @classmethod
    def expiry_in_utc(cls, value):
        return to_naive_utc(value)


class CouponCreate(_CouponExpiry):
    code: str = Field(min_length=3, max_length=32)
    discount_type: Literal["percentage", "fixed"] = "percentage"
    discount_value: Decimal = Field(gt=0)
    min_order_value: Optional[Decimal] = Field(default=None, ge=0)
    max_uses: Optional[int] = Field(default=None, ge=1)
    expires_at: Optional[datetime] = None
    is_active: bool = True

    @model_validator(mode="after")
    def check_percentage(self):
        if self.discount_type == "percentage" and self.discount_value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self

class CouponUpdate(_CouponExpiry):
    # null clears min_order_value, max_uses and expires_at
    discount_type: Optional[Literal["percentage", "fixed"]] = None
    discount_value: Optional[Decimal] = Field(default=None, gt=0)
    min_order_value: Optional[Decimal] = Field(default=None, ge=0)
    max_uses: Optional[int] = Field(default=None, ge=1)
    expires_at: Optional[datetime] = None
    is_active: Optional[bool] = None

    @field_validator("discount_type", "discount_value", "is_active")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("This field cannot be null")
        return value

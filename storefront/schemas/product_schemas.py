from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from storefront.constants.gst import SUPPORTED_GST_RATES
from storefront.utils.validators import validate_hsn_code


class _ProductTaxFields(BaseModel):

    @field_validator("gst_percentage", check_fields=False)
    @classmethod
    def check_rate(cls, value):
        if value is not None and value not in SUPPORTED_GST_RATES:
            raise ValueError(f"GST rate must be one of {list(SUPPORTED_GST_RATES)}")
        return value

    @field_validator("hsn_code", check_fields=False)
    @classmethod
    def check_hsn(cls, value):
        if value and not validate_hsn_code(value):
            raise ValueError("HSN code must be 6 to 8 digits")
        return value


class ProductCreate(_ProductTaxFields):
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    unit: Optional[str] = None
    weight: Optional[str] = None
    price: Decimal = Field(ge=0)
    compare_price: Optional[Decimal] = Field(default=None, ge=0)
    stock: int = Field(default=0, ge=0)
    is_available: bool = True
    is_featured: bool = False
    gst_percentage: int = 0
    tax_inclusive: bool = True
    hsn_code: Optional[str] = None
    category_id: Optional[int] = None


class ProductUpdate(_ProductTaxFields):
    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    unit: Optional[str] = None
    weight: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    compare_price: Optional[Decimal] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    is_available: Optional[bool] = None
    is_featured: Optional[bool] = None
    gst_percentage: Optional[int] = None
    tax_inclusive: Optional[bool] = None
    hsn_code: Optional[str] = None
    category_id: Optional[int] = None


class CategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None

from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class ShippingRegionCreate(BaseModel):
    region_name: str
    region_key: Literal["local", "rest_of_india"]
    states: List[str] = []
    base_charge: Decimal = Field(ge=0)
    free_delivery_above: Optional[Decimal] = Field(default=None, ge=0)
    is_enabled: bool = True
    sort_order: int = 0

class ShippingRegionUpdate(BaseModel):
    # null clears free_delivery_above; the rest are required columns
    region_name: Optional[str] = None
    states: Optional[List[str]] = None
    base_charge: Optional[Decimal] = Field(default=None, ge=0)
    free_delivery_above: Optional[Decimal] = Field(default=None, ge=0)
    is_enabled: Optional[bool] = None
    sort_order: Optional[int] = None

    @field_validator("region_name", "states", "base_charge", "is_enabled", "sort_order")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("This field cannot be null")
        return value

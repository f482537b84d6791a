from pydantic import BaseModel, field_validator
from typing import Optional

from storefront.utils.validators import normalize_phone_number, validate_pincode


class AddressCreate(BaseModel):
    full_name: str
    phone: str
    country_code: str = "+91"
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    pincode: str
    is_default: bool = False

    @field_validator("full_name", "address_line1", "city", "state")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("This field is required")
        return value

    @field_validator("pincode")
    @classmethod
    def check_pincode(cls, value: str) -> str:
        if not validate_pincode(value):
            raise ValueError("Pincode must be 6 digits")
        return value.strip()

    def normalized_phone(self) -> str:
        return normalize_phone_number(self.phone, self.country_code)

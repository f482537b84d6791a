from typing import List, Optional

from pydantic import BaseModel, field_validator, model_validator

from storefront.constants.gst import SUPPORTED_GST_RATES
from storefront.utils.validators import validate_gst_number


class GSTSettingsUpdate(BaseModel):
    business_name: Optional[str] = None
    business_address: Optional[str] = None
    state: str
    gst_number: Optional[str] = None
    gst_enabled: bool = True
    supported_gst_rates: List[int] = list(SUPPORTED_GST_RATES)

    @field_validator("state")
    @classmethod
    def state_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("State is required")
        return value.strip()

    @field_validator("supported_gst_rates")
    @classmethod
    def known_rates(cls, value: List[int]) -> List[int]:
        unknown = [r for r in value if r not in SUPPORTED_GST_RATES]
        if unknown:
            raise ValueError(f"Unsupported GST rates: {unknown}")
        return sorted(set(value))

    @model_validator(mode="after")
    def check_gst_number(self):
        if self.gst_number:
            self.gst_number = self.gst_number.strip().upper()
            if self.gst_enabled and not validate_gst_number(self.gst_number):
                raise ValueError("Invalid GST number format (should be 15 characters)")
        return self

from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class Coupon(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(index=True, unique=True)  # stored upper-case

    discount_type: str = Field(default="percentage")  # percentage | fixed
    discount_value: Decimal = Field(max_digits=10, decimal_places=2)
    min_order_value: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)

    max_uses: Optional[int] = None
    used_count: int = 0
    expires_at: Optional[datetime] = None
    is_active: bool = True

    created_at: datetime = Field(default_factory=datetime.utcnow)

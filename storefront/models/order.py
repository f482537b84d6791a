from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal

if TYPE_CHECKING:
    from storefront.models.order_item import OrderItem


class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: str = Field(index=True, unique=True)
    user_id: int = Field(foreign_key="user.id", index=True)

    # frozen copy of the address at the time of ordering
    delivery_address: dict = Field(default_factory=dict, sa_column=Column(JSON))
    delivery_state: str

    subtotal: Decimal = Field(max_digits=12, decimal_places=2)
    item_gst: Decimal = Field(max_digits=12, decimal_places=2)
    shipping_charge: Decimal = Field(max_digits=12, decimal_places=2)
    shipping_gst: Decimal = Field(max_digits=12, decimal_places=2)
    cgst_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    sgst_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    igst_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    total_gst: Decimal = Field(max_digits=12, decimal_places=2)
    discount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    total: Decimal = Field(max_digits=12, decimal_places=2)
    gst_type: str

    coupon_code: Optional[str] = None
    payment_method: str = Field(default="cod")
    payment_status: str = Field(default="pending")
    status: str = Field(default="pending")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    items: List["OrderItem"] = Relationship(back_populates="order")

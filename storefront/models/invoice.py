from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class Invoice(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True, unique=True)
    invoice_number: str = Field(index=True, unique=True)
    invoice_date: datetime = Field(default_factory=datetime.utcnow)

    business_name: str
    business_address: Optional[str] = None
    gst_number: Optional[str] = None
    customer_name: str
    customer_address: str

    subtotal: Decimal = Field(max_digits=12, decimal_places=2)
    cgst_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    sgst_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    igst_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    total_tax: Decimal = Field(max_digits=12, decimal_places=2)
    gst_type: str
    shipping_charge: Decimal = Field(max_digits=12, decimal_places=2)
    discount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    total_amount: Decimal = Field(max_digits=12, decimal_places=2)

from sqlmodel import SQLModel, Field , Relationship
from typing import Optional , TYPE_CHECKING
from decimal import Decimal

if TYPE_CHECKING:
    from storefront.models.order import Order

class OrderItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True)
    product_id: int = Field(foreign_key="product.id")

    product_name: str
    hsn_code: Optional[str] = None
    unit_price: Decimal = Field(max_digits=10, decimal_places=2)
    quantity: int
    gst_percentage: int
    tax_inclusive: bool = True

    base_amount: Decimal = Field(max_digits=12, decimal_places=2)
    gst_amount: Decimal = Field(max_digits=12, decimal_places=2)
    cgst_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    sgst_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    igst_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    line_total: Decimal = Field(max_digits=12, decimal_places=2)

    order: Optional["Order"] = Relationship(back_populates="items")

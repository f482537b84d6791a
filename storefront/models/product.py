from sqlmodel import SQLModel, Field ,Relationship
from typing import Optional, TYPE_CHECKING , List
from datetime import datetime
from decimal import Decimal

if TYPE_CHECKING:
    from .category import Category
    from .review import Review

class Product(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    slug: str = Field(index=True, unique=True)
    description: Optional[str] = None
    image_url: Optional[str] = None
    unit: Optional[str] = None
    weight: Optional[str] = None

    # selling price; compare_price is the MRP shown struck through
    price: Decimal = Field(max_digits=10, decimal_places=2)
    compare_price: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    stock: int = 0
    is_available: bool = True
    is_featured: bool = False

    # tax metadata
    gst_percentage: int = 0
    tax_inclusive: bool = True
    hsn_code: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    category_id: Optional[int] = Field(default=None, foreign_key="category.id")
    category: Optional["Category"] = Relationship(back_populates="products")

    reviews: List["Review"] = Relationship(back_populates="product")

    @property
    def in_stock(self) -> bool:
        return self.is_available and self.stock > 0

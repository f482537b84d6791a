from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class ShippingRegion(SQLModel, table=True):
    __tablename__ = "shipping_region"
    id: Optional[int] = Field(default=None, primary_key=True)
    region_name: str
    region_key: str = Field(index=True)  # local | rest_of_india
    states: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    base_charge: Decimal = Field(max_digits=10, decimal_places=2)
    free_delivery_above: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)

    is_enabled: bool = True
    sort_order: int = 0
    updated_at: datetime = Field(default_factory=datetime.utcnow)

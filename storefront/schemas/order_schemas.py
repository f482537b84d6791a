from enum import Enum

from pydantic import BaseModel


class OrderStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"
    failed = "failed"

class OrderStatusUpdate(BaseModel):
    status: OrderStatus

from typing import Iterable, Tuple
from sqlmodel import Session, select
from storefront.models.order_item import OrderItem
from storefront.models.product import Product
import logging

logger = logging.getLogger(__name__)


class InsufficientStock(Exception):
    def __init__(self, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}. Available: {available}, Requested: {requested}"
        )


def reduce_inventory(session: Session, quantities: Iterable[Tuple[int, int]]):
    """Take ordered quantities out of stock; the caller commits."""
    for product_id, quantity in quantities:
        product = session.get(Product, product_id)
        if not product:
            raise LookupError(f"Product with ID {product_id} not found")

        if product.stock < quantity:
            raise InsufficientStock(product.name, product.stock, quantity)

        product.stock -= quantity
        session.add(product)
        logger.info(f"Stock for {product.name}: {product.stock + quantity} -> {product.stock}")


def restock_order_items(session: Session, order_id: int) -> int:
    """Put items back into stock when an order is cancelled"""
    order_items = session.exec(
        select(OrderItem).where(OrderItem.order_id == order_id)
    ).all()

    for item in order_items:
        product = session.get(Product, item.product_id)
        if product:
            product.stock += item.quantity
            session.add(product)

    logger.info(f"Restocked {len(order_items)} items for order {order_id}")
    return len(order_items)

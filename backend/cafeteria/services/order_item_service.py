"""Позиции заказа напрямую. В отличие от create_order, остатки здесь не списываются."""
from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.core.errors import NotFound
from cafeteria.core.logging_config import get_logger
from cafeteria.models import Order, OrderItem, Product
from cafeteria.schemas.common import Page
from cafeteria.schemas.order_item import OrderItemCreate, OrderItemResponse
from cafeteria.services.pagination import paginate

logger = get_logger(__name__)


async def create_order_item(db: AsyncSession, data: OrderItemCreate) -> int:
    order = (await db.execute(select(Order.id).where(Order.id == data.order_id))).scalar_one_or_none()
    if order is None:
        raise NotFound("Order not found")
    product = (await db.execute(select(Product).where(Product.id == data.product_id))).scalar_one_or_none()
    if product is None:
        raise NotFound("Product not found")
    item = OrderItem(
        order_id=data.order_id,
        product_id=data.product_id,
        quantity=data.quantity,
        price_at_order_time=product.price,
    )
    db.add(item)
    await db.flush()
    logger.info("Добавлена позиция id=%s в заказ %s", item.id, data.order_id)
    return item.id


async def get_all_order_items(
    db: AsyncSession,
    order_id: Optional[int] = None,
    page: int = 1,
    limit: int = 10,
) -> Page[OrderItemResponse]:
    q = select(OrderItem).order_by(OrderItem.id)
    if order_id:
        q = q.where(OrderItem.order_id == order_id)
    total, rows = await paginate(db, q, page, limit)
    return Page[OrderItemResponse](
        page=page, limit=limit, total=total, data=[OrderItemResponse.from_row(i) for (i,) in rows]
    )


async def get_order_item_by_id(db: AsyncSession, item_id: int) -> OrderItem:
    r = await db.execute(select(OrderItem).where(OrderItem.id == item_id))
    item = r.scalar_one_or_none()
    if not item:
        raise NotFound("Order item not found")
    return item


async def delete_order_item(db: AsyncSession, item_id: int) -> None:
    result = await db.execute(delete(OrderItem).where(OrderItem.id == item_id))
    if not result.rowcount:
        raise NotFound("Order item not found")
    logger.info("Позиция заказа id=%s удалена", item_id)

"""
Заказы. Создание заказа: одна транзакция: заказ, позиции и списание остатков
либо проходят целиком, либо откатываются целиком.
"""
from typing import List

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.core.errors import InsufficientStock, NotFound
from cafeteria.core.logging_config import get_logger
from cafeteria.models import Order, OrderItem, OrderStatus, Product
from cafeteria.schemas.order import OrderCreate, OrderItemDetail, OrderPage, OrderResponse
from cafeteria.services.pagination import paginate

logger = get_logger(__name__)


async def create_order(db: AsyncSession, data: OrderCreate) -> int:
    """
    Позиции обрабатываются строго по порядку: проверка остатка следующей позиции
    видит списание предыдущих (тот же товар дважды в одном заказе).
    Любая ошибка откатывает всё, включая строку заказа, и пробрасывается дальше.
    """
    try:
        order = Order(
            table_id=data.table_id,
            employee_id=data.employee_id,
            status=OrderStatus.PENDING,
        )
        db.add(order)
        await db.flush()

        for item in data.items:
            r = await db.execute(
                select(Product)
                .where(Product.id == item.product_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            product = r.scalar_one_or_none()
            if not product:
                raise NotFound(f"Product not found: ID {item.product_id}")
            if product.stock_quantity < item.quantity:
                raise InsufficientStock(f"Not enough stock for product ID {item.product_id}")

            db.add(
                OrderItem(
                    order_id=order.id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price_at_order_time=product.price,
                )
            )
            await db.execute(
                update(Product)
                .where(Product.id == item.product_id)
                .values(stock_quantity=Product.stock_quantity - item.quantity)
            )

        await db.commit()
    except Exception as exc:
        await db.rollback()
        logger.warning("Заказ не создан, транзакция откатана: %s", exc)
        raise

    logger.info("Создан заказ id=%s стол=%s позиций=%s", order.id, order.table_id, len(data.items))
    return order.id


async def _items_for(db: AsyncSession, order_id: int) -> List[OrderItemDetail]:
    rows = (
        await db.execute(
            select(OrderItem, Product)
            .join(Product, OrderItem.product_id == Product.id)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.id)
        )
    ).all()
    return [OrderItemDetail.from_row(item, product) for item, product in rows]


async def get_all_orders(db: AsyncSession, search: str = "", page: int = 1, limit: int = 10) -> OrderPage:
    q = select(Order).order_by(Order.id)
    if search:
        # Поиск по подстроке статуса
        matching = [s for s in OrderStatus if search.lower() in s.value]
        q = q.where(Order.status.in_(matching))
    total, rows = await paginate(db, q, page, limit)
    data = []
    for (order,) in rows:
        data.append(OrderResponse.from_row(order, await _items_for(db, order.id)))
    return OrderPage(page=page, limit=limit, total=total, data=data)


async def get_order_by_id(db: AsyncSession, order_id: int) -> OrderResponse:
    r = await db.execute(select(Order).where(Order.id == order_id))
    order = r.scalar_one_or_none()
    if not order:
        raise NotFound("Order not found")
    return OrderResponse.from_row(order, await _items_for(db, order.id))


async def update_order(db: AsyncSession, order_id: int, status: OrderStatus) -> None:
    """Смена статуса. Отмена заказа остатки не возвращает."""
    result = await db.execute(update(Order).where(Order.id == order_id).values(status=status))
    if not result.rowcount:
        raise NotFound("Order not found")
    logger.info("Заказ id=%s: статус %s", order_id, status.value)


async def delete_order(db: AsyncSession, order_id: int) -> None:
    # Позиции удаляем явно, не полагаясь на ON DELETE CASCADE
    await db.execute(delete(OrderItem).where(OrderItem.order_id == order_id))
    result = await db.execute(delete(Order).where(Order.id == order_id))
    if not result.rowcount:
        raise NotFound("Order not found")
    logger.info("Заказ id=%s удалён", order_id)

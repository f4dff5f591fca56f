"""Заказы и остатки: атомарность создания, списание, цена на момент заказа, нижняя граница остатка."""
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from cafeteria.core.errors import InsufficientStock, NotFound
from cafeteria.models import Order, OrderItem, OrderStatus, Product
from cafeteria.schemas.order import OrderCreate
from cafeteria.schemas.product import ProductUpdate
from cafeteria.services import order_service, product_service

pytestmark = pytest.mark.anyio


def _order(seed, *items):
    return OrderCreate(
        table_id=seed["tables"][0],
        employee_id=seed["employee_attendant"],
        items=[{"product_id": p, "quantity": q} for p, q in items],
    )


async def _stock(db, product_id):
    return (await db.execute(select(Product.stock_quantity).where(Product.id == product_id))).scalar_one()


async def _orders_count(db):
    return (await db.execute(select(func.count(Order.id)))).scalar_one()


async def test_create_order_decrements_stock_and_snapshots_price(db, seed):
    order_id = await order_service.create_order(db, _order(seed, (seed["coffee"], 3)))

    assert await _stock(db, seed["coffee"]) == 7
    order = await order_service.get_order_by_id(db, order_id)
    assert order.status == OrderStatus.PENDING.value
    assert len(order.items) == 1
    assert order.items[0].price_at_order_time == 5.5

    # Смена цены в каталоге не меняет уже оформленную позицию
    await product_service.update_product(db, seed["coffee"], ProductUpdate(price=Decimal("7.00")))
    await db.commit()
    order = await order_service.get_order_by_id(db, order_id)
    assert order.items[0].price_at_order_time == 5.5
    assert order.items[0].product.price == 7.0


async def test_insufficient_stock_rolls_back_whole_order(db, seed):
    with pytest.raises(InsufficientStock, match=f"product ID {seed['cake']}"):
        await order_service.create_order(db, _order(seed, (seed["coffee"], 1), (seed["cake"], 5)))

    assert await _orders_count(db) == 0
    assert (await db.execute(select(func.count(OrderItem.id)))).scalar_one() == 0
    assert await _stock(db, seed["coffee"]) == 10
    assert await _stock(db, seed["cake"]) == 2


async def test_unknown_product_rolls_back_whole_order(db, seed):
    with pytest.raises(NotFound, match="Product not found: ID 999"):
        await order_service.create_order(db, _order(seed, (seed["coffee"], 2), (999, 1)))
    assert await _orders_count(db) == 0
    assert await _stock(db, seed["coffee"]) == 10


async def test_repeated_product_sees_earlier_decrement(db, seed):
    with pytest.raises(InsufficientStock):
        await order_service.create_order(db, _order(seed, (seed["cake"], 1), (seed["cake"], 2)))
    assert await _stock(db, seed["cake"]) == 2

    await order_service.create_order(db, _order(seed, (seed["cake"], 1), (seed["cake"], 1)))
    assert await _stock(db, seed["cake"]) == 0


async def test_cancel_does_not_restock(db, seed):
    order_id = await order_service.create_order(db, _order(seed, (seed["cake"], 2)))
    await order_service.update_order(db, order_id, OrderStatus.CANCELED)
    await db.commit()
    assert (await order_service.get_order_by_id(db, order_id)).status == "canceled"
    assert await _stock(db, seed["cake"]) == 0


async def test_list_orders_searches_status(db, seed):
    first = await order_service.create_order(db, _order(seed, (seed["coffee"], 1)))
    second = await order_service.create_order(db, _order(seed, (seed["coffee"], 1)))
    await order_service.update_order(db, second, OrderStatus.IN_PREPARATION)
    await db.commit()

    page = await order_service.get_all_orders(db, search="prep")
    assert [o.id for o in page.data] == [second]
    page = await order_service.get_all_orders(db)
    assert page.total == 2 and [o.id for o in page.data] == [first, second]
    assert page.data[0].items[0].product.name == "Coffee"


async def test_delete_order_removes_items(db, seed):
    order_id = await order_service.create_order(db, _order(seed, (seed["coffee"], 1)))
    await order_service.delete_order(db, order_id)
    await db.commit()
    assert await _orders_count(db) == 0
    assert (await db.execute(select(func.count(OrderItem.id)))).scalar_one() == 0
    with pytest.raises(NotFound):
        await order_service.delete_order(db, order_id)


async def test_decrease_stock_floor(db, seed):
    with pytest.raises(InsufficientStock):
        await product_service.decrease_stock(db, seed["cake"], 3)
    assert await _stock(db, seed["cake"]) == 2

    await product_service.decrease_stock(db, seed["cake"], 2)
    assert await _stock(db, seed["cake"]) == 0


async def test_increase_stock(db, seed):
    await product_service.increase_stock(db, seed["cake"], 8)
    assert await _stock(db, seed["cake"]) == 10
    with pytest.raises(NotFound):
        await product_service.increase_stock(db, 999, 1)

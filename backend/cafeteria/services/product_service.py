"""Товары и остатки. stock_quantity меняется только через increase/decrease и при создании заказа."""
from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.core.errors import InsufficientStock, NotFound
from cafeteria.core.logging_config import get_logger
from cafeteria.models import Product
from cafeteria.schemas.common import Page
from cafeteria.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from cafeteria.services.pagination import paginate

logger = get_logger(__name__)


async def create_product(db: AsyncSession, data: ProductCreate) -> int:
    product = Product(
        name=data.name,
        description=data.description or "",
        price=data.price,
        stock_quantity=data.stock_quantity,
    )
    db.add(product)
    await db.flush()
    logger.info("Создан товар id=%s", product.id)
    return product.id


async def get_all_products(db: AsyncSession, page: int = 1, limit: int = 10, search: str = "") -> Page[ProductResponse]:
    q = select(Product).order_by(Product.id)
    if search:
        q = q.where(Product.name.ilike(f"%{search}%"))
    total, rows = await paginate(db, q, page, limit)
    return Page[ProductResponse](
        page=page, limit=limit, total=total, data=[ProductResponse.from_row(p) for (p,) in rows]
    )


async def get_product_by_id(db: AsyncSession, product_id: int) -> Product:
    r = await db.execute(select(Product).where(Product.id == product_id))
    product = r.scalar_one_or_none()
    if not product:
        raise NotFound("Product not found")
    return product


async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate) -> None:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        await get_product_by_id(db, product_id)
        return
    result = await db.execute(update(Product).where(Product.id == product_id).values(**changes))
    if not result.rowcount:
        raise NotFound("Product not found")
    logger.info("Товар id=%s обновлён: %s", product_id, ", ".join(sorted(changes)))


async def delete_product(db: AsyncSession, product_id: int) -> None:
    result = await db.execute(delete(Product).where(Product.id == product_id))
    if not result.rowcount:
        raise NotFound("Product not found")
    logger.info("Товар id=%s удалён", product_id)


async def increase_stock(db: AsyncSession, product_id: int, quantity: int) -> None:
    await get_product_by_id(db, product_id)
    await db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock_quantity=Product.stock_quantity + quantity)
    )
    logger.info("Пополнение товара id=%s на %s", product_id, quantity)


async def decrease_stock(db: AsyncSession, product_id: int, quantity: int) -> None:
    """Списание; остаток не может стать отрицательным."""
    r = await db.execute(
        select(Product)
        .where(Product.id == product_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    product = r.scalar_one_or_none()
    if not product:
        raise NotFound("Product not found")
    if product.stock_quantity - quantity < 0:
        logger.warning(
            "Списание товара id=%s на %s отклонено: остаток %s", product_id, quantity, product.stock_quantity
        )
        raise InsufficientStock("Not enough stock to decrease")
    await db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock_quantity=Product.stock_quantity - quantity)
    )
    logger.info("Списание товара id=%s на %s", product_id, quantity)

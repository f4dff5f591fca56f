from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.core.errors import NotFound
from cafeteria.core.logging_config import get_logger
from cafeteria.models import Table, TableStatus
from cafeteria.schemas.common import Page
from cafeteria.schemas.table import TableCreate, TableResponse, TableUpdate
from cafeteria.services.pagination import paginate

logger = get_logger(__name__)


async def create_table(db: AsyncSession, data: TableCreate) -> int:
    table = Table(table_number=data.table_number, capacity=data.capacity, status=data.status)
    db.add(table)
    await db.flush()
    logger.info("Создан стол id=%s номер=%s", table.id, table.table_number)
    return table.id


async def get_all_tables(db: AsyncSession, page: int = 1, limit: int = 10, search: str = "") -> Page[TableResponse]:
    q = select(Table).order_by(Table.table_number)
    if search:
        # Поиск по подстроке статуса
        matching = [s for s in TableStatus if search.lower() in s.value]
        q = q.where(Table.status.in_(matching))
    total, rows = await paginate(db, q, page, limit)
    return Page[TableResponse](
        page=page, limit=limit, total=total, data=[TableResponse.from_row(t) for (t,) in rows]
    )


async def get_table_by_id(db: AsyncSession, table_id: int) -> Table:
    r = await db.execute(select(Table).where(Table.id == table_id))
    table = r.scalar_one_or_none()
    if not table:
        raise NotFound("Table not found")
    return table


async def update_table(db: AsyncSession, table_id: int, data: TableUpdate) -> None:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        await get_table_by_id(db, table_id)
        return
    result = await db.execute(update(Table).where(Table.id == table_id).values(**changes))
    if not result.rowcount:
        raise NotFound("Table not found")
    logger.info("Стол id=%s обновлён: %s", table_id, ", ".join(sorted(changes)))


async def delete_table(db: AsyncSession, table_id: int) -> None:
    result = await db.execute(delete(Table).where(Table.id == table_id))
    if not result.rowcount:
        raise NotFound("Table not found")
    logger.info("Стол id=%s удалён", table_id)

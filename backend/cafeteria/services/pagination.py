from typing import Any, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def paginate(db: AsyncSession, query: Select, page: int, limit: int) -> Tuple[int, list[Any]]:
    """Общее число строк запроса и одна страница (page с 1). Сортировку задаёт вызывающий."""
    total_q = select(func.count()).select_from(query.order_by(None).subquery())
    total = int((await db.execute(total_q)).scalar_one() or 0)
    offset = (page - 1) * limit
    rows = (await db.execute(query.limit(limit).offset(offset))).all()
    return total, rows

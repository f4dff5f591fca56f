"""
Бронирование столов.

Два интервала [s1, e1) и [s2, e2) конфликтуют, если s1 < e2 и e1 > s2: бронь,
которая заканчивается ровно в момент начала другой, конфликтом не считается.
Проверка учитывает все брони стола, независимо от статуса (в том числе отменённые).

Проверка свободности и вставка выполняются в одной транзакции под блокировкой
строки стола (SELECT ... FOR UPDATE), чтобы два параллельных запроса не
забронировали один стол на пересекающееся время.
"""
from datetime import datetime
from typing import List, Optional, Union

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.core.datetime_utils import parse_datetime, validate_interval
from cafeteria.core.errors import BadRequest, Conflict, NotFound
from cafeteria.core.logging_config import get_logger
from cafeteria.models import Customer, Reservation, ReservationStatus, Table
from cafeteria.schemas.reservation import (
    ReservationCreate,
    ReservationPage,
    ReservationResponse,
    ReservationUpdate,
)

logger = get_logger(__name__)

TimeValue = Union[datetime, str]


def _as_datetime(value: Optional[TimeValue], field: str) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return parse_datetime(value, field)


def _overlaps(start: datetime, end: datetime):
    return (Reservation.start_time < end) & (Reservation.end_time > start)


async def _lock_table(db: AsyncSession, table_id: int) -> None:
    r = await db.execute(select(Table.id).where(Table.id == table_id).with_for_update())
    if r.scalar_one_or_none() is None:
        raise BadRequest(f"Table not found: ID {table_id}")


async def is_table_available(
    db: AsyncSession,
    table_id: int,
    start: datetime,
    end: datetime,
    ignore_reservation_id: Optional[int] = None,
) -> bool:
    """Свободен ли стол в [start, end). При обновлении собственная бронь исключается."""
    q = (
        select(func.count())
        .select_from(Reservation)
        .where(Reservation.table_id == table_id, _overlaps(start, end))
    )
    if ignore_reservation_id is not None:
        q = q.where(Reservation.id != ignore_reservation_id)
    conflicting = (await db.execute(q)).scalar_one()
    return int(conflicting) == 0


async def check_availability(db: AsyncSession, start: TimeValue, end: TimeValue) -> List[Table]:
    """Все столы, у которых нет брони, пересекающейся с [start, end)."""
    start_dt = _as_datetime(start, "start")
    end_dt = _as_datetime(end, "end")
    tables = (await db.execute(select(Table).order_by(Table.id))).scalars().all()
    conflicting = await db.execute(
        select(Reservation.table_id).where(_overlaps(start_dt, end_dt)).distinct()
    )
    busy = set(conflicting.scalars().all())
    return [t for t in tables if t.id not in busy]


async def create_reservation(db: AsyncSession, data: ReservationCreate) -> int:
    start = _as_datetime(data.start_time, "start_time")
    end = _as_datetime(data.end_time, "end_time")
    validate_interval(start, end)

    await _lock_table(db, data.table_id)
    if not await is_table_available(db, data.table_id, start, end):
        logger.warning(
            "Стол %s занят в интервале %s - %s", data.table_id, start, end
        )
        raise Conflict("Table unavailable during this time interval")

    reservation = Reservation(
        table_id=data.table_id,
        customer_id=data.customer_id,
        start_time=start,
        end_time=end,
        status=data.status,
    )
    db.add(reservation)
    await db.flush()
    logger.info("Создана бронь id=%s стол=%s", reservation.id, reservation.table_id)
    return reservation.id


async def get_reservation_by_id(db: AsyncSession, reservation_id: int) -> Reservation:
    r = await db.execute(select(Reservation).where(Reservation.id == reservation_id))
    reservation = r.scalar_one_or_none()
    if not reservation:
        raise NotFound("Reservation not found")
    return reservation


async def get_all_reservations(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    status: Optional[ReservationStatus] = None,
    table_id: Optional[int] = None,
    start_time: Optional[TimeValue] = None,
    end_time: Optional[TimeValue] = None,
    customer_id: Optional[int] = None,
) -> ReservationPage:
    """
    Список броней по start_time.

    Если заданы обе границы, возвращаются брони, целиком лежащие внутри
    [start_time, end_time] (вложенность, а не пересечение). Одна граница:
    start_time → бронь заканчивается не раньше; end_time → начинается не позже.
    """
    start = _as_datetime(start_time, "start_time")
    end = _as_datetime(end_time, "end_time")

    conditions = []
    if status:
        conditions.append(Reservation.status == status)
    if table_id:
        conditions.append(Reservation.table_id == table_id)
    if customer_id:
        conditions.append(Reservation.customer_id == customer_id)
    if start and end:
        conditions.append(Reservation.start_time >= start)
        conditions.append(Reservation.end_time <= end)
    elif start:
        conditions.append(Reservation.end_time >= start)
    elif end:
        conditions.append(Reservation.start_time <= end)

    total_q = select(func.count()).select_from(Reservation).where(*conditions)
    total = int((await db.execute(total_q)).scalar_one() or 0)

    q = (
        select(Reservation, Customer.name, Customer.email)
        .outerjoin(Customer, Customer.id == Reservation.customer_id)
        .where(*conditions)
        .order_by(Reservation.start_time.asc(), Reservation.id.asc())
        .limit(limit)
        .offset((page - 1) * limit)
    )
    rows = (await db.execute(q)).all()
    return ReservationPage(
        page=page,
        limit=limit,
        total=total,
        records=[ReservationResponse.from_row(r, name, email) for r, name, email in rows],
    )


async def update_reservation(db: AsyncSession, reservation_id: int, data: ReservationUpdate) -> None:
    changes = data.changes()
    start = changes.get("start_time")
    end = changes.get("end_time")
    validate_interval(start, end)

    table_id = changes.get("table_id")
    if table_id and start and end:
        await _lock_table(db, table_id)
        if not await is_table_available(db, table_id, start, end, ignore_reservation_id=reservation_id):
            logger.warning(
                "Бронь %s: стол %s занят в интервале %s - %s", reservation_id, table_id, start, end
            )
            raise Conflict("Table unavailable during this time interval")

    if not changes:
        await get_reservation_by_id(db, reservation_id)
        return

    result = await db.execute(
        update(Reservation).where(Reservation.id == reservation_id).values(**changes)
    )
    if not result.rowcount:
        raise NotFound("Reservation not found")
    logger.info("Бронь id=%s обновлена: %s", reservation_id, ", ".join(sorted(changes)))


async def cancel_reservation(db: AsyncSession, reservation_id: int) -> None:
    """active → canceled. Несуществующая и уже отменённая бронь дают одну и ту же ошибку."""
    result = await db.execute(
        update(Reservation)
        .where(Reservation.id == reservation_id, Reservation.status == ReservationStatus.ACTIVE)
        .values(status=ReservationStatus.CANCELED)
    )
    if not result.rowcount:
        raise NotFound("Reservation not found or already canceled")
    logger.info("Бронь id=%s отменена", reservation_id)

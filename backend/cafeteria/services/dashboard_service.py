"""
Агрегаты для дашборда. Только чтение.

Границы периодов считаются в часовом поясе кафе (settings.timezone), неделя с понедельника.
orders.created_at хранится в UTC, а reservations.start_time в локальном времени кафе,
поэтому одно и то же окно сравнивается с ними в разных представлениях.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.config import settings
from cafeteria.models import Order, OrderItem, OrderStatus, Product, Reservation, ReservationStatus
from cafeteria.schemas.dashboard import DashboardStats, DetailedStats, PeriodMetrics, TopSellingProduct

LOW_STOCK_THRESHOLD = 10
TOP_SELLING_LIMIT = 5
PERIODS = ("day", "week", "month")


def _now_local(now: Optional[datetime] = None) -> datetime:
    tz = ZoneInfo(settings.timezone)
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        return now.replace(tzinfo=tz)
    return now.astimezone(tz)


def period_bounds(period: str, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Полуинтервал [start, end) периода, содержащего now. Границы: aware-datetime в поясе кафе."""
    local = _now_local(now)
    day_start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "week":
        start = day_start - timedelta(days=day_start.weekday())
        return start, start + timedelta(days=7)
    if period == "month":
        start = day_start.replace(day=1)
        if start.month == 12:
            end = start.replace(year=start.year + 1, month=1)
        else:
            end = start.replace(month=start.month + 1)
        return start, end
    return day_start, day_start + timedelta(days=1)


def _as_utc_naive(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _as_local_naive(dt: datetime) -> datetime:
    return dt.replace(tzinfo=None)


async def _count(db: AsyncSession, q) -> int:
    return int((await db.execute(q)).scalar_one() or 0)


async def _orders_between(db: AsyncSession, start: datetime, end: datetime, status: Optional[OrderStatus] = None) -> int:
    q = select(func.count(Order.id)).where(
        Order.created_at >= _as_utc_naive(start),
        Order.created_at < _as_utc_naive(end),
    )
    if status is not None:
        q = q.where(Order.status == status)
    return await _count(db, q)


async def _active_reservations_between(db: AsyncSession, start: datetime, end: datetime) -> int:
    q = select(func.count(Reservation.id)).where(
        Reservation.status == ReservationStatus.ACTIVE,
        Reservation.start_time >= _as_local_naive(start),
        Reservation.start_time < _as_local_naive(end),
    )
    return await _count(db, q)


async def get_stats(db: AsyncSession, now: Optional[datetime] = None) -> DashboardStats:
    today_start, today_end = period_bounds("day", now)
    week_start, week_end = period_bounds("week", now)

    total_orders = await _orders_between(db, today_start, today_end)
    completed_orders = await _orders_between(db, today_start, today_end, OrderStatus.DELIVERED)
    pending_orders = await _count(
        db, select(func.count(Order.id)).where(Order.status == OrderStatus.PENDING)
    )
    today_reservations = await _active_reservations_between(db, today_start, today_end)
    week_reservations = await _active_reservations_between(db, week_start, week_end)
    low_stock = await _count(
        db,
        select(func.count(Product.id)).where(
            Product.stock_quantity <= LOW_STOCK_THRESHOLD, Product.stock_quantity > 0
        ),
    )
    out_of_stock = await _count(
        db, select(func.count(Product.id)).where(Product.stock_quantity == 0)
    )

    quantity_sold = func.sum(OrderItem.quantity).label("quantity_sold")
    q_top = (
        select(Product.id, Product.name, quantity_sold)
        .join(OrderItem, OrderItem.product_id == Product.id)
        .join(Order, OrderItem.order_id == Order.id)
        .where(
            Order.created_at >= _as_utc_naive(today_start),
            Order.created_at < _as_utc_naive(today_end),
        )
        .group_by(Product.id, Product.name)
        .order_by(quantity_sold.desc(), Product.id)
        .limit(TOP_SELLING_LIMIT)
    )
    top_rows = (await db.execute(q_top)).all()

    return DashboardStats(
        totalOrders=total_orders,
        pendingOrders=pending_orders,
        completedOrders=completed_orders,
        todayReservations=today_reservations,
        weekReservations=week_reservations,
        lowStockProducts=low_stock,
        outOfStockProducts=out_of_stock,
        topSellingProducts=[
            TopSellingProduct(id=row.id, name=row.name, quantitySold=int(row.quantity_sold or 0))
            for row in top_rows
        ],
    )


async def get_detailed_stats(db: AsyncSession, period: str = "day", now: Optional[datetime] = None) -> DetailedStats:
    if period not in PERIODS:
        period = "day"
    start, end = period_bounds(period, now)
    return DetailedStats(
        period=period,
        startDate=start.isoformat(),
        # Последний миг периода, как "конец дня" в интерфейсе
        endDate=(end - timedelta(milliseconds=1)).isoformat(timespec="milliseconds"),
        metrics=PeriodMetrics(
            orders=await _orders_between(db, start, end),
            reservations=await _active_reservations_between(db, start, end),
        ),
    )

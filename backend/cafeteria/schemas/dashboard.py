from typing import List

from pydantic import BaseModel


class TopSellingProduct(BaseModel):
    id: int
    name: str
    quantitySold: int


class DashboardStats(BaseModel):
    """Сводка для главной страницы: сегодня/эта неделя в часовом поясе кафе."""

    totalOrders: int
    pendingOrders: int
    completedOrders: int
    todayReservations: int
    weekReservations: int
    lowStockProducts: int
    outOfStockProducts: int
    topSellingProducts: List[TopSellingProduct]


class PeriodMetrics(BaseModel):
    orders: int
    reservations: int


class DetailedStats(BaseModel):
    period: str  # day | week | month
    startDate: str
    endDate: str
    metrics: PeriodMetrics

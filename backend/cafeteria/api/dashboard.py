from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.api.auth import RequireDashboardAccess, RequireDashboardDetailed, UserInfo
from cafeteria.core.database import get_db
from cafeteria.schemas.dashboard import DashboardStats, DetailedStats
from cafeteria.services import dashboard_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireDashboardAccess),
):
    return await dashboard_service.get_stats(db)


@router.get("/stats/detailed", response_model=DetailedStats)
async def get_detailed_stats(
    period: str = Query("day", description="day | week | month"),
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireDashboardDetailed),
):
    return await dashboard_service.get_detailed_stats(db, period)

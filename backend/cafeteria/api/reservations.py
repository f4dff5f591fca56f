"""Бронирования столов. Клиент работает только со своими бронями."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.api.auth import RequireReservationAccess, UserInfo
from cafeteria.core.database import get_db
from cafeteria.core.datetime_utils import parse_datetime
from cafeteria.core.errors import Forbidden, NotFound
from cafeteria.models import Reservation, ReservationStatus
from cafeteria.schemas.common import MessageResponse
from cafeteria.schemas.reservation import (
    AvailabilityResponse,
    AvailableTable,
    ReservationCreate,
    ReservationCreated,
    ReservationPage,
    ReservationResponse,
    ReservationUpdate,
)
from cafeteria.services import reservation_service

router = APIRouter(prefix="/reservations", tags=["reservations"])

NOT_YOURS = "You cannot manage reservations that are not yours or that do not exist"


async def _own_reservation(db: AsyncSession, reservation_id: int, user: UserInfo) -> Optional[Reservation]:
    """Для клиента бронь должна существовать и принадлежать ему, иначе 403."""
    if not user.is_customer:
        return None
    try:
        reservation = await reservation_service.get_reservation_by_id(db, reservation_id)
    except NotFound:
        raise Forbidden(NOT_YOURS)
    if reservation.customer_id != user.id:
        raise Forbidden(NOT_YOURS)
    return reservation


@router.post("", response_model=ReservationCreated, status_code=201)
async def create_reservation(
    data: ReservationCreate,
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireReservationAccess),
):
    if user.is_customer and data.customer_id != user.id:
        raise Forbidden("Customers cannot create reservations for another customer_id")
    reservation_id = await reservation_service.create_reservation(db, data)
    return ReservationCreated(reservationId=reservation_id)


@router.get("", response_model=ReservationPage)
async def list_reservations(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[ReservationStatus] = None,
    table_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    start_time: Optional[str] = Query(None, description="yyyy-MM-dd HH:mm:ss"),
    end_time: Optional[str] = Query(None, description="yyyy-MM-dd HH:mm:ss"),
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireReservationAccess),
):
    if user.is_customer:
        customer_id = user.id
    return await reservation_service.get_all_reservations(
        db,
        page=page,
        limit=limit,
        status=status,
        table_id=table_id,
        start_time=parse_datetime(start_time, "start_time") if start_time else None,
        end_time=parse_datetime(end_time, "end_time") if end_time else None,
        customer_id=customer_id,
    )


@router.get("/check-availability", response_model=AvailabilityResponse)
async def check_availability(
    start: str = Query(..., description="yyyy-MM-dd HH:mm:ss"),
    end: str = Query(..., description="yyyy-MM-dd HH:mm:ss"),
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireReservationAccess),
):
    """Свободные столы на интервал [start, end)."""
    tables = await reservation_service.check_availability(
        db, parse_datetime(start, "start"), parse_datetime(end, "end")
    )
    return AvailabilityResponse(available_tables=[AvailableTable.from_row(t) for t in tables])


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: int,
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireReservationAccess),
):
    reservation = await _own_reservation(db, reservation_id, user)
    if reservation is None:
        reservation = await reservation_service.get_reservation_by_id(db, reservation_id)
    return ReservationResponse.from_row(reservation)


@router.put("/{reservation_id}", response_model=MessageResponse)
async def update_reservation(
    reservation_id: int,
    data: ReservationUpdate,
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireReservationAccess),
):
    await _own_reservation(db, reservation_id, user)
    if user.is_customer and data.customer_id is not None and data.customer_id != user.id:
        raise Forbidden("Customers cannot move reservations to another customer_id")
    await reservation_service.update_reservation(db, reservation_id, data)
    return MessageResponse(message="Reservation updated successfully")


@router.patch("/{reservation_id}/cancel", response_model=MessageResponse)
async def cancel_reservation(
    reservation_id: int,
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireReservationAccess),
):
    await _own_reservation(db, reservation_id, user)
    await reservation_service.cancel_reservation(db, reservation_id)
    return MessageResponse(message="Reservation canceled successfully")

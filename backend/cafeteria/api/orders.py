from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.api.auth import RequireOrderAccess, UserInfo
from cafeteria.core.database import get_db
from cafeteria.schemas.common import MessageResponse
from cafeteria.schemas.order import OrderCreate, OrderCreated, OrderPage, OrderResponse, OrderUpdate
from cafeteria.services import order_service

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderCreated, status_code=201)
async def post_order(
    data: OrderCreate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireOrderAccess),
):
    order_id = await order_service.create_order(db, data)
    return OrderCreated(orderId=order_id)


@router.get("", response_model=OrderPage)
async def list_orders(
    search: str = "",
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireOrderAccess),
):
    """Список заказов с позициями. search: подстрока статуса."""
    return await order_service.get_all_orders(db, search=search, page=page, limit=limit)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireOrderAccess),
):
    return await order_service.get_order_by_id(db, order_id)


@router.put("/{order_id}", response_model=MessageResponse)
async def update_order(
    order_id: int,
    body: OrderUpdate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireOrderAccess),
):
    await order_service.update_order(db, order_id, body.status)
    return MessageResponse(message="Order updated successfully")


@router.delete("/{order_id}", response_model=MessageResponse)
async def delete_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireOrderAccess),
):
    await order_service.delete_order(db, order_id)
    return MessageResponse(message="Order deleted successfully")

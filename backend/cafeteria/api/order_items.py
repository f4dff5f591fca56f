from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.api.auth import RequireOrderItemAccess, UserInfo
from cafeteria.core.database import get_db
from cafeteria.schemas.common import MessageResponse, Page
from cafeteria.schemas.order_item import OrderItemCreate, OrderItemCreated, OrderItemResponse
from cafeteria.services import order_item_service

router = APIRouter(prefix="/order-items", tags=["order-items"])


@router.post("", response_model=OrderItemCreated, status_code=201)
async def create_order_item(
    data: OrderItemCreate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireOrderItemAccess),
):
    return OrderItemCreated(orderItemId=await order_item_service.create_order_item(db, data))


@router.get("", response_model=Page[OrderItemResponse])
async def list_order_items(
    order_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireOrderItemAccess),
):
    return await order_item_service.get_all_order_items(db, order_id=order_id, page=page, limit=limit)


@router.get("/{item_id}", response_model=OrderItemResponse)
async def get_order_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireOrderItemAccess),
):
    return OrderItemResponse.from_row(await order_item_service.get_order_item_by_id(db, item_id))


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_order_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireOrderItemAccess),
):
    await order_item_service.delete_order_item(db, item_id)
    return MessageResponse(message="Order item deleted successfully")

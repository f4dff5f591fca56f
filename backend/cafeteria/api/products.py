from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.api.auth import RequireProductRead, RequireProductWrite, UserInfo
from cafeteria.core.database import get_db
from cafeteria.schemas.common import MessageResponse, Page
from cafeteria.schemas.product import (
    ProductCreate,
    ProductCreated,
    ProductResponse,
    ProductUpdate,
    StockAdjustment,
)
from cafeteria.services import product_service

router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=ProductCreated, status_code=201)
async def create_product(
    data: ProductCreate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireProductWrite),
):
    return ProductCreated(productId=await product_service.create_product(db, data))


@router.get("", response_model=Page[ProductResponse])
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireProductRead),
):
    return await product_service.get_all_products(db, page=page, limit=limit, search=search)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireProductRead),
):
    return ProductResponse.from_row(await product_service.get_product_by_id(db, product_id))


@router.put("/{product_id}", response_model=MessageResponse)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireProductWrite),
):
    await product_service.update_product(db, product_id, data)
    return MessageResponse(message="Product updated successfully")


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireProductWrite),
):
    await product_service.delete_product(db, product_id)
    return MessageResponse(message="Product deleted successfully")


@router.post("/{product_id}/increase", response_model=MessageResponse)
async def increase_stock(
    product_id: int,
    body: StockAdjustment,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireProductWrite),
):
    """Пополнить остаток."""
    await product_service.increase_stock(db, product_id, body.quantity)
    return MessageResponse(message="Stock increased successfully")


@router.post("/{product_id}/decrease", response_model=MessageResponse)
async def decrease_stock(
    product_id: int,
    body: StockAdjustment,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireProductWrite),
):
    """Списать остаток; больше, чем есть на складе, списать нельзя."""
    await product_service.decrease_stock(db, product_id, body.quantity)
    return MessageResponse(message="Stock decreased successfully")

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.api.auth import RequireTableRead, RequireTableWrite, UserInfo
from cafeteria.core.database import get_db
from cafeteria.schemas.common import MessageResponse, Page
from cafeteria.schemas.table import TableCreate, TableCreated, TableResponse, TableUpdate
from cafeteria.services import table_service

router = APIRouter(prefix="/tables", tags=["tables"])


@router.post("", response_model=TableCreated, status_code=201)
async def create_table(
    data: TableCreate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireTableWrite),
):
    return TableCreated(tableId=await table_service.create_table(db, data))


@router.get("", response_model=Page[TableResponse])
async def list_tables(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireTableRead),
):
    return await table_service.get_all_tables(db, page=page, limit=limit, search=search)


@router.get("/{table_id}", response_model=TableResponse)
async def get_table(
    table_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireTableRead),
):
    return TableResponse.from_row(await table_service.get_table_by_id(db, table_id))


@router.put("/{table_id}", response_model=MessageResponse)
async def update_table(
    table_id: int,
    data: TableUpdate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireTableWrite),
):
    await table_service.update_table(db, table_id, data)
    return MessageResponse(message="Table updated successfully")


@router.delete("/{table_id}", response_model=MessageResponse)
async def delete_table(
    table_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireTableWrite),
):
    await table_service.delete_table(db, table_id)
    return MessageResponse(message="Table deleted successfully")

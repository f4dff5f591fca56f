from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.api.auth import RequireAnyAuth, RequireEmployeeRead, RequireEmployeeWrite, UserInfo
from cafeteria.core.database import get_db
from cafeteria.core.errors import Forbidden
from cafeteria.core.permissions import Role, parse_role
from cafeteria.models.employee import EmployeeRole
from cafeteria.schemas.common import MessageResponse, Page
from cafeteria.schemas.employee import (
    EmployeeCreate,
    EmployeeCreated,
    EmployeeResponse,
    EmployeeUpdate,
    PasswordChange,
)
from cafeteria.services import auth_service, employee_service
from cafeteria.services.auth_service import USER_TYPE_EMPLOYEE

router = APIRouter(prefix="/employees", tags=["employees"])


@router.post("", response_model=EmployeeCreated, status_code=201)
async def create_employee(
    data: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireEmployeeWrite),
):
    return EmployeeCreated(employeeId=await employee_service.create_employee(db, data))


@router.get("", response_model=Page[EmployeeResponse])
async def list_employees(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    role: Optional[EmployeeRole] = Query(None, description="Фильтр по роли"),
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireEmployeeRead),
):
    return await employee_service.get_all_employees(db, page=page, limit=limit, search=search, role=role)


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireEmployeeRead),
):
    return EmployeeResponse.from_row(await employee_service.get_employee_by_id(db, employee_id))


@router.put("/{employee_id}", response_model=MessageResponse)
async def update_employee(
    employee_id: int,
    data: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireEmployeeWrite),
):
    await employee_service.update_employee(db, employee_id, data)
    return MessageResponse(message="Employee updated successfully")


@router.delete("/{employee_id}", response_model=MessageResponse)
async def delete_employee(
    employee_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireEmployeeWrite),
):
    await employee_service.delete_employee(db, employee_id)
    return MessageResponse(message="Employee deleted successfully")


@router.put("/{employee_id}/password", response_model=MessageResponse)
async def change_employee_password(
    employee_id: int,
    body: PasswordChange,
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireAnyAuth),
):
    is_self = not user.is_customer and user.id == employee_id
    is_admin = parse_role(user.role) == Role.ADMIN
    if not (is_self or is_admin):
        raise Forbidden("Only the employee or an admin can change this password")
    await auth_service.change_password(
        db, USER_TYPE_EMPLOYEE, employee_id, body.old_password, body.new_password, check_old=not is_admin
    )
    return MessageResponse(message="Password updated successfully")

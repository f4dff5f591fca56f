"""Клиенты кафе. Регистрация открытая, клиент видит и правит только себя."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.api.auth import RequireAnyAuth, RequireCustomerDelete, RequireCustomerRead, UserInfo
from cafeteria.core.database import get_db
from cafeteria.core.errors import Forbidden
from cafeteria.core.permissions import Role, parse_role
from cafeteria.schemas.common import MessageResponse, Page
from cafeteria.schemas.customer import CustomerCreate, CustomerCreated, CustomerResponse, CustomerUpdate
from cafeteria.schemas.employee import PasswordChange
from cafeteria.services import auth_service, customer_service
from cafeteria.services.auth_service import USER_TYPE_CUSTOMER

router = APIRouter(prefix="/customers", tags=["customers"])


def _check_self(user: UserInfo, customer_id: int) -> None:
    if user.is_customer and user.id != customer_id:
        raise Forbidden("Customers can only access their own record")


@router.post("", response_model=CustomerCreated, status_code=201)
async def sign_up(data: CustomerCreate, db: AsyncSession = Depends(get_db)):
    return CustomerCreated(customerId=await customer_service.create_customer(db, data))


@router.get("", response_model=Page[CustomerResponse])
async def list_customers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireCustomerRead),
):
    if user.is_customer:
        me = await customer_service.get_customer_by_id(db, user.id)
        return Page[CustomerResponse](page=1, limit=limit, total=1, data=[CustomerResponse.from_row(me)])
    return await customer_service.get_all_customers(db, page=page, limit=limit, search=search)


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireCustomerRead),
):
    _check_self(user, customer_id)
    return CustomerResponse.from_row(await customer_service.get_customer_by_id(db, customer_id))


@router.put("/{customer_id}", response_model=MessageResponse)
async def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireCustomerRead),
):
    _check_self(user, customer_id)
    await customer_service.update_customer(db, customer_id, data)
    return MessageResponse(message="Customer updated successfully")


@router.delete("/{customer_id}", response_model=MessageResponse)
async def delete_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireCustomerDelete),
):
    await customer_service.delete_customer(db, customer_id)
    return MessageResponse(message="Customer deleted successfully")


@router.put("/{customer_id}/password", response_model=MessageResponse)
async def change_customer_password(
    customer_id: int,
    body: PasswordChange,
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireAnyAuth),
):
    """Свой пароль меняется со старым паролем; администратор меняет без него."""
    is_self = user.is_customer and user.id == customer_id
    if not is_self and parse_role(user.role) != Role.ADMIN:
        raise Forbidden("Only the customer or an admin can change this password")
    await auth_service.change_password(
        db, USER_TYPE_CUSTOMER, customer_id, body.old_password, body.new_password, check_old=is_self
    )
    return MessageResponse(message="Password updated successfully")

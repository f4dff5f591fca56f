"""Авторизация: вход по email + пароль, JWT, проверка ролей."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.core.database import get_db
from cafeteria.core.logging_config import get_logger
from cafeteria.core.permissions import Resource, Role, is_customer, parse_role, roles_for
from cafeteria.services import auth_service
from cafeteria.services.auth_service import USER_TYPE_CUSTOMER, USER_TYPE_EMPLOYEE, decode_token

router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)
logger = get_logger(__name__)


class UserInfo(BaseModel):
    id: int
    name: str
    role: str
    email: str
    user_type: str

    @property
    def is_customer(self) -> bool:
        return is_customer(self.role)


class LoginBody(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str


class ChangePasswordBody(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=6, max_length=72)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[UserInfo]:
    has_header = credentials is not None and credentials.scheme.lower() == "bearer"
    if not has_header:
        return None
    payload = decode_token(credentials.credentials)
    if not payload or "sub" not in payload:
        logger.warning("Токен не прошёл проверку (неверный или истёк)")
        return None
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        return None
    return UserInfo(
        id=user_id,
        name=payload.get("name", ""),
        role=payload.get("role", ""),
        email=payload.get("email", ""),
        user_type=payload.get("user_type", USER_TYPE_EMPLOYEE),
    )


def require_roles(allowed_roles: List[Role]):
    async def _check(
        current_user: Optional[UserInfo] = Depends(get_current_user),
    ) -> UserInfo:
        if not current_user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required",
                headers={"WWW-Authenticate": "Bearer"},
            )
        role_enum = parse_role(current_user.role)
        if role_enum is None:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unknown role")
        if role_enum not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied. Role not authorized.")
        return current_user
    return _check


def require_access(resource: Resource):
    return require_roles(roles_for(resource))


RequireAnyAuth = require_roles(list(Role))
RequireReservationAccess = require_access(Resource.RESERVATIONS)
RequireOrderAccess = require_access(Resource.ORDERS)
RequireOrderItemAccess = require_access(Resource.ORDER_ITEMS)
RequireProductRead = require_access(Resource.PRODUCTS_READ)
RequireProductWrite = require_access(Resource.PRODUCTS_WRITE)
RequireTableRead = require_access(Resource.TABLES_READ)
RequireTableWrite = require_access(Resource.TABLES_WRITE)
RequireCustomerRead = require_access(Resource.CUSTOMERS_READ)
RequireCustomerDelete = require_access(Resource.CUSTOMERS_DELETE)
RequireEmployeeRead = require_access(Resource.EMPLOYEES_READ)
RequireEmployeeWrite = require_access(Resource.EMPLOYEES_WRITE)
RequireDashboardAccess = require_access(Resource.DASHBOARD)
RequireDashboardDetailed = require_access(Resource.DASHBOARD_DETAILED)


@router.post("/employee/login", response_model=LoginResponse)
async def login_employee(body: LoginBody, db: AsyncSession = Depends(get_db)):
    token = await auth_service.login_employee(db, body.email, body.password)
    return LoginResponse(token=token)


@router.post("/customer/login", response_model=LoginResponse)
async def login_customer(body: LoginBody, db: AsyncSession = Depends(get_db)):
    token = await auth_service.login_customer(db, body.email, body.password)
    return LoginResponse(token=token)


@router.get("/me", response_model=UserInfo)
async def me(current_user: UserInfo = Depends(RequireAnyAuth)):
    return current_user


@router.post("/change-password")
async def change_password(
    body: ChangePasswordBody,
    current_user: UserInfo = Depends(RequireAnyAuth),
    db: AsyncSession = Depends(get_db),
):
    """Смена пароля текущего пользователя (требуется старый пароль)."""
    user_type = USER_TYPE_CUSTOMER if current_user.is_customer else USER_TYPE_EMPLOYEE
    await auth_service.change_password(
        db, user_type, current_user.id, body.old_password, body.new_password
    )
    return {"ok": True}

"""Хеширование паролей, JWT и вход сотрудников/клиентов по email + пароль."""
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.config import settings
from cafeteria.core.errors import BadRequest, NotFound, Unauthorized
from cafeteria.core.logging_config import get_logger
from cafeteria.core.permissions import Role
from cafeteria.models import Customer, Employee

logger = get_logger(__name__)

USER_TYPE_EMPLOYEE = "employee"
USER_TYPE_CUSTOMER = "customer"


def normalize_email(email: str) -> str:
    """Email хранится и ищется в нижнем регистре: уникальность не зависит от регистра."""
    return email.strip().lower()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Повреждённый хеш в БД
        return False


def create_access_token(
    subject: int,
    role: str,
    name: str,
    email: str,
    user_type: str,
) -> str:
    now = datetime.utcnow()
    expire = now + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {
        # PyJWT требует строковый sub
        "sub": str(subject),
        "role": role,
        "name": name,
        "email": email,
        "user_type": user_type,
        "exp": expire,
        "iat": now,
    }
    return jwt.encode(
        payload,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.PyJWTError:
        return None


async def login_employee(db: AsyncSession, email: str, password: str) -> str:
    result = await db.execute(
        select(Employee).where(Employee.email == normalize_email(email))
    )
    emp = result.scalar_one_or_none()
    if not emp:
        raise Unauthorized("Employee not found")
    if not verify_password(password, emp.password_hash):
        raise Unauthorized("Invalid password")
    logger.info("Вход сотрудника id=%s", emp.id)
    return create_access_token(
        subject=emp.id,
        role=emp.role.value,
        name=emp.name,
        email=emp.email,
        user_type=USER_TYPE_EMPLOYEE,
    )


async def login_customer(db: AsyncSession, email: str, password: str) -> str:
    result = await db.execute(
        select(Customer).where(Customer.email == normalize_email(email))
    )
    customer = result.scalar_one_or_none()
    if not customer:
        raise Unauthorized("Customer not found")
    if not verify_password(password, customer.password_hash):
        raise Unauthorized("Invalid password")
    logger.info("Вход клиента id=%s", customer.id)
    return create_access_token(
        subject=customer.id,
        role=Role.CUSTOMER.value,
        name=customer.name,
        email=customer.email,
        user_type=USER_TYPE_CUSTOMER,
    )


async def change_password(
    db: AsyncSession,
    user_type: str,
    user_id: int,
    old_password: str,
    new_password: str,
    check_old: bool = True,
) -> None:
    """Смена пароля сотрудника или клиента. Администратор меняет чужой пароль без старого (check_old=False)."""
    model = Customer if user_type == USER_TYPE_CUSTOMER else Employee
    result = await db.execute(select(model).where(model.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFound("User not found")
    if check_old and not verify_password(old_password, user.password_hash):
        raise BadRequest("Current password is incorrect")
    user.password_hash = hash_password(new_password)
    db.add(user)
    await db.flush()
    logger.info("Пароль изменён: %s id=%s", user_type, user_id)

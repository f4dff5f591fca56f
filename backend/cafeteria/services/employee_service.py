from typing import Optional

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.config import settings
from cafeteria.core.errors import NotFound
from cafeteria.core.logging_config import get_logger
from cafeteria.models import Employee, EmployeeRole
from cafeteria.schemas.common import Page
from cafeteria.schemas.employee import EmployeeCreate, EmployeeResponse, EmployeeUpdate
from cafeteria.services.auth_service import hash_password, normalize_email
from cafeteria.services.pagination import paginate

logger = get_logger(__name__)


async def create_employee(db: AsyncSession, data: EmployeeCreate) -> int:
    emp = Employee(
        name=data.name,
        email=normalize_email(data.email),
        role=data.role,
        password_hash=hash_password(data.password),
    )
    db.add(emp)
    await db.flush()
    logger.info("Создан сотрудник id=%s роль=%s", emp.id, emp.role.value)
    return emp.id


async def get_all_employees(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    search: str = "",
    role: Optional[EmployeeRole] = None,
) -> Page[EmployeeResponse]:
    q = select(Employee).order_by(Employee.id)
    if search:
        q = q.where(Employee.name.ilike(f"%{search}%"))
    if role is not None:
        q = q.where(Employee.role == role)
    total, rows = await paginate(db, q, page, limit)
    return Page[EmployeeResponse](
        page=page, limit=limit, total=total, data=[EmployeeResponse.from_row(e) for (e,) in rows]
    )


async def get_employee_by_id(db: AsyncSession, employee_id: int) -> Employee:
    r = await db.execute(select(Employee).where(Employee.id == employee_id))
    emp = r.scalar_one_or_none()
    if not emp:
        raise NotFound("Employee not found")
    return emp


async def update_employee(db: AsyncSession, employee_id: int, data: EmployeeUpdate) -> None:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes:
        changes["email"] = normalize_email(changes["email"])
    if not changes:
        await get_employee_by_id(db, employee_id)
        return
    result = await db.execute(update(Employee).where(Employee.id == employee_id).values(**changes))
    if not result.rowcount:
        raise NotFound("Employee not found")
    logger.info("Сотрудник id=%s обновлён: %s", employee_id, ", ".join(sorted(changes)))


async def delete_employee(db: AsyncSession, employee_id: int) -> None:
    result = await db.execute(delete(Employee).where(Employee.id == employee_id))
    if not result.rowcount:
        raise NotFound("Employee not found")
    logger.info("Сотрудник id=%s удалён", employee_id)


async def ensure_superuser(db: AsyncSession) -> None:
    """Создать администратора из настроек, если сотрудника с таким email ещё нет."""
    email = normalize_email(settings.superuser_email)
    r = await db.execute(select(Employee).where(Employee.email == email))
    if r.scalar_one_or_none() is not None:
        return
    db.add(
        Employee(
            name=settings.superuser_name,
            email=email,
            role=EmployeeRole.ADMIN,
            password_hash=hash_password(settings.superuser_password),
        )
    )
    await db.flush()
    logger.info("Создан администратор: %s", email)

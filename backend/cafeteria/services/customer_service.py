from sqlalchemy import select, update, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from cafeteria.core.errors import NotFound
from cafeteria.core.logging_config import get_logger
from cafeteria.models import Customer
from cafeteria.schemas.common import Page
from cafeteria.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from cafeteria.services.auth_service import hash_password, normalize_email
from cafeteria.services.pagination import paginate

logger = get_logger(__name__)


async def create_customer(db: AsyncSession, data: CustomerCreate) -> int:
    customer = Customer(
        name=data.name,
        email=normalize_email(data.email),
        phone=data.phone or "",
        password_hash=hash_password(data.password),
    )
    db.add(customer)
    await db.flush()
    logger.info("Зарегистрирован клиент id=%s", customer.id)
    return customer.id


async def get_all_customers(db: AsyncSession, page: int = 1, limit: int = 10, search: str = "") -> Page[CustomerResponse]:
    q = select(Customer).order_by(Customer.id)
    if search:
        pattern = f"%{search}%"
        q = q.where(or_(Customer.name.ilike(pattern), Customer.email.ilike(pattern)))
    total, rows = await paginate(db, q, page, limit)
    return Page[CustomerResponse](
        page=page, limit=limit, total=total, data=[CustomerResponse.from_row(c) for (c,) in rows]
    )


async def get_customer_by_id(db: AsyncSession, customer_id: int) -> Customer:
    r = await db.execute(select(Customer).where(Customer.id == customer_id))
    customer = r.scalar_one_or_none()
    if not customer:
        raise NotFound("Customer not found")
    return customer


async def update_customer(db: AsyncSession, customer_id: int, data: CustomerUpdate) -> None:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes:
        changes["email"] = normalize_email(changes["email"])
    if not changes:
        await get_customer_by_id(db, customer_id)
        return
    result = await db.execute(update(Customer).where(Customer.id == customer_id).values(**changes))
    if not result.rowcount:
        raise NotFound("Customer not found")
    logger.info("Клиент id=%s обновлён: %s", customer_id, ", ".join(sorted(changes)))


async def delete_customer(db: AsyncSession, customer_id: int) -> None:
    result = await db.execute(delete(Customer).where(Customer.id == customer_id))
    if not result.rowcount:
        raise NotFound("Customer not found")
    logger.info("Клиент id=%s удалён", customer_id)

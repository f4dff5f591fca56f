"""Фикстуры для тестов: in-memory SQLite вместо PostgreSQL, токены без логина."""
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cafeteria.core.database import Base, get_db
from cafeteria.main import app
from cafeteria.models import Customer, Employee, EmployeeRole, Product, Table
from cafeteria.services.auth_service import (
    USER_TYPE_CUSTOMER,
    USER_TYPE_EMPLOYEE,
    create_access_token,
    hash_password,
)

PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # SQLite по умолчанию не проверяет внешние ключи
    @event.listens_for(eng.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def seed(session_maker):
    """Сотрудники всех ролей, два клиента, три стола, два товара. Возвращает id по ключам."""
    async with session_maker() as session:
        employees = {
            role.value: Employee(
                name=f"{role.value.title()} User",
                email=f"{role.value}@cafe.test",
                role=role,
                password_hash=PASSWORD_HASH,
            )
            for role in EmployeeRole
        }
        alice = Customer(name="Alice", email="alice@cafe.test", phone="111", password_hash=PASSWORD_HASH)
        bob = Customer(name="Bob", email="bob@cafe.test", phone="222", password_hash=PASSWORD_HASH)
        tables = [Table(table_number=n, capacity=4) for n in (1, 2, 3)]
        coffee = Product(name="Coffee", description="Espresso", price=Decimal("5.50"), stock_quantity=10)
        cake = Product(name="Cake", description="", price=Decimal("12.00"), stock_quantity=2)
        session.add_all([*employees.values(), alice, bob, *tables, coffee, cake])
        await session.commit()
        return {
            **{f"employee_{k}": e.id for k, e in employees.items()},
            "alice": alice.id,
            "bob": bob.id,
            "tables": [t.id for t in tables],
            "coffee": coffee.id,
            "cake": cake.id,
        }


@pytest.fixture
async def db(session_maker, seed):
    async with session_maker() as session:
        yield session


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers(seed):
    """Заголовок Authorization для каждой роли и для обоих клиентов."""
    result = {}
    for role in EmployeeRole:
        token = create_access_token(
            subject=seed[f"employee_{role.value}"],
            role=role.value,
            name=f"{role.value.title()} User",
            email=f"{role.value}@cafe.test",
            user_type=USER_TYPE_EMPLOYEE,
        )
        result[role.value] = _bearer(token)
    for name in ("alice", "bob"):
        token = create_access_token(
            subject=seed[name],
            role="customer",
            name=name.title(),
            email=f"{name}@cafe.test",
            user_type=USER_TYPE_CUSTOMER,
        )
        result[name] = _bearer(token)
    return result


@pytest.fixture
async def client(session_maker, seed):
    """HTTP-клиент приложения; каждый запрос получает свою сессию тестовой БД."""

    async def _get_test_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

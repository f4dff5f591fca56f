from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from cafeteria.config import settings
from cafeteria.core.database import engine, Base, async_session_maker
from cafeteria.core.errors import AppError
from cafeteria.core.logging_config import setup_logging, get_logger
from cafeteria.api.auth import router as auth_router
from cafeteria.api.customers import router as customers_router
from cafeteria.api.dashboard import router as dashboard_router
from cafeteria.api.employees import router as employees_router
from cafeteria.api.order_items import router as order_items_router
from cafeteria.api.orders import router as orders_router
from cafeteria.api.products import router as products_router
from cafeteria.api.reservations import router as reservations_router
from cafeteria.api.tables import router as tables_router
from cafeteria.services.employee_service import ensure_superuser

setup_logging()
logger = get_logger(__name__)


async def seed_superuser():
    async with async_session_maker() as session:
        await ensure_superuser(session)
        await session.commit()


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Таблицы БД проверены/созданы")
    await seed_superuser()
    yield
    await engine.dispose()


app = FastAPI(title="Кафе: столы, заказы, склад", version="1.0.0", lifespan=lifespan)


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
        headers=headers,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return error_response(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        msg = err.get("msg", "invalid value")
        messages.append(f"{field}: {msg}" if field else msg)
    return error_response(400, "; ".join(messages) or "Invalid request")


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    err_str = str(exc.orig).lower()
    if "foreign key" in err_str:
        if (exc.statement or "").lstrip().upper().startswith("DELETE"):
            return error_response(400, "Cannot delete or update because a related record exists")
        return error_response(400, "One of the specified foreign keys does not exist")
    if "unique" in err_str or "duplicate key" in err_str:
        return error_response(409, "Duplicate value violates a unique constraint")
    logger.exception("Ошибка целостности данных: %s", exc)
    return error_response(400, "Data integrity violation")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Необработанная ошибка: %s", exc)
    return error_response(500, "Internal Server Error")


origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()] or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(auth_router)
app.include_router(customers_router)
app.include_router(employees_router)
app.include_router(tables_router)
app.include_router(products_router)
app.include_router(reservations_router)
app.include_router(orders_router)
app.include_router(order_items_router)
app.include_router(dashboard_router)


@app.get("/health")
def health():
    return {"status": "ok"}

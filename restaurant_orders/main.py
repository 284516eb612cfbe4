from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select

from restaurant_orders.config import settings
from restaurant_orders.core.database import async_session_maker, create_tables, engine
from restaurant_orders.core.logging_config import setup_logging, get_logger
from restaurant_orders.models import Dish, UserRole
from restaurant_orders.data.menu import DEFAULT_MENU
from restaurant_orders.services.user_directory import create_user, is_taken
from restaurant_orders.api.orders import router as orders_router
from restaurant_orders.api.menu import router as menu_router
from restaurant_orders.api.auth import router as auth_router

setup_logging()
logger = get_logger(__name__)


async def seed_menu():
    """Заполнить меню из дефолтного списка, если таблица пуста."""
    async with async_session_maker() as session:
        r = await session.execute(select(Dish).limit(1))
        if r.scalar_one_or_none() is not None:
            return
        for item in DEFAULT_MENU:
            session.add(Dish(**item))
        await session.commit()
        logger.info("Меню заполнено из дефолтного списка (%s блюд)", len(DEFAULT_MENU))


async def ensure_manager():
    """Создать первого менеджера из настроек, если его ещё нет."""
    if not settings.manager_email or not settings.manager_password:
        return
    async with async_session_maker() as session:
        if await is_taken(session, settings.manager_username, settings.manager_email):
            return
        await create_user(
            session,
            settings.manager_username,
            settings.manager_email,
            settings.manager_password,
            UserRole.MANAGER,
        )
        await session.commit()
        logger.info("Создан менеджер: %s", settings.manager_username)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    logger.info("Таблицы БД проверены/созданы")
    if settings.seed_menu:
        try:
            await seed_menu()
        except Exception as e:
            logger.warning("Меню: %s", e)
    await ensure_manager()
    yield
    await engine.dispose()


app = FastAPI(title="Заказы ресторана", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def order_body_exception_handler(request: Request, exc: RequestValidationError):
    # Тело заказа неверного типа — такой же 400, как и прочие некорректные заказы.
    if request.method == "POST" and request.url.path.rstrip("/") == "/orders":
        logger.warning("Заказ отклонён: некорректное тело запроса")
        return JSONResponse(status_code=400, content={"detail": "Некорректные данные заказа"})
    return await request_validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Необработанная ошибка: %s", exc)
    detail = "Внутренняя ошибка сервера"
    err_str = str(exc).lower()
    if "unique constraint" in err_str or "duplicate key" in err_str:
        detail = "Конфликт данных (дубликат). Повторите запрос."
    elif "foreign key" in err_str:
        detail = "Ошибка связи с данными (например, блюдо не найдено)."
    return JSONResponse(
        status_code=500,
        content={"detail": detail},
    )


def _cors_origins() -> list[str]:
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    return origins or ["*"]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=settings.cors_origins != "",
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(orders_router)
app.include_router(menu_router)
app.include_router(auth_router)


@app.get("/health")
def health():
    return {"status": "ok"}

"""Фикстуры для тестов API и сервисов."""
import asyncio
import os
import tempfile
from decimal import Decimal

import pytest

# Тесты работают на отдельной SQLite-базе во временном каталоге; переменные задаются до импорта settings.
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), "restaurant_orders_test.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["SEED_MENU"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from restaurant_orders.core.database import async_session_maker, create_tables, drop_tables  # noqa: E402
from restaurant_orders.models import Dish, UserRole  # noqa: E402
from restaurant_orders.services.user_directory import create_user  # noqa: E402


async def _reset_db():
    await drop_tables()
    await create_tables()


async def _add_dish(name: str, price: Decimal, quantity: int, description=None) -> int:
    async with async_session_maker() as session:
        dish = Dish(name=name, price=price, quantity=quantity, description=description)
        session.add(dish)
        await session.commit()
        return dish.id


def run(coro):
    return asyncio.run(coro)


@pytest.fixture(autouse=True)
def fresh_db():
    """Пустая схема перед каждым тестом."""
    run(_reset_db())
    yield


@pytest.fixture
def add_dish():
    """Добавить блюдо в меню, вернуть его id."""
    def _add(name="Пельмени", price="9.99", quantity=2, description=None) -> int:
        return run(_add_dish(name, Decimal(price), quantity, description))
    return _add


@pytest.fixture
def client():
    """Тестовый клиент приложения."""
    from restaurant_orders.main import app
    with TestClient(app) as c:
        yield c


async def _add_user(username: str, email: str, password: str, role: UserRole) -> int:
    async with async_session_maker() as session:
        user = await create_user(session, username, email, password, role)
        await session.commit()
        return user.id


@pytest.fixture
def add_user():
    """Завести пользователя напрямую в БД (в т.ч. персонал), вернуть его id."""
    def _add(username="boss", email=None, password="secret1", role=UserRole.MANAGER) -> int:
        return run(_add_user(username, email or f"{username}@example.com", password, role))
    return _add

"""Меню: доступные блюда, проверка и списание остатка."""
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_orders.models import Dish


async def list_available(db: AsyncSession) -> list[Dish]:
    result = await db.execute(
        select(Dish)
        .where(Dish.quantity > 0)
        .order_by(Dish.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def check_availability(db: AsyncSession, dish_id: int, quantity: int) -> Optional[Dish]:
    """Блюдо, если оно есть и остатка хватает на quantity, иначе None. Только чтение, без блокировки."""
    # populate_existing: остаток меняется UPDATE-ом в обход объектов сессии.
    result = await db.execute(
        select(Dish)
        .where(Dish.id == dish_id, Dish.quantity >= quantity)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def reserve_stock(db: AsyncSession, dish_id: int, quantity: int) -> bool:
    """
    Списать quantity порций одним условным UPDATE.
    Возвращает False, если блюда нет или остатка не хватает (в т.ч. его уже забрал параллельный заказ).
    """
    result = await db.execute(
        update(Dish)
        .where(Dish.id == dish_id, Dish.quantity >= quantity)
        .values(quantity=Dish.quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def release_stock(db: AsyncSession, dish_id: int, quantity: int) -> None:
    await db.execute(
        update(Dish)
        .where(Dish.id == dish_id)
        .values(quantity=Dish.quantity + quantity)
        .execution_options(synchronize_session=False)
    )

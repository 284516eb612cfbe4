from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from restaurant_orders.core.database import MAX_DB_INT
from restaurant_orders.core.errors import ReadError
from restaurant_orders.models import Order


async def get_order(db: AsyncSession, order_id: int) -> Optional[Order]:
    """Заказ с позициями в порядке записи; None, если заказа нет. Каждый вызов читает из БД заново."""
    if not 0 < order_id <= MAX_DB_INT:
        return None
    try:
        result = await db.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.dishes))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        raise ReadError(f"Не удалось прочитать заказ id={order_id}") from e

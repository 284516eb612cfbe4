"""
Запись заказов. Заголовок, списание остатков и позиции — одна транзакция:
при любой ошибке откатывается всё, частично созданный заказ не виден.
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from restaurant_orders.core.database import MAX_DB_INT
from restaurant_orders.core.errors import DishUnavailableError, InvalidTransitionError, StoreError
from restaurant_orders.core.logging_config import get_logger
from restaurant_orders.models import Order, OrderLineItem, OrderStatus
from restaurant_orders.services.dish_catalog import release_stock, reserve_stock
from restaurant_orders.services.order_status import can_transition
from restaurant_orders.services.order_validator import ValidOrder

logger = get_logger(__name__)


async def create_order(db: AsyncSession, data: ValidOrder) -> int:
    try:
        order = Order(
            user_id=data.user_id,
            status=OrderStatus.PENDING,
            special_requests=data.special_requests,
        )
        db.add(order)
        await db.flush()
        for line in data.lines:
            if not await reserve_stock(db, line.dish_id, line.quantity):
                raise DishUnavailableError(line.dish_id)
            db.add(
                OrderLineItem(
                    order_id=order.id,
                    dish_id=line.dish_id,
                    quantity=line.quantity,
                    price=line.price,
                )
            )
        await db.flush()
        order_id = order.id
        await db.commit()
    except DishUnavailableError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Ошибка записи заказа пользователя %s", data.user_id)
        raise StoreError("Не удалось создать заказ") from e
    return order_id


async def update_order_status(
    db: AsyncSession, order_id: int, new_status: OrderStatus
) -> Optional[Order]:
    """Смена статуса; при отмене порции возвращаются на склад. None — заказа нет."""
    if not 0 < order_id <= MAX_DB_INT:
        return None
    try:
        result = await db.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.dishes))
            .with_for_update()
        )
        order = result.scalar_one_or_none()
        if order is None:
            return None
        if not can_transition(order.status, new_status):
            raise InvalidTransitionError(order.status.value, new_status.value)
        if new_status == OrderStatus.CANCELLED:
            for line in order.dishes:
                await release_stock(db, line.dish_id, line.quantity)
        order.status = new_status
        db.add(order)
        await db.flush()
        await db.commit()
        await db.refresh(order, attribute_names=["updated_at"])
    except InvalidTransitionError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Ошибка смены статуса заказа id=%s", order_id)
        raise StoreError("Не удалось изменить статус заказа") from e
    return order

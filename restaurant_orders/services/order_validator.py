"""Проверка заказа перед записью: структура, затем наличие блюд по меню."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_orders.core.database import MAX_DB_INT
from restaurant_orders.core.errors import DishUnavailableError, MalformedOrderError, StoreError
from restaurant_orders.schemas.order import OrderCreate
from restaurant_orders.services.dish_catalog import check_availability

CENT = Decimal("0.01")
# Numeric(10, 2): восемь знаков до запятой.
PRICE_LIMIT = Decimal("100000000")


@dataclass(frozen=True)
class ValidLine:
    dish_id: int
    quantity: int
    price: Decimal


@dataclass(frozen=True)
class ValidOrder:
    user_id: int
    special_requests: Optional[str]
    lines: list[ValidLine] = field(default_factory=list)


def _is_db_price(price: Decimal) -> bool:
    """Цена помещается в Numeric(10, 2) без округления."""
    if not price.is_finite() or price >= PRICE_LIMIT:
        return False
    return price == price.quantize(CENT)


def check_structure(data: OrderCreate) -> None:
    if data.user_id is None or not 0 < data.user_id <= MAX_DB_INT:
        raise MalformedOrderError("Некорректные данные заказа: не указан пользователь")
    if not data.dishes:
        raise MalformedOrderError("Некорректные данные заказа: список блюд пуст")
    for item in data.dishes:
        if item.dish_id is None or not 0 < item.dish_id <= MAX_DB_INT:
            raise MalformedOrderError("Некорректные данные заказа: не указано блюдо")
        if item.quantity <= 0:
            raise MalformedOrderError("Некорректные данные заказа: количество должно быть больше нуля")
        if item.quantity > MAX_DB_INT:
            raise MalformedOrderError("Некорректные данные заказа: слишком большое количество")
        if item.price is None:
            continue
        if item.price.is_finite() and item.price < 0:
            raise MalformedOrderError("Некорректные данные заказа: отрицательная цена")
        if not _is_db_price(item.price):
            raise MalformedOrderError("Некорректные данные заказа: цена вне диапазона или точнее копеек")


async def validate_order(db: AsyncSession, data: OrderCreate) -> ValidOrder:
    """
    Проверяет заказ и фиксирует цены позиций.
    Первая недоступная позиция (по порядку в списке) прерывает проверку.
    Цена позиции — из запроса; если её нет, берётся текущая цена блюда.
    """
    check_structure(data)
    lines = []
    try:
        for item in data.dishes:
            dish = await check_availability(db, item.dish_id, item.quantity)
            if dish is None:
                raise DishUnavailableError(item.dish_id)
            price = item.price if item.price is not None else dish.price
            lines.append(ValidLine(dish_id=item.dish_id, quantity=item.quantity, price=price))
    except SQLAlchemyError as e:
        raise StoreError("Не удалось проверить наличие блюд") from e
    return ValidOrder(user_id=data.user_id, special_requests=data.special_requests, lines=lines)

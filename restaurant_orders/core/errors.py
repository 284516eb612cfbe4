"""Ошибки сервисов заказа. Роуты переводят их в HTTP-ответы: 400 — ошибка клиента, 500 — хранилище."""
from typing import Optional


class OrderValidationError(Exception):
    """Заказ нельзя принять."""


class MalformedOrderError(OrderValidationError):
    def __init__(self, reason: str = "Некорректные данные заказа"):
        super().__init__(reason)
        self.reason = reason


class DishUnavailableError(OrderValidationError):
    def __init__(self, dish_id: Optional[int] = None):
        if dish_id is None:
            message = "Недоступные блюда в заказе"
        else:
            message = f"Блюдо {dish_id} недоступно в нужном количестве"
        super().__init__(message)
        self.dish_id = dish_id


class InvalidTransitionError(Exception):
    def __init__(self, current: str, new: str):
        super().__init__(f"Нельзя перевести заказ из статуса {current} в {new}")
        self.current = current
        self.new = new


class StoreError(Exception):
    """Не удалось записать заказ."""


class ReadError(Exception):
    """Не удалось прочитать заказ (отсутствие заказа ошибкой не считается)."""

from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel

from restaurant_orders.models import OrderStatus


class OrderLineItemCreate(BaseModel):
    """Позиция в запросе: блюдо, количество и цена (если цены нет — берётся из меню)."""
    dish_id: Optional[int] = None
    quantity: int = 0
    price: Optional[Decimal] = None


class OrderCreate(BaseModel):
    # Поля необязательны в схеме: проверку делает валидатор заказа и отвечает 400, а не 422.
    user_id: Optional[int] = None
    special_requests: Optional[str] = None
    dishes: Optional[List[OrderLineItemCreate]] = None


class OrderCreatedResponse(BaseModel):
    id: int
    status: str
    detail: str = "Заказ успешно создан"


class OrderLineItemResponse(BaseModel):
    id: int
    order_id: int
    dish_id: int
    quantity: int
    price: Decimal

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    user_id: int
    status: str
    special_requests: Optional[str] = None
    created_at: str
    updated_at: str
    dishes: List[OrderLineItemResponse]


class OrderStatusUpdate(BaseModel):
    status: OrderStatus

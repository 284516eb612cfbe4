from restaurant_orders.core.database import Base
from restaurant_orders.models.dish import Dish
from restaurant_orders.models.order import Order, OrderLineItem, OrderStatus
from restaurant_orders.models.user import User, UserRole
from restaurant_orders.models.session import UserSession

__all__ = [
    "Base",
    "Dish",
    "Order",
    "OrderLineItem",
    "OrderStatus",
    "User",
    "UserRole",
    "UserSession",
]

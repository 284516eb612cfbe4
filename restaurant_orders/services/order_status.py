from restaurant_orders.models import OrderStatus

ALLOWED_TRANSITIONS: dict[OrderStatus, list[OrderStatus]] = {
    OrderStatus.PENDING: [OrderStatus.FULFILLED, OrderStatus.CANCELLED],
    OrderStatus.FULFILLED: [],
    OrderStatus.CANCELLED: [],
}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, [])

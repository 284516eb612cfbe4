from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_orders.api.auth import RequireKitchenStaff
from restaurant_orders.core.database import get_db
from restaurant_orders.core.errors import (
    InvalidTransitionError,
    OrderValidationError,
    ReadError,
    StoreError,
)
from restaurant_orders.core.logging_config import get_logger
from restaurant_orders.models import Order, User
from restaurant_orders.schemas.order import (
    OrderCreate,
    OrderCreatedResponse,
    OrderLineItemResponse,
    OrderResponse,
    OrderStatusUpdate,
)
from restaurant_orders.services.order_reader import get_order
from restaurant_orders.services.order_store import create_order, update_order_status
from restaurant_orders.services.order_validator import validate_order

logger = get_logger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])


def _order_to_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        user_id=order.user_id,
        status=order.status.value,
        special_requests=order.special_requests,
        created_at=order.created_at.isoformat() if order.created_at else "",
        updated_at=order.updated_at.isoformat() if order.updated_at else "",
        dishes=[OrderLineItemResponse.model_validate(d) for d in order.dishes],
    )


@router.post("", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
async def post_order(data: OrderCreate, db: AsyncSession = Depends(get_db)):
    try:
        valid = await validate_order(db, data)
        order_id = await create_order(db, valid)
    except OrderValidationError as e:
        logger.warning("Заказ отклонён (пользователь %s): %s", data.user_id, e)
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError:
        raise HTTPException(status_code=500, detail="Не удалось создать заказ")
    logger.info("Создан заказ id=%s пользователь=%s позиций=%s", order_id, valid.user_id, len(valid.lines))
    return OrderCreatedResponse(id=order_id, status="pending")


@router.get("/{order_id}", response_model=OrderResponse)
async def read_order(order_id: int, db: AsyncSession = Depends(get_db)):
    try:
        order = await get_order(db, order_id)
    except ReadError:
        logger.exception("Ошибка чтения заказа id=%s", order_id)
        raise HTTPException(status_code=500, detail="Не удалось получить заказ")
    if not order:
        raise HTTPException(status_code=404, detail="Заказ не найден")
    return _order_to_response(order)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def patch_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(RequireKitchenStaff),
):
    try:
        order = await update_order_status(db, order_id, body.status)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError:
        raise HTTPException(status_code=500, detail="Не удалось изменить статус заказа")
    if not order:
        raise HTTPException(status_code=404, detail="Заказ не найден")
    logger.info("Заказ id=%s: статус %s (пользователь %s)", order.id, order.status.value, user.id)
    return _order_to_response(order)

"""Меню: блюда, которые есть в наличии."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_orders.core.database import get_db
from restaurant_orders.core.logging_config import get_logger
from restaurant_orders.schemas.dish import DishResponse
from restaurant_orders.services.dish_catalog import list_available

logger = get_logger(__name__)
router = APIRouter(prefix="/menu", tags=["menu"])


@router.get("", response_model=list[DishResponse])
async def get_menu(db: AsyncSession = Depends(get_db)):
    try:
        dishes = await list_available(db)
    except SQLAlchemyError:
        logger.exception("Ошибка чтения меню")
        raise HTTPException(status_code=500, detail="Не удалось получить меню")
    return [DishResponse.model_validate(d) for d in dishes]

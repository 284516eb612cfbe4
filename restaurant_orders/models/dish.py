"""Блюдо меню: цена и остаток порций."""
from decimal import Decimal
from typing import Optional
from sqlalchemy import String, Integer, Numeric, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from restaurant_orders.core.database import Base


class Dish(Base):
    __tablename__ = "dish"
    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_dish_quantity_non_negative"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # Остаток порций; уменьшается при создании заказа, возвращается при отмене.
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

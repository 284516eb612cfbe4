from decimal import Decimal
from typing import Optional
from pydantic import BaseModel


class DishResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    quantity: int

    class Config:
        from_attributes = True

# Стартовое меню: заполняет пустую таблицу dish при первом запуске (settings.seed_menu).
# Дальше остатки и цены ведутся в БД.

from decimal import Decimal

DEFAULT_MENU = [
    {"name": "Борщ", "description": "Со сметаной и чесночными пампушками", "price": Decimal("7.50"), "quantity": 20},
    {"name": "Пельмени", "description": "Домашние, с говядиной и свининой", "price": Decimal("9.99"), "quantity": 25},
    {"name": "Блины с творогом", "description": None, "price": Decimal("6.40"), "quantity": 15},
    {"name": "Салат оливье", "description": "Классический", "price": Decimal("5.90"), "quantity": 12},
    {"name": "Морс клюквенный", "description": "0,3 л", "price": Decimal("2.50"), "quantity": 40},
]

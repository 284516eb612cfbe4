"""Тесты сервисов заказа: меню, валидатор, запись и чтение, гонка за остаток."""
import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import func, select, update

from restaurant_orders.core.database import async_session_maker, utcnow
from restaurant_orders.core.errors import (
    DishUnavailableError,
    InvalidTransitionError,
    MalformedOrderError,
)
from restaurant_orders.models import Dish, Order, OrderLineItem, OrderStatus
from restaurant_orders.schemas.order import OrderCreate, OrderLineItemCreate
from restaurant_orders.services.dish_catalog import check_availability, list_available
from restaurant_orders.services.order_reader import get_order
from restaurant_orders.services.order_store import create_order, update_order_status
from restaurant_orders.services.order_validator import validate_order


def _order(user_id=5, lines=(), special_requests=None) -> OrderCreate:
    return OrderCreate(
        user_id=user_id,
        special_requests=special_requests,
        dishes=[OrderLineItemCreate(dish_id=d, quantity=q, price=p) for d, q, p in lines],
    )


async def _validate(data: OrderCreate):
    async with async_session_maker() as db:
        return await validate_order(db, data)


async def _place(data: OrderCreate) -> int:
    async with async_session_maker() as db:
        valid = await validate_order(db, data)
        return await create_order(db, valid)


async def _get(order_id: int):
    async with async_session_maker() as db:
        return await get_order(db, order_id)


async def _stock(dish_id: int) -> int:
    async with async_session_maker() as db:
        r = await db.execute(select(Dish.quantity).where(Dish.id == dish_id))
        return r.scalar_one()


async def _count(model) -> int:
    async with async_session_maker() as db:
        r = await db.execute(select(func.count()).select_from(model))
        return r.scalar_one()


def test_list_available_skips_sold_out(add_dish):
    """В меню только блюда с остатком > 0."""
    borscht = add_dish(name="Борщ", price="7.50", quantity=3)
    add_dish(name="Окрошка", price="6.00", quantity=0)

    async def _list():
        async with async_session_maker() as db:
            return await list_available(db)

    dishes = asyncio.run(_list())
    assert [d.id for d in dishes] == [borscht]
    assert all(d.quantity > 0 for d in dishes)


def test_check_availability(add_dish):
    dish_id = add_dish(quantity=2)

    async def _check(d, q):
        async with async_session_maker() as db:
            return await check_availability(db, d, q)

    assert asyncio.run(_check(dish_id, 2)) is not None
    assert asyncio.run(_check(dish_id, 3)) is None
    assert asyncio.run(_check(dish_id + 100, 1)) is None


def test_create_then_get_round_trip(add_dish):
    """Блюдо {9.99, 2 шт}; заказ на 2 шт → статус pending и одна позиция с теми же данными."""
    dish_id = add_dish(price="9.99", quantity=2)
    order_id = asyncio.run(_place(_order(lines=[(dish_id, 2, Decimal("9.99"))])))

    order = asyncio.run(_get(order_id))
    assert order is not None
    assert order.user_id == 5
    assert order.status == OrderStatus.PENDING
    assert len(order.dishes) == 1
    line = order.dishes[0]
    assert (line.dish_id, line.quantity, line.price) == (dish_id, 2, Decimal("9.99"))
    assert asyncio.run(_stock(dish_id)) == 0


def test_line_items_keep_order_and_caller_price(add_dish):
    soup = add_dish(name="Борщ", price="7.50", quantity=5)
    drink = add_dish(name="Морс", price="2.50", quantity=5)
    order_id = asyncio.run(
        _place(_order(lines=[(drink, 1, Decimal("2.00")), (soup, 2, Decimal("7.50"))], special_requests="без лука"))
    )

    order = asyncio.run(_get(order_id))
    assert order.special_requests == "без лука"
    assert [(d.dish_id, d.quantity, d.price) for d in order.dishes] == [
        (drink, 1, Decimal("2.00")),
        (soup, 2, Decimal("7.50")),
    ]


def test_missing_price_snapshots_menu_price(add_dish):
    dish_id = add_dish(price="6.40", quantity=4)
    valid = asyncio.run(_validate(_order(lines=[(dish_id, 1, None)])))
    assert valid.lines[0].price == Decimal("6.40")


def test_get_missing_order_returns_none():
    assert asyncio.run(_get(12345)) is None
    assert asyncio.run(_get(10**30)) is None
    assert asyncio.run(_get(0)) is None


def test_price_with_cents_and_no_trailing_digits_accepted(add_dish):
    dish_id = add_dish(quantity=4)
    valid = asyncio.run(_validate(_order(lines=[(dish_id, 1, Decimal("9.90")), (dish_id, 1, Decimal("12"))])))
    assert [line.price for line in valid.lines] == [Decimal("9.90"), Decimal("12")]


@pytest.mark.parametrize(
    "data",
    [
        OrderCreate(user_id=5, dishes=[]),
        OrderCreate(user_id=5),
        OrderCreate(dishes=[OrderLineItemCreate(dish_id=1, quantity=1)]),
        OrderCreate(user_id=0, dishes=[OrderLineItemCreate(dish_id=1, quantity=1)]),
        OrderCreate(user_id=5, dishes=[OrderLineItemCreate(dish_id=1, quantity=0)]),
        OrderCreate(user_id=5, dishes=[OrderLineItemCreate(quantity=1)]),
        OrderCreate(user_id=5, dishes=[OrderLineItemCreate(dish_id=1, quantity=1, price=Decimal("-1"))]),
        OrderCreate(user_id=5, dishes=[OrderLineItemCreate(dish_id=1, quantity=1, price=Decimal("9.995"))]),
        OrderCreate(user_id=5, dishes=[OrderLineItemCreate(dish_id=1, quantity=1, price=Decimal("100000000"))]),
        OrderCreate(user_id=5, dishes=[OrderLineItemCreate(dish_id=1, quantity=2**31)]),
        OrderCreate(user_id=2**63, dishes=[OrderLineItemCreate(dish_id=1, quantity=1)]),
        OrderCreate(user_id=5, dishes=[OrderLineItemCreate(dish_id=10**30, quantity=1)]),
    ],
)
def test_malformed_orders_rejected(add_dish, data):
    add_dish(quantity=10)
    with pytest.raises(MalformedOrderError):
        asyncio.run(_validate(data))


def test_quantity_above_stock_rejected_and_nothing_persisted(add_dish):
    dish_id = add_dish(price="9.99", quantity=2)
    with pytest.raises(DishUnavailableError) as exc:
        asyncio.run(_place(_order(lines=[(dish_id, 3, Decimal("9.99"))])))
    assert exc.value.dish_id == dish_id
    assert asyncio.run(_count(Order)) == 0
    assert asyncio.run(_count(OrderLineItem)) == 0
    assert asyncio.run(_stock(dish_id)) == 2


def test_first_unavailable_line_is_reported(add_dish):
    ok = add_dish(quantity=5)
    short = add_dish(name="Блины", quantity=1)
    with pytest.raises(DishUnavailableError) as exc:
        asyncio.run(_validate(_order(lines=[(ok, 1, None), (short, 2, None), (999, 1, None)])))
    assert exc.value.dish_id == short


def test_store_rolls_back_when_stock_runs_out_midway(add_dish):
    """Позиции проверены, но остаток исчез до записи: ни заголовка, ни позиций, остатки не тронуты."""
    first = add_dish(name="Борщ", quantity=5)
    second = add_dish(name="Блины", quantity=1)

    async def _scenario():
        async with async_session_maker() as db:
            valid = await validate_order(db, _order(lines=[(first, 2, None), (second, 1, None)]))
        # параллельный заказ забирает последние блины
        await _place(_order(user_id=7, lines=[(second, 1, None)]))
        async with async_session_maker() as db:
            await create_order(db, valid)

    with pytest.raises(DishUnavailableError):
        asyncio.run(_scenario())
    assert asyncio.run(_count(Order)) == 1
    assert asyncio.run(_stock(first)) == 5
    assert asyncio.run(_stock(second)) == 0


def test_concurrent_orders_cannot_oversell(add_dish):
    """Два заказа по 2 шт при остатке 3: проходит ровно один."""
    dish_id = add_dish(quantity=3)

    async def _try(user_id):
        try:
            await _place(_order(user_id=user_id, lines=[(dish_id, 2, Decimal("9.99"))]))
            return True
        except DishUnavailableError:
            return False

    async def _race():
        return await asyncio.gather(_try(1), _try(2))

    results = asyncio.run(_race())
    assert sorted(results) == [False, True]
    assert asyncio.run(_count(Order)) == 1
    assert asyncio.run(_stock(dish_id)) == 1


def test_status_cancel_returns_stock_and_advances_updated_at(add_dish):
    dish_id = add_dish(quantity=4)
    order_id = asyncio.run(_place(_order(lines=[(dish_id, 3, None)])))
    hour_ago = utcnow() - timedelta(hours=1)

    async def _backdate():
        # Заказ «создан» час назад: новое updated_at обязано быть позже.
        async with async_session_maker() as db:
            await db.execute(
                update(Order).where(Order.id == order_id).values(created_at=hour_ago, updated_at=hour_ago)
            )
            await db.commit()

    async def _cancel():
        async with async_session_maker() as db:
            return await update_order_status(db, order_id, OrderStatus.CANCELLED)

    asyncio.run(_backdate())
    assert asyncio.run(_get(order_id)).updated_at == hour_ago
    order = asyncio.run(_cancel())
    assert order.status == OrderStatus.CANCELLED
    assert order.updated_at > hour_ago + timedelta(minutes=30)
    assert order.created_at == hour_ago
    assert asyncio.run(_stock(dish_id)) == 4


def test_status_transition_rules(add_dish):
    dish_id = add_dish(quantity=4)
    order_id = asyncio.run(_place(_order(lines=[(dish_id, 1, None)])))

    async def _set(status):
        async with async_session_maker() as db:
            return await update_order_status(db, order_id, status)

    assert asyncio.run(_set(OrderStatus.FULFILLED)).status == OrderStatus.FULFILLED
    with pytest.raises(InvalidTransitionError):
        asyncio.run(_set(OrderStatus.CANCELLED))
    assert asyncio.run(_stock(dish_id)) == 3


def test_status_of_missing_order_is_none():
    async def _set():
        async with async_session_maker() as db:
            return await update_order_status(db, 999, OrderStatus.FULFILLED)

    assert asyncio.run(_set()) is None

import asyncio
import uuid

import pytest

from restaurant_pos.core.exceptions import InsufficientStockError, TransactionFailureError
from restaurant_pos.models import OrderStatus
from restaurant_pos.schemas import OrderCreate
from restaurant_pos.services.orders import OrderCoordinator
from restaurant_pos.services.stock import StockLedger


def cart(*lines, total=None, **customer) -> OrderCreate:
    items = [
        {"menuItemId": item.id, "name": item.name, "price": price, "quantity": qty}
        for item, qty, price in lines
    ]
    if total is None:
        total = sum(qty * price for _, qty, price in lines)
    return OrderCreate.model_validate({"items": items, "totalAmount": total, **customer})


async def test_place_order_confirms_and_draws_down_stock(session, make_menu_item, stock_of):
    nala = await make_menu_item("Nala", stock=5, price=100)
    lemonade = await make_menu_item("Lemonade", stock=3, price=50)
    untouched = await make_menu_item("Jazz", stock=4)

    order = await OrderCoordinator(session).place_order(
        cart((nala, 2, 100), (lemonade, 1, 50), total=250, customerName="Asha")
    )

    assert order.id
    assert order.status == OrderStatus.CONFIRMED
    assert order.payment_received is True
    assert order.assigned_to is None
    assert order.total_amount == 250
    assert order.customer_name == "Asha"
    assert len(order.items) == 2
    assert order.created_at is not None
    assert await stock_of(nala.id) == 3
    assert await stock_of(lemonade.id) == 2
    assert await stock_of(untouched.id) == 4


async def test_total_is_stored_verbatim(session, make_menu_item):
    nala = await make_menu_item("Nala", stock=5, price=100)

    order = await OrderCoordinator(session).place_order(cart((nala, 2, 100), total=123.45))

    assert order.total_amount == 123.45


async def test_items_are_snapshotted(session, make_menu_item):
    nala = await make_menu_item("Nala", stock=5, price=400)
    order_data = OrderCreate.model_validate({
        "items": [{
            "menuItemId": nala.id,
            "name": "Nala (cashier label)",
            "price": 400,
            "quantity": 1,
            "overriddenPrice": 350,
        }],
        "totalAmount": 350,
    })

    order = await OrderCoordinator(session).place_order(order_data)

    assert order.items == [{
        "menu_item_id": nala.id,
        "name": "Nala (cashier label)",
        "quantity": 1,
        "price_per_item": 400,
        "overridden_price_per_item": 350,
    }]


async def test_missing_cart_name_falls_back_to_menu_name(session, make_menu_item):
    nala = await make_menu_item("Nala", stock=5)
    order_data = OrderCreate.model_validate({
        "items": [{"menuItemId": nala.id, "price": 400, "quantity": 1}],
        "totalAmount": 400,
    })

    order = await OrderCoordinator(session).place_order(order_data)

    assert order.items[0]["name"] == "Nala"


async def test_insufficient_stock_names_item_and_available(session, make_menu_item, stock_of, order_count):
    item = await make_menu_item("Rafiki", stock=1, price=100)

    with pytest.raises(InsufficientStockError) as exc_info:
        await OrderCoordinator(session).place_order(cart((item, 2, 100)))

    assert exc_info.value.item_name == "Rafiki"
    assert exc_info.value.available == 1
    assert "Rafiki" in exc_info.value.message
    assert "Available: 1" in exc_info.value.message
    assert await stock_of(item.id) == 1
    assert await order_count() == 0


async def test_partial_failure_rolls_back_every_line(session, make_menu_item, stock_of, order_count):
    plenty = await make_menu_item("Jazz", stock=10, price=350)
    scarce = await make_menu_item("Lorry", stock=1, price=400)

    with pytest.raises(InsufficientStockError) as exc_info:
        await OrderCoordinator(session).place_order(cart((plenty, 3, 350), (scarce, 2, 400)))

    assert exc_info.value.item_name == "Lorry"
    assert await stock_of(plenty.id) == 10
    assert await stock_of(scarce.id) == 1
    assert await order_count() == 0


async def test_unknown_menu_item_reports_id(session, make_menu_item, order_count):
    missing = str(uuid.uuid4())
    order_data = OrderCreate.model_validate({
        "items": [{"menuItemId": missing, "price": 100, "quantity": 1}],
        "totalAmount": 100,
    })

    with pytest.raises(InsufficientStockError) as exc_info:
        await OrderCoordinator(session).place_order(order_data)

    assert exc_info.value.item_name == missing
    assert exc_info.value.available == 0
    assert await order_count() == 0


async def test_session_is_usable_after_a_failed_order(session, make_menu_item, stock_of):
    item = await make_menu_item("Nala", stock=1, price=100)
    coordinator = OrderCoordinator(session)

    with pytest.raises(InsufficientStockError):
        await coordinator.place_order(cart((item, 5, 100)))

    order = await coordinator.place_order(cart((item, 1, 100)))

    assert order.status == OrderStatus.CONFIRMED
    assert await stock_of(item.id) == 0


async def test_commit_failure_is_a_transaction_failure(session, make_menu_item, stock_of, monkeypatch):
    from sqlalchemy.exc import OperationalError

    item = await make_menu_item("Nala", stock=5, price=100)

    async def broken_flush(*args, **kwargs):
        raise OperationalError("INSERT INTO orders", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "flush", broken_flush)

    with pytest.raises(TransactionFailureError):
        await OrderCoordinator(session).place_order(cart((item, 2, 100)))

    assert await stock_of(item.id) == 5


async def test_concurrent_orders_never_oversell(database, make_menu_item, stock_of):
    item = await make_menu_item("Pastel de Nata", stock=5, price=50)

    async def attempt() -> bool:
        async with database.session() as s:
            try:
                await OrderCoordinator(s).place_order(cart((item, 1, 50)))
                return True
            except (InsufficientStockError, TransactionFailureError):
                return False

    outcomes = await asyncio.gather(*(attempt() for _ in range(8)))

    assert sum(outcomes) == 5
    assert await stock_of(item.id) == 0


async def test_decrements_run_in_menu_item_id_order(session, make_menu_item, monkeypatch):
    low, high = sorted(
        [await make_menu_item("Jazz", stock=5, price=350), await make_menu_item("Lorry", stock=5, price=400)],
        key=lambda item: item.id,
    )
    seen = []
    original = StockLedger.conditional_decrement

    async def recording_decrement(self, menu_item_id, quantity):
        seen.append(menu_item_id)
        return await original(self, menu_item_id, quantity)

    monkeypatch.setattr(StockLedger, "conditional_decrement", recording_decrement)

    order = await OrderCoordinator(session).place_order(cart((high, 1, high.price), (low, 2, low.price)))

    assert seen == [low.id, high.id]
    assert [line["menu_item_id"] for line in order.items] == [high.id, low.id]
    assert [line["quantity"] for line in order.items] == [1, 2]


async def test_first_short_line_in_cart_order_is_reported(session, make_menu_item):
    low, high = sorted(
        [await make_menu_item("Jazz", stock=1), await make_menu_item("Lorry", stock=1)],
        key=lambda item: item.id,
    )

    with pytest.raises(InsufficientStockError) as exc_info:
        await OrderCoordinator(session).place_order(cart((high, 3, 400), (low, 3, 400)))

    assert exc_info.value.item_name == high.name


async def test_menu_item_id_in_any_uuid_spelling(session, make_menu_item, stock_of):
    item = await make_menu_item("Nala", stock=5, price=400)
    order_data = OrderCreate.model_validate({
        "items": [
            {"menuItemId": item.id.upper(), "price": 400, "quantity": 1},
            {"menuItemId": item.id.replace("-", ""), "price": 400, "quantity": 1},
        ],
        "totalAmount": 800,
    })

    order = await OrderCoordinator(session).place_order(order_data)

    assert [line["menu_item_id"] for line in order.items] == [item.id, item.id]
    assert await stock_of(item.id) == 3

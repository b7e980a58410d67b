"""
Shared fixtures.

Every test gets its own SQLite database file, so tests never see each
other's menu items or orders.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx
import pytest
from sqlalchemy import func, select

from restaurant_pos.core.config import Settings
from restaurant_pos.database import Database
from restaurant_pos.main import create_app
from restaurant_pos.models import MenuItem, Order, OrderStatus, new_id


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}",
        _env_file=None,
    )


@pytest.fixture
async def database(settings):
    db = Database(settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database):
    async with database.session() as s:
        yield s


@pytest.fixture
async def client(settings, database):
    app = create_app(settings, database=database)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def make_menu_item(database):
    async def _make(name: str = "Nala", stock: int = 10, price: float = 400.0, category: str = "Sandwich") -> MenuItem:
        item = MenuItem(
            name=name,
            description=f"{name} description",
            price=price,
            category=category,
            vegetarian=False,
            images=[],
            allergens=[],
            ingredients=[],
            initial_stock=stock,
            current_stock=stock,
        )
        async with database.session() as s:
            s.add(item)
            await s.commit()
        return item
    return _make


def build_order(
    status: OrderStatus,
    created_at: Optional[datetime] = None,
    assigned_to: Optional[str] = None,
) -> Order:
    """An unsaved order with every column filled in."""
    created_at = created_at or datetime.now(timezone.utc)
    return Order(
        id=new_id(),
        customer_name="Asha",
        customer_phone=None,
        items=[{
            "menu_item_id": new_id(),
            "name": "Nala",
            "quantity": 1,
            "price_per_item": 400.0,
            "overridden_price_per_item": None,
        }],
        total_amount=400.0,
        status=status,
        assigned_to=assigned_to,
        payment_received=True,
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.fixture
def make_order(database):
    async def _make(
        status: OrderStatus = OrderStatus.CONFIRMED,
        minutes_ago: int = 0,
        assigned_to: Optional[str] = None,
    ) -> Order:
        created_at = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
        order = build_order(status, created_at, assigned_to)
        async with database.session() as s:
            s.add(order)
            await s.commit()
        return order
    return _make


@pytest.fixture
def stock_of(database):
    async def _stock(menu_item_id: str) -> int:
        async with database.session() as s:
            return await s.scalar(select(MenuItem.current_stock).where(MenuItem.id == menu_item_id))
    return _stock


@pytest.fixture
def order_count(database):
    async def _count() -> int:
        async with database.session() as s:
            return await s.scalar(select(func.count(Order.id)))
    return _count


@pytest.fixture
def fetch_order(database):
    async def _fetch(order_id: str) -> Optional[Order]:
        async with database.session() as s:
            return await s.get(Order, order_id)
    return _fetch


@pytest.fixture
def unsaved_order():
    return build_order

"""
SQLAlchemy Database Models

Two tables:
- menu_items: the menu with its stock counters
- orders: placed orders with their line items embedded as JSON
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    Integer,
    JSON,
    String,
    Text,
)

from restaurant_pos.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def canonical_id(value: Any) -> Optional[str]:
    """
    Normalize a record identifier to the stored form.

    Any spelling ``uuid.UUID`` accepts (uppercase, unhyphenated, braced,
    ``urn:uuid:``) maps to the lowercase hyphenated string the ids are
    stored as. Returns None if ``value`` is not a UUID at all.
    """
    if not isinstance(value, str):
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError:
        return None


def is_valid_id(value: Any) -> bool:
    """Check whether ``value`` is a well-formed record identifier (a UUID)."""
    return canonical_id(value) is not None


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    IN_PROGRESS = "InProgress"
    READY = "Ready"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]


class MenuItem(Base):
    """
    A dish or drink on the menu.

    ``current_stock`` is only ever changed through the stock ledger's
    conditional decrement; ``initial_stock`` records what was loaded.
    """
    __tablename__ = "menu_items"
    __table_args__ = (
        CheckConstraint("current_stock >= 0", name="ck_menu_items_current_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_menu_items_price_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=new_id)

    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    vegetarian = Column(Boolean, nullable=False, default=False)
    images = Column(JSON, nullable=False, default=list)
    allergens = Column(JSON, nullable=False, default=list)
    ingredients = Column(JSON, nullable=False, default=list)

    # Stock
    initial_stock = Column(Integer, nullable=False, default=0)
    current_stock = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<MenuItem {self.name} - stock {self.current_stock}/{self.initial_stock}>"


class Order(Base):
    """
    A placed order.

    ``items`` holds the line item snapshots taken at placement time:
    ``menu_item_id``, ``name``, ``quantity``, ``price_per_item`` and the
    optional ``overridden_price_per_item``. They are never re-synced with
    the menu.
    """
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_orders_total_amount_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=new_id)

    # Customer
    customer_name = Column(String(100), nullable=True)
    customer_phone = Column(String(20), nullable=True)

    # Order details
    items = Column(JSON, nullable=False)
    total_amount = Column(Float, nullable=False)

    # Workflow
    status = Column(
        Enum(
            OrderStatus,
            name="order_status",
            native_enum=False,
            create_constraint=True,
            validate_strings=True,
            values_callable=lambda statuses: [s.value for s in statuses],
            length=20,
        ),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True,
    )
    assigned_to = Column(String(100), nullable=True)
    payment_received = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Order #{self.id} - {self.customer_name} - {self.status.value}>"

"""
Kitchen View Projector

Read-only groupings of orders for the kitchen screens. The projections are
plain functions of the order set; the fetch helpers apply the same status
filter in SQL and hand the rows to them. Nothing is cached.
"""

from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_pos.models import Order, OrderStatus
from restaurant_pos.schemas import KitchenTicket, OrderResponse
from restaurant_pos.services.orders.state_machine import next_action


ACTIVE_STATUSES = (OrderStatus.CONFIRMED, OrderStatus.IN_PROGRESS)

# Pending is deliberately not fetched even though the first column names it
BOARD_STATUSES = (
    OrderStatus.CONFIRMED,
    OrderStatus.IN_PROGRESS,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
)


@dataclass(frozen=True)
class KanbanColumn:
    title: str
    statuses: tuple[OrderStatus, ...]


BOARD_COLUMNS = (
    KanbanColumn("Pending / Confirmed", (OrderStatus.PENDING, OrderStatus.CONFIRMED)),
    KanbanColumn("In Progress", (OrderStatus.IN_PROGRESS,)),
    KanbanColumn("Ready", (OrderStatus.READY,)),
    KanbanColumn("Delivered", (OrderStatus.DELIVERED,)),
)


@dataclass
class BoardColumn:
    column: KanbanColumn
    orders: list[Order] = field(default_factory=list)

    @property
    def title(self) -> str:
        return self.column.title


def _oldest_first(orders: Iterable[Order]) -> list[Order]:
    return sorted(orders, key=lambda order: order.created_at)


def active_list(orders: Iterable[Order]) -> list[Order]:
    """Confirmed and in-progress orders, oldest first."""
    return _oldest_first(o for o in orders if o.status in ACTIVE_STATUSES)


def kanban_board(orders: Iterable[Order]) -> list[BoardColumn]:
    """
    Partition board orders into the fixed columns, oldest first in each.

    Orders outside ``BOARD_STATUSES`` never reach the board; an order whose
    status matches no column is dropped.
    """
    board = [BoardColumn(column) for column in BOARD_COLUMNS]
    for order in _oldest_first(o for o in orders if o.status in BOARD_STATUSES):
        target = next((c for c in board if order.status in c.column.statuses), None)
        if target is not None:
            target.orders.append(order)
    return board


def to_ticket(order: Order) -> KitchenTicket:
    action = next_action(order.status)
    return KitchenTicket(
        order=OrderResponse.model_validate(order),
        next_status=action[0] if action else None,
        next_action=action[1] if action else None,
    )


async def _fetch_by_status(session: AsyncSession, statuses: tuple[OrderStatus, ...]) -> list[Order]:
    result = await session.execute(
        select(Order).where(Order.status.in_(statuses)).order_by(Order.created_at.asc())
    )
    return list(result.scalars().all())


async def fetch_active_orders(session: AsyncSession) -> list[Order]:
    return active_list(await _fetch_by_status(session, ACTIVE_STATUSES))


async def fetch_kanban_board(session: AsyncSession) -> list[BoardColumn]:
    return kanban_board(await _fetch_by_status(session, BOARD_STATUSES))

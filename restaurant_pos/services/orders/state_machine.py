"""
Order Status State Machine

Controlled mutation of an existing order's ``status`` and ``assigned_to``.

Workflow:
    Pending -> Confirmed -> InProgress -> Ready -> Delivered
    any status -> Cancelled | Refunded

By default any of the seven statuses may be written, and the kitchen
screens offer only the next step. With ``enforce_transitions`` the table
below is checked on every status write.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_pos.core.exceptions import (
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    OrderServiceError,
    TransactionFailureError,
)
from restaurant_pos.models import Order, OrderStatus, canonical_id, utcnow
from restaurant_pos.schemas import OrderUpdate

logger = logging.getLogger(__name__)


SIDE_EXITS = frozenset({OrderStatus.CANCELLED, OrderStatus.REFUNDED})

FORWARD_TRANSITIONS: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.IN_PROGRESS,
    OrderStatus.IN_PROGRESS: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.DELIVERED,
}

# Kitchen button for each status that has a next step
NEXT_ACTIONS: dict[OrderStatus, tuple[OrderStatus, str]] = {
    OrderStatus.CONFIRMED: (OrderStatus.IN_PROGRESS, "Start Cooking"),
    OrderStatus.IN_PROGRESS: (OrderStatus.READY, "Mark Ready"),
    OrderStatus.READY: (OrderStatus.DELIVERED, "Mark Delivered"),
}


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    """Whether the strict workflow allows moving ``current`` to ``requested``."""
    if current == requested or requested in SIDE_EXITS:
        return True
    return FORWARD_TRANSITIONS.get(current) == requested


def next_action(status: OrderStatus) -> Optional[tuple[OrderStatus, str]]:
    """The single forward action the kitchen may take, or None."""
    return NEXT_ACTIONS.get(status)


def ensure_order_id(order_id: str) -> str:
    """Return the order id in stored form, or raise if it is malformed."""
    canonical = canonical_id(order_id)
    if canonical is None:
        raise InvalidInputError("Invalid Order ID format")
    return canonical


class OrderStateMachine:
    """Reads and partially updates existing orders."""

    def __init__(self, session: AsyncSession, enforce_transitions: bool = False):
        self.session = session
        self.enforce_transitions = enforce_transitions

    async def get_order(self, order_id: str) -> Order:
        order_id = ensure_order_id(order_id)
        order = await self.session.get(Order, order_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    async def update_order(self, order_id: str, changes: OrderUpdate) -> Order:
        """
        Apply a partial status/assignee update.

        Args:
            order_id: Order identifier
            changes: Parsed update; omitted fields are left untouched

        Returns:
            Order: The updated order

        Raises:
            InvalidInputError: Malformed id or nothing to update
            InvalidTransitionError: Illegal status move (strict mode only)
            NotFoundError: No such order
        """
        order_id = ensure_order_id(order_id)
        if not changes.has_changes:
            raise InvalidInputError("No update fields provided (status or assignedTo).")

        applied: dict[str, Optional[str]] = {}
        try:
            order = await self.session.scalar(
                select(Order).where(Order.id == order_id).with_for_update()
            )
            if order is None:
                raise NotFoundError("Order not found")

            if changes.status is not None:
                if self.enforce_transitions and not can_transition(order.status, changes.status):
                    raise InvalidTransitionError(order.status.value, changes.status.value)
                order.status = changes.status
                applied["status"] = changes.status.value

            if changes.assigns:
                order.assigned_to = changes.assigned_to
                applied["assigned_to"] = changes.assigned_to

            order.updated_at = utcnow()
            await self.session.commit()

        except OrderServiceError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            logger.exception(f"Error updating order {order_id}: {e}")
            await self.session.rollback()
            raise TransactionFailureError("Failed to update order.") from e

        logger.info(f"Order {order_id} updated: {applied}")
        return order

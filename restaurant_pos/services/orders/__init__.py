"""
Order Services

Usage:
    from restaurant_pos.services.orders import OrderCoordinator, OrderStateMachine

    order = await OrderCoordinator(session).place_order(order_data)
    order = await OrderStateMachine(session).update_order(order.id, changes)
"""

from restaurant_pos.services.orders.coordinator import OrderCoordinator
from restaurant_pos.services.orders.state_machine import (
    FORWARD_TRANSITIONS,
    NEXT_ACTIONS,
    SIDE_EXITS,
    OrderStateMachine,
    can_transition,
    ensure_order_id,
    next_action,
)

__all__ = [
    "OrderCoordinator",
    "OrderStateMachine",
    "FORWARD_TRANSITIONS",
    "NEXT_ACTIONS",
    "SIDE_EXITS",
    "can_transition",
    "ensure_order_id",
    "next_action",
]

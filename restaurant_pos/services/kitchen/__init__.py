"""
Kitchen Views

Usage:
    from restaurant_pos.services.kitchen import fetch_active_orders, fetch_kanban_board

    orders = await fetch_active_orders(session)
    for column in await fetch_kanban_board(session):
        print(column.title, len(column.orders))
"""

from restaurant_pos.services.kitchen.projector import (
    ACTIVE_STATUSES,
    BOARD_COLUMNS,
    BOARD_STATUSES,
    BoardColumn,
    KanbanColumn,
    active_list,
    fetch_active_orders,
    fetch_kanban_board,
    kanban_board,
    to_ticket,
)

__all__ = [
    "ACTIVE_STATUSES",
    "BOARD_COLUMNS",
    "BOARD_STATUSES",
    "BoardColumn",
    "KanbanColumn",
    "active_list",
    "fetch_active_orders",
    "fetch_kanban_board",
    "kanban_board",
    "to_ticket",
]

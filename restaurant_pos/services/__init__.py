"""
                        Services Module

Business logic behind the HTTP routes.

Services:
    - stock: conditional stock decrements and the cashier menu
    - orders: order placement transaction and status state machine
    - kitchen: active list and kanban board projections
"""

from restaurant_pos.services.orders import OrderCoordinator, OrderStateMachine
from restaurant_pos.services.stock import StockLedger

__all__ = ["OrderCoordinator", "OrderStateMachine", "StockLedger"]

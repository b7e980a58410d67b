"""
Stock Service

Usage:
    from restaurant_pos.services.stock import StockLedger

    ledger = StockLedger(session)
    result = await ledger.conditional_decrement(menu_item_id, 2)
    if not result.success:
        print(result.display_name, result.available)
"""

from restaurant_pos.services.stock.ledger import DecrementResult, StockLedger, fetch_menu

__all__ = [
    "DecrementResult",
    "StockLedger",
    "fetch_menu",
]

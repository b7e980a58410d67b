"""
                Restaurant POS Order Service

Cashier order placement with live stock decrement and kitchen-facing
order views (active list and kanban board) driven by a status workflow.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"

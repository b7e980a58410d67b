"""
Stock Ledger

The only code path allowed to change ``MenuItem.current_stock``.

A decrement is a single conditional UPDATE: the row changes only if it
still holds at least the requested quantity. Two concurrent callers can
therefore never drive stock below zero, whatever order the database
applies them in.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_pos.models import MenuItem, utcnow

logger = logging.getLogger(__name__)


@dataclass
class DecrementResult:
    """
    Outcome of a conditional decrement.

    On failure the ledger has already looked up what was left, so the
    caller can report the item name and the quantity actually available
    without another round trip.

    Attributes:
        menu_item_id: Item the decrement targeted
        quantity: Quantity requested
        success: Whether stock was reserved
        item: Updated menu item (success only)
        item_name: Item name at failure time (None if the item does not exist)
        available: Stock at failure time
        found: False if no such menu item exists
    """
    menu_item_id: str
    quantity: int
    success: bool
    item: Optional[MenuItem] = None
    item_name: Optional[str] = None
    available: int = 0
    found: bool = True

    @property
    def display_name(self) -> str:
        return self.item_name or self.menu_item_id


class StockLedger:
    """Conditional stock decrements inside the caller's transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def conditional_decrement(self, menu_item_id: str, quantity: int) -> DecrementResult:
        """
        Reduce ``current_stock`` by ``quantity`` iff enough is left.

        Args:
            menu_item_id: Menu item to draw from
            quantity: Units to reserve (must be positive)

        Returns:
            DecrementResult: success with the updated item, or failure with
            the name and stock level observed inside the same transaction
        """
        if quantity <= 0:
            raise ValueError("quantity must be positive")

        stmt = (
            update(MenuItem)
            .where(MenuItem.id == menu_item_id, MenuItem.current_stock >= quantity)
            .values(current_stock=MenuItem.current_stock - quantity, updated_at=utcnow())
            .returning(MenuItem)
        )
        result = await self.session.scalars(
            stmt, execution_options={"synchronize_session": "fetch"}
        )
        item = result.one_or_none()

        if item is not None:
            logger.debug(f"Reserved {quantity} x {item.name} ({item.current_stock} left)")
            return DecrementResult(
                menu_item_id=menu_item_id,
                quantity=quantity,
                success=True,
                item=item,
                item_name=item.name,
                available=item.current_stock,
            )

        row = (
            await self.session.execute(
                select(MenuItem.name, MenuItem.current_stock).where(MenuItem.id == menu_item_id)
            )
        ).one_or_none()

        if row is None:
            logger.warning(f"Stock decrement for unknown menu item {menu_item_id}")
            return DecrementResult(
                menu_item_id=menu_item_id,
                quantity=quantity,
                success=False,
                found=False,
            )

        logger.warning(
            f"Insufficient stock for {row.name}: requested {quantity}, available {row.current_stock}"
        )
        return DecrementResult(
            menu_item_id=menu_item_id,
            quantity=quantity,
            success=False,
            item_name=row.name,
            available=row.current_stock,
        )

    async def get_stock(self, menu_item_id: str) -> Optional[int]:
        """Current stock of one item, or None if it does not exist."""
        return await self.session.scalar(
            select(MenuItem.current_stock).where(MenuItem.id == menu_item_id)
        )


async def fetch_menu(session: AsyncSession) -> list[MenuItem]:
    """All menu items, grouped by category then name, as the cashier sees them."""
    result = await session.execute(
        select(MenuItem).order_by(MenuItem.category.asc(), MenuItem.name.asc())
    )
    return list(result.scalars().all())

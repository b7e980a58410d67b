"""
Order Transaction Coordinator

Turns a submitted cart into a persisted order. Stock reservation for every
line item and the order insert share one database transaction: either the
order exists and every item was drawn down, or nothing changed at all.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from restaurant_pos.core.exceptions import (
    InsufficientStockError,
    OrderServiceError,
    TransactionFailureError,
)
from restaurant_pos.models import Order, OrderStatus
from restaurant_pos.schemas import CartItem, OrderCreate
from restaurant_pos.services.stock import DecrementResult, StockLedger

logger = logging.getLogger(__name__)


class OrderCoordinator:
    """
    Places orders against live stock.

    Example:
        >>> coordinator = OrderCoordinator(session)
        >>> order = await coordinator.place_order(OrderCreate(**payload))
        >>> order.status
        <OrderStatus.CONFIRMED: 'Confirmed'>
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.ledger = StockLedger(session)

    async def place_order(self, order_data: OrderCreate) -> Order:
        """
        Reserve stock for every cart line and save the order, atomically.

        Args:
            order_data: Validated cart, customer details and caller-computed total

        Returns:
            Order: The committed order, status ``Confirmed``

        Raises:
            InsufficientStockError: Some line could not be reserved
            TransactionFailureError: The database refused the write or commit
        """
        transaction = await self.session.begin()
        logger.info("Transaction started")

        try:
            results = await self._reserve_stock(order_data.items)

            failed = next((r for r in results if not r.success), None)
            if failed is not None:
                raise InsufficientStockError(failed.display_name, failed.available)
            logger.info(f"Stock updated for {len(results)} line item(s)")

            order = Order(
                customer_name=order_data.customer_name,
                customer_phone=order_data.customer_phone,
                items=[
                    self._snapshot(cart_item, result)
                    for cart_item, result in zip(order_data.items, results)
                ],
                total_amount=order_data.total_amount,
                status=OrderStatus.CONFIRMED,
                payment_received=True,
                assigned_to=None,
            )
            self.session.add(order)
            await self.session.flush()

            await transaction.commit()
            logger.info(f"Transaction committed, order {order.id} saved")
            return order

        except OrderServiceError as e:
            logger.warning(f"Order rejected: {e.message}")
            await self._abort(transaction)
            raise
        except SQLAlchemyError as e:
            logger.exception(f"Database error while placing order: {e}")
            await self._abort(transaction)
            raise TransactionFailureError("Failed to save the order.") from e
        except Exception:
            logger.exception("Unexpected error while placing order")
            await self._abort(transaction)
            raise

    async def _reserve_stock(self, items: list[CartItem]) -> list[DecrementResult]:
        # Every line is attempted, even after a failure, so the whole cart is
        # evaluated before the verdict. Rows are locked in menu_item_id order
        # so two carts naming the same items cannot deadlock; results come
        # back in cart order.
        results: list[Optional[DecrementResult]] = [None] * len(items)
        for position in sorted(range(len(items)), key=lambda i: items[i].menu_item_id):
            cart_item = items[position]
            results[position] = await self.ledger.conditional_decrement(
                cart_item.menu_item_id, cart_item.quantity
            )
        return results

    @staticmethod
    def _snapshot(cart_item: CartItem, result: DecrementResult) -> dict:
        return {
            "menu_item_id": cart_item.menu_item_id,
            "name": cart_item.name or result.item_name,
            "quantity": cart_item.quantity,
            "price_per_item": cart_item.price,
            "overridden_price_per_item": cart_item.overridden_price,
        }

    @staticmethod
    async def _abort(transaction: Optional[AsyncSessionTransaction]) -> None:
        """Roll back; a failed rollback is logged and swallowed."""
        if transaction is None or not transaction.is_active:
            return
        try:
            await transaction.rollback()
            logger.info("Transaction aborted")
        except Exception as e:
            logger.exception(f"Error aborting transaction: {e}")

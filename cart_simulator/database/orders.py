"""Order storage for the cart simulator"""

import logging
from typing import Optional

from pydantic import ValidationError

from ..models.checkout import Order
from .storage import JsonFileStore, StorageError

logger = logging.getLogger(__name__)


class OrderDatabase:
    """Placed orders, persisted to a JSON file"""

    def __init__(self, store: JsonFileStore):
        self.store = store
        self.orders: dict[str, Order] = {}

    def load(self) -> None:
        records = self.store.load()
        self.orders.clear()

        if records is None:
            return

        for record in records:
            try:
                order = Order.model_validate(record)
            except ValidationError as e:
                raise StorageError(f"Invalid order record in {self.store.path}: {e}") from e
            self.orders[order.order_id] = order

        logger.info(f"Loaded {len(self.orders)} orders")

    def save(self) -> None:
        self.store.save([o.model_dump(mode="json") for o in self.orders.values()])

    def add_order(self, order: Order) -> Order:
        """Store a placed order"""
        self.orders[order.order_id] = order
        self.save()
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order by ID"""
        return self.orders.get(order_id)

    def get_orders_by_user(self, user_id: str) -> list[Order]:
        return [o for o in self.orders.values() if o.user_id == user_id]

    def list_orders(self, limit: int = 50) -> list[Order]:
        """List recent orders"""
        orders = list(self.orders.values())
        orders.sort(key=lambda o: o.processed_at, reverse=True)
        return orders[:limit]

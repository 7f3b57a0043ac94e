"""
Memory implementation of OrderRepository.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from shop.domain import Order, OrderId, OrderStatus, UserId
from shop.repositories import OrderRepository
from .base import MemoryRepositoryMixin

logger = logging.getLogger(__name__)


class MemoryOrderRepository(OrderRepository, MemoryRepositoryMixin[Order]):
    """
    Memory implementation of OrderRepository using a dictionary keyed by
    order ID. Filtered lookups scan the dictionary in insertion order.
    """

    def __init__(self) -> None:
        self.logger = logger
        self.entity_name = "Order"
        self.storage_dict: Dict[str, Order] = {}
        self.lock = asyncio.Lock()

        logger.debug("Initializing MemoryOrderRepository")

    async def find_by_id(self, order_id: OrderId) -> Optional[Order]:
        return self.get_entity(order_id.value)

    async def save(self, order: Order) -> Order:
        async with self.lock:
            return self.save_entity(order.id.value, order)

    async def find_by_user_id(self, user_id: UserId) -> List[Order]:
        return [o for o in self.list_entities() if o.user_id == user_id]

    async def find_by_status(self, status: OrderStatus) -> List[Order]:
        return [o for o in self.list_entities() if o.status == status]

    async def find_all(self) -> List[Order]:
        return self.list_entities()

    async def delete(self, order_id: OrderId) -> bool:
        async with self.lock:
            return self.delete_entity(order_id.value)

    def _add_entity_specific_log_data(
        self, entity: Order, log_data: Dict[str, Any]
    ) -> None:
        log_data["status"] = entity.status.value
        log_data["user_id"] = entity.user_id.value

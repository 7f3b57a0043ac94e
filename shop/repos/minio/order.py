"""
Minio implementation of OrderRepository.

Orders are stored as JSON objects named by order ID in the ``orders``
bucket, with the owning user and current status copied into the object
metadata. Filtered lookups load the bucket and filter in process.
"""

import logging
from typing import List, Optional

from shop.domain import Order, OrderId, OrderStatus, UserId
from shop.repositories import OrderRepository
from .client import MinioClient, MinioRepositoryMixin


class MinioOrderRepository(OrderRepository, MinioRepositoryMixin):
    def __init__(self, client: MinioClient, bucket_name: str = "orders"):
        self.client = client
        self.logger = logging.getLogger("MinioOrderRepository")
        self.bucket_name = bucket_name
        self.ensure_buckets_exist([self.bucket_name])

    async def find_by_id(self, order_id: OrderId) -> Optional[Order]:
        return self.get_json_object(self.bucket_name, order_id.value, Order)

    async def save(self, order: Order) -> Order:
        self.logger.debug(
            "MinioOrderRepository: Attempting to save order state",
            extra={
                "order_id": order.id.value,
                "status": order.status.value,
                "target_bucket": self.bucket_name,
            },
        )
        self.put_json_object(
            self.bucket_name,
            order.id.value,
            order,
            metadata={
                "user_id": order.user_id.value,
                "status": order.status.value,
            },
        )
        self.logger.info(
            "MinioOrderRepository: Order state persisted",
            extra={
                "order_id": order.id.value,
                "status": order.status.value,
                "bucket": self.bucket_name,
            },
        )
        return order

    async def find_by_user_id(self, user_id: UserId) -> List[Order]:
        return [o for o in await self.find_all() if o.user_id == user_id]

    async def find_by_status(self, status: OrderStatus) -> List[Order]:
        return [o for o in await self.find_all() if o.status == status]

    async def find_all(self) -> List[Order]:
        return sorted(
            self.list_json_objects(self.bucket_name, Order),
            key=lambda o: (o.created_at, o.id.value),
        )

    async def delete(self, order_id: OrderId) -> bool:
        if await self.find_by_id(order_id) is None:
            return False
        self.remove(self.bucket_name, order_id.value)
        self.logger.info(
            "MinioOrderRepository: Order deleted",
            extra={"order_id": order_id.value},
        )
        return True

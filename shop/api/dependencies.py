"""
Dependency injection for FastAPI endpoints.

Configuration comes from environment variables:

- ``SHOP_STORAGE_BACKEND``: ``memory`` (default) or ``minio``
- ``MINIO_ENDPOINT``, ``MINIO_ACCESS_KEY``, ``MINIO_SECRET_KEY``,
  ``MINIO_SECURE``: MinIO connection settings for the ``minio`` backend
- ``SHOP_EVENT_PUBLISHER``: ``memory`` (default) or ``log``
"""

import logging
import os
from typing import Any, Awaitable, Callable, Dict

from fastapi import Depends

from shop.repos.log import LoggingEventPublisher
from shop.repos.memory import (
    MemoryEventPublisher,
    MemoryOrderRepository,
    MemoryUserRepository,
)
from shop.repos.minio import (
    MinioClient,
    MinioOrderRepository,
    MinioUserRepository,
    create_minio_client,
)
from shop.repositories import EventPublisher, OrderRepository, UserRepository
from shop.usecase import OrderService, UserService
from shop.validation import (
    ensure_event_publisher,
    ensure_order_repository,
    ensure_user_repository,
)

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("memory", "minio")
EVENT_PUBLISHERS = ("memory", "log")


def _get_storage_backend() -> str:
    backend = os.environ.get("SHOP_STORAGE_BACKEND", "memory").lower()
    if backend not in STORAGE_BACKENDS:
        raise ValueError(
            f"Unsupported SHOP_STORAGE_BACKEND {backend!r}, "
            f"expected one of {', '.join(STORAGE_BACKENDS)}"
        )
    return backend


def _get_event_publisher_kind() -> str:
    kind = os.environ.get("SHOP_EVENT_PUBLISHER", "memory").lower()
    if kind not in EVENT_PUBLISHERS:
        raise ValueError(
            f"Unsupported SHOP_EVENT_PUBLISHER {kind!r}, "
            f"expected one of {', '.join(EVENT_PUBLISHERS)}"
        )
    return kind


def _get_minio_endpoint() -> str:
    """Helper to get Minio endpoint with a default for host-side runs."""
    return os.environ.get("MINIO_ENDPOINT", "localhost:9000")


class DependencyContainer:
    """
    Dependency injection container with singleton lifecycle management.
    Always creates real collaborators; tests use dependency overrides or
    call ``reset()``.
    """

    def __init__(self) -> None:
        self._instances: Dict[str, Any] = {}

    async def get_or_create(
        self, key: str, factory: Callable[[], Awaitable[Any]]
    ) -> Any:
        """Get or create a singleton instance."""
        if key not in self._instances:
            self._instances[key] = await factory()
        return self._instances[key]

    def reset(self) -> None:
        self._instances.clear()

    async def get_minio_client(self) -> MinioClient:
        client = await self.get_or_create(
            "minio_client", self._create_minio_client
        )
        return client  # type: ignore[no-any-return]

    async def _create_minio_client(self) -> MinioClient:
        endpoint = _get_minio_endpoint()
        secure = os.environ.get("MINIO_SECURE", "false").lower() == "true"
        logger.debug(
            "Creating Minio client",
            extra={"minio_endpoint": endpoint, "secure": secure},
        )
        return create_minio_client(
            endpoint,
            access_key=os.environ.get("MINIO_ACCESS_KEY", "minioadmin"),
            secret_key=os.environ.get("MINIO_SECRET_KEY", "minioadmin"),
            secure=secure,
        )

    async def get_user_repository(self) -> UserRepository:
        repo = await self.get_or_create(
            "user_repository", self._create_user_repository
        )
        return repo  # type: ignore[no-any-return]

    async def _create_user_repository(self) -> UserRepository:
        backend = _get_storage_backend()
        logger.info(
            "Creating user repository", extra={"storage_backend": backend}
        )
        if backend == "minio":
            return ensure_user_repository(
                MinioUserRepository(await self.get_minio_client())
            )
        return ensure_user_repository(MemoryUserRepository())

    async def get_order_repository(self) -> OrderRepository:
        repo = await self.get_or_create(
            "order_repository", self._create_order_repository
        )
        return repo  # type: ignore[no-any-return]

    async def _create_order_repository(self) -> OrderRepository:
        backend = _get_storage_backend()
        logger.info(
            "Creating order repository", extra={"storage_backend": backend}
        )
        if backend == "minio":
            return ensure_order_repository(
                MinioOrderRepository(await self.get_minio_client())
            )
        return ensure_order_repository(MemoryOrderRepository())

    async def get_event_publisher(self) -> EventPublisher:
        publisher = await self.get_or_create(
            "event_publisher", self._create_event_publisher
        )
        return publisher  # type: ignore[no-any-return]

    async def _create_event_publisher(self) -> EventPublisher:
        kind = _get_event_publisher_kind()
        logger.info("Creating event publisher", extra={"publisher": kind})
        if kind == "log":
            return ensure_event_publisher(LoggingEventPublisher())
        return ensure_event_publisher(MemoryEventPublisher())


# Global container instance
_container = DependencyContainer()


async def get_user_repository() -> UserRepository:
    """FastAPI dependency for the configured UserRepository."""
    return await _container.get_user_repository()


async def get_order_repository() -> OrderRepository:
    """FastAPI dependency for the configured OrderRepository."""
    return await _container.get_order_repository()


async def get_event_publisher() -> EventPublisher:
    """FastAPI dependency for the configured EventPublisher."""
    return await _container.get_event_publisher()


async def get_user_service(
    user_repo: UserRepository = Depends(get_user_repository),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> UserService:
    """FastAPI dependency for UserService."""
    return UserService(user_repo=user_repo, event_publisher=event_publisher)


async def get_order_service(
    order_repo: OrderRepository = Depends(get_order_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> OrderService:
    """FastAPI dependency for OrderService."""
    return OrderService(
        order_repo=order_repo,
        user_repo=user_repo,
        event_publisher=event_publisher,
    )

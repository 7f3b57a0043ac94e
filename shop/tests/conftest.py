import pytest

from shop.repos.memory import (
    MemoryEventPublisher,
    MemoryOrderRepository,
    MemoryUserRepository,
)
from shop.usecase import OrderService, UserService


@pytest.fixture
def user_repo() -> MemoryUserRepository:
    return MemoryUserRepository()


@pytest.fixture
def order_repo() -> MemoryOrderRepository:
    return MemoryOrderRepository()


@pytest.fixture
def publisher() -> MemoryEventPublisher:
    return MemoryEventPublisher()


@pytest.fixture
def user_service(
    user_repo: MemoryUserRepository, publisher: MemoryEventPublisher
) -> UserService:
    return UserService(user_repo, publisher)


@pytest.fixture
def order_service(
    order_repo: MemoryOrderRepository,
    user_repo: MemoryUserRepository,
    publisher: MemoryEventPublisher,
) -> OrderService:
    return OrderService(order_repo, user_repo, publisher)

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from shop.api.app import app
from shop.api.dependencies import (
    get_event_publisher,
    get_order_repository,
    get_user_repository,
)
from shop.repos.memory import (
    MemoryEventPublisher,
    MemoryOrderRepository,
    MemoryUserRepository,
)


@pytest.fixture
def client(
    user_repo: MemoryUserRepository,
    order_repo: MemoryOrderRepository,
    publisher: MemoryEventPublisher,
) -> Generator[TestClient, None, None]:
    """Test client wired to fresh memory repositories."""
    app.dependency_overrides[get_user_repository] = lambda: user_repo
    app.dependency_overrides[get_order_repository] = lambda: order_repo
    app.dependency_overrides[get_event_publisher] = lambda: publisher

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def create_user(client: TestClient, email: str = "ada@example.com") -> dict:
    response = client.post(
        "/users",
        json={"email": email, "first_name": "Ada", "last_name": "Lovelace"},
    )
    assert response.status_code == 201
    return response.json()

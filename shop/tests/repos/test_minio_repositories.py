"""
Tests for the Minio repository implementations, run against the in-memory
fake client so no MinIO server is needed.
"""

from datetime import timedelta

import pytest
from minio.error import S3Error

from shop.domain import Email, OrderId, OrderStatus, UserId
from shop.repos.minio import (
    MinioClient,
    MinioOrderRepository,
    MinioUserRepository,
)
from shop.repositories import DuplicateEmailError

from ..factories import OrderFactory, UserFactory
from .fake_minio_client import FakeMinioClient


@pytest.fixture
def fake_client() -> FakeMinioClient:
    """Create a fresh fake Minio client for each test."""
    return FakeMinioClient()


@pytest.fixture
def user_repo(fake_client: FakeMinioClient) -> MinioUserRepository:
    return MinioUserRepository(fake_client)


@pytest.fixture
def order_repo(fake_client: FakeMinioClient) -> MinioOrderRepository:
    return MinioOrderRepository(fake_client)


def test_fake_client_satisfies_protocol(fake_client):
    assert isinstance(fake_client, MinioClient)


def test_buckets_are_created_once(fake_client):
    MinioUserRepository(fake_client)
    MinioOrderRepository(fake_client)
    MinioUserRepository(fake_client)

    assert set(fake_client.buckets) == {"users", "user-emails", "orders"}


class TestMinioUserRepository:
    @pytest.mark.asyncio
    async def test_save_and_find(self, user_repo, fake_client):
        user = UserFactory.build()

        await user_repo.save(user)

        assert await user_repo.find_by_id(user.id) == user
        assert await user_repo.find_by_email(user.email) == user
        stored = fake_client.buckets["users"][user.id.value]
        assert stored.metadata == {"email": user.email.value}
        assert all(r.closed and r.released for r in fake_client.responses)

    @pytest.mark.asyncio
    async def test_missing_user_returns_none(self, user_repo):
        assert await user_repo.find_by_id(UserId(value="missing")) is None
        assert (
            await user_repo.find_by_email(Email(value="no@example.com"))
            is None
        )

    @pytest.mark.asyncio
    async def test_duplicate_email_is_rejected(self, user_repo):
        email = Email(value="ada@example.com")
        first = await user_repo.save(UserFactory.build(email=email))

        with pytest.raises(DuplicateEmailError):
            await user_repo.save(UserFactory.build(email=email))

        assert await user_repo.count() == 1
        assert await user_repo.find_by_email(email) == first

    @pytest.mark.asyncio
    async def test_resave_same_user_is_allowed(self, user_repo):
        user = await user_repo.save(UserFactory.build())
        updated = user.update_profile("Augusta", "King")

        await user_repo.save(updated)

        assert await user_repo.count() == 1
        assert await user_repo.find_by_id(user.id) == updated

    @pytest.mark.asyncio
    async def test_email_change_moves_index_entry(self, user_repo, fake_client):
        user = await user_repo.save(
            UserFactory.build(email=Email(value="old@example.com"))
        )
        moved = user.model_copy(
            update={"email": Email(value="new@example.com")}
        )

        await user_repo.save(moved)

        assert set(fake_client.buckets["user-emails"]) == {"new@example.com"}

    @pytest.mark.asyncio
    async def test_delete(self, user_repo, fake_client):
        user = await user_repo.save(UserFactory.build())

        assert await user_repo.delete(user.id) is True
        assert await user_repo.delete(user.id) is False
        assert fake_client.buckets["users"] == {}
        assert fake_client.buckets["user-emails"] == {}

    @pytest.mark.asyncio
    async def test_find_all_orders_by_creation_time(self, user_repo):
        base = UserFactory.build().created_at
        users = [
            UserFactory.build(
                created_at=base + timedelta(seconds=i),
                updated_at=base + timedelta(seconds=i),
            )
            for i in range(25)
        ]
        for user in reversed(users):
            await user_repo.save(user)

        pages = [await user_repo.find_all(page, 10) for page in range(3)]

        assert [len(p) for p in pages] == [10, 10, 5]
        assert [u for p in pages for u in p] == users
        assert await user_repo.count() == 25

    @pytest.mark.asyncio
    async def test_failed_index_write_stores_nothing(
        self, user_repo, fake_client
    ):
        email = Email(value="ada@example.com")
        fake_client.failing_put_buckets["user-emails"] = "InternalError"

        with pytest.raises(S3Error):
            await user_repo.save(UserFactory.build(email=email))

        assert fake_client.buckets["users"] == {}

        del fake_client.failing_put_buckets["user-emails"]
        second = await user_repo.save(UserFactory.build(email=email))
        with pytest.raises(DuplicateEmailError):
            await user_repo.save(UserFactory.build(email=email))

        assert await user_repo.count() == 1
        assert await user_repo.find_by_email(email) == second

    @pytest.mark.asyncio
    async def test_failed_user_write_releases_new_email_claim(
        self, user_repo, fake_client
    ):
        email = Email(value="ada@example.com")
        fake_client.failing_put_buckets["users"] = "InternalError"

        with pytest.raises(S3Error):
            await user_repo.save(UserFactory.build(email=email))

        assert fake_client.buckets["user-emails"] == {}
        del fake_client.failing_put_buckets["users"]
        stored = await user_repo.save(UserFactory.build(email=email))
        assert await user_repo.find_by_email(email) == stored

    @pytest.mark.asyncio
    async def test_failed_resave_keeps_existing_email_claim(
        self, user_repo, fake_client
    ):
        user = await user_repo.save(UserFactory.build())
        fake_client.failing_put_buckets["users"] = "InternalError"

        with pytest.raises(S3Error):
            await user_repo.save(user.update_profile("Augusta", "King"))

        del fake_client.failing_put_buckets["users"]
        assert await user_repo.find_by_email(user.email) == user
        with pytest.raises(DuplicateEmailError):
            await user_repo.save(UserFactory.build(email=user.email))

    @pytest.mark.asyncio
    async def test_storage_errors_propagate(self, user_repo, fake_client):
        fake_client.fail_next_get = "AccessDenied"

        with pytest.raises(S3Error):
            await user_repo.find_by_id(UserId(value="u-1"))


class TestMinioOrderRepository:
    @pytest.mark.asyncio
    async def test_save_and_find(self, order_repo, fake_client):
        order = OrderFactory.build()

        await order_repo.save(order)

        found = await order_repo.find_by_id(order.id)
        assert found == order
        assert found.total_amount == order.total_amount
        assert fake_client.buckets["orders"][order.id.value].metadata == {
            "user_id": order.user_id.value,
            "status": "PENDING",
        }

    @pytest.mark.asyncio
    async def test_status_change_is_persisted(self, order_repo, fake_client):
        order = await order_repo.save(OrderFactory.build())

        await order_repo.save(order.update_status(OrderStatus.CONFIRMED))

        found = await order_repo.find_by_id(order.id)
        assert found.status is OrderStatus.CONFIRMED
        metadata = fake_client.buckets["orders"][order.id.value].metadata
        assert metadata["status"] == "CONFIRMED"

    @pytest.mark.asyncio
    async def test_filters_and_ordering(self, order_repo):
        base = OrderFactory.build().created_at
        user_id = UserId.generate()
        first = OrderFactory.build(
            user_id=user_id, created_at=base, updated_at=base
        )
        second = OrderFactory.build(
            status=OrderStatus.SHIPPED,
            created_at=base + timedelta(minutes=1),
            updated_at=base + timedelta(minutes=1),
        )
        third = OrderFactory.build(
            user_id=user_id,
            created_at=base + timedelta(minutes=2),
            updated_at=base + timedelta(minutes=2),
        )
        for order in (third, first, second):
            await order_repo.save(order)

        assert await order_repo.find_all() == [first, second, third]
        assert await order_repo.find_by_user_id(user_id) == [first, third]
        assert await order_repo.find_by_status(OrderStatus.SHIPPED) == [second]

    @pytest.mark.asyncio
    async def test_delete(self, order_repo):
        order = await order_repo.save(OrderFactory.build())

        assert await order_repo.delete(order.id) is True
        assert await order_repo.delete(order.id) is False
        assert await order_repo.find_by_id(OrderId(value="missing")) is None

"""Tests for the memory repository and publisher implementations."""

import asyncio

import pytest

from shop.domain import Email, OrderId, OrderStatus, UserId
from shop.events import UserCreated
from shop.repos.memory import (
    MemoryEventPublisher,
    MemoryOrderRepository,
    MemoryUserRepository,
)
from shop.repositories import DuplicateEmailError

from ..factories import OrderFactory, UserFactory


class TestMemoryUserRepository:
    @pytest.mark.asyncio
    async def test_save_and_find(self):
        repo = MemoryUserRepository()
        user = UserFactory.build()

        saved = await repo.save(user)

        assert saved == user
        assert await repo.find_by_id(user.id) == user
        assert await repo.find_by_email(user.email) == user
        assert await repo.count() == 1

    @pytest.mark.asyncio
    async def test_missing_user_returns_none(self):
        repo = MemoryUserRepository()
        assert await repo.find_by_id(UserId(value="missing")) is None
        assert (
            await repo.find_by_email(Email(value="missing@example.com"))
            is None
        )

    @pytest.mark.asyncio
    async def test_save_replaces_by_id(self):
        repo = MemoryUserRepository()
        user = await repo.save(UserFactory.build(first_name="Ada"))

        await repo.save(user.update_profile("Augusta", user.last_name))

        assert await repo.count() == 1
        found = await repo.find_by_id(user.id)
        assert found is not None
        assert found.first_name == "Augusta"

    @pytest.mark.asyncio
    async def test_duplicate_email_is_rejected(self):
        repo = MemoryUserRepository()
        email = Email(value="ada@example.com")
        await repo.save(UserFactory.build(email=email))

        with pytest.raises(DuplicateEmailError, match="ada@example.com"):
            await repo.save(UserFactory.build(email=email))

        assert await repo.count() == 1

    @pytest.mark.asyncio
    async def test_concurrent_saves_with_same_email_admit_one(self):
        repo = MemoryUserRepository()
        email = Email(value="ada@example.com")
        users = [UserFactory.build(email=email) for _ in range(5)]

        results = await asyncio.gather(
            *(repo.save(u) for u in users), return_exceptions=True
        )

        failures = [r for r in results if isinstance(r, DuplicateEmailError)]
        assert len(failures) == 4
        assert await repo.count() == 1

    @pytest.mark.asyncio
    async def test_email_change_releases_old_email(self):
        repo = MemoryUserRepository()
        user = await repo.save(
            UserFactory.build(email=Email(value="old@example.com"))
        )
        moved = user.model_copy(
            update={"email": Email(value="new@example.com")}
        )

        await repo.save(moved)

        assert await repo.find_by_email(Email(value="old@example.com")) is None
        assert (
            await repo.find_by_email(Email(value="new@example.com"))
        ) == moved

    @pytest.mark.asyncio
    async def test_delete(self):
        repo = MemoryUserRepository()
        user = await repo.save(UserFactory.build())

        assert await repo.delete(user.id) is True
        assert await repo.delete(user.id) is False
        assert await repo.find_by_email(user.email) is None
        assert await repo.count() == 0

    @pytest.mark.asyncio
    async def test_find_all_pages_in_insertion_order(self):
        repo = MemoryUserRepository()
        users = [await repo.save(UserFactory.build()) for _ in range(25)]

        pages = [await repo.find_all(page, 10) for page in range(4)]

        assert [len(p) for p in pages] == [10, 10, 5, 0]
        assert [u for p in pages for u in p] == users


class TestMemoryOrderRepository:
    @pytest.mark.asyncio
    async def test_save_find_and_delete(self):
        repo = MemoryOrderRepository()
        order = await repo.save(OrderFactory.build())

        assert await repo.find_by_id(order.id) == order
        assert await repo.find_by_id(OrderId(value="missing")) is None
        assert await repo.delete(order.id) is True
        assert await repo.delete(order.id) is False
        assert await repo.find_all() == []

    @pytest.mark.asyncio
    async def test_save_persists_status_changes(self):
        repo = MemoryOrderRepository()
        order = await repo.save(OrderFactory.build())

        await repo.save(order.update_status(OrderStatus.CONFIRMED))

        found = await repo.find_by_id(order.id)
        assert found is not None
        assert found.status is OrderStatus.CONFIRMED
        assert len(await repo.find_all()) == 1

    @pytest.mark.asyncio
    async def test_filters(self):
        repo = MemoryOrderRepository()
        user_id = UserId.generate()
        first = await repo.save(OrderFactory.build(user_id=user_id))
        second = await repo.save(
            OrderFactory.build(user_id=user_id, status=OrderStatus.SHIPPED)
        )
        other = await repo.save(OrderFactory.build())

        assert await repo.find_by_user_id(user_id) == [first, second]
        assert await repo.find_by_status(OrderStatus.PENDING) == [
            first,
            other,
        ]
        assert await repo.find_by_status(OrderStatus.DELIVERED) == []
        assert await repo.find_all() == [first, second, other]


class RecordingHandler:
    def __init__(self):
        self.handled = []

    async def handle(self, event):
        self.handled.append(event)


class FailingHandler:
    async def handle(self, event):
        raise RuntimeError("handler down")


class TestMemoryEventPublisher:
    @pytest.mark.asyncio
    async def test_publish_records_and_dispatches(self):
        publisher = MemoryEventPublisher()
        handler = RecordingHandler()
        publisher.subscribe(handler)
        event = UserCreated.from_user(UserFactory.build())

        await publisher.publish(event)

        assert publisher.events == [event]
        assert handler.handled == [event]
        assert publisher.events_of_type(UserCreated) == [event]

    @pytest.mark.asyncio
    async def test_publish_batch_keeps_order(self):
        publisher = MemoryEventPublisher()
        events = [UserCreated.from_user(UserFactory.build()) for _ in range(3)]

        await publisher.publish_batch(events)

        assert publisher.events == events
        publisher.clear()
        assert publisher.events == []

    @pytest.mark.asyncio
    async def test_handler_failure_propagates(self):
        publisher = MemoryEventPublisher()
        publisher.subscribe(FailingHandler())
        event = UserCreated.from_user(UserFactory.build())

        with pytest.raises(RuntimeError, match="handler down"):
            await publisher.publish(event)

        assert publisher.events == [event]

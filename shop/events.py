"""
Domain events published by the services after a state change is persisted.

Events are immutable records for external consumers. Delivering them is not
required for the triggering operation to succeed. Every event carries its
own ``event_id``, the ``aggregate_id`` of the user or order it describes,
and ``occurred_at``. Existing fields keep their meaning; new fields may be
added.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field

from shop.domain import Order, OrderItem, OrderStatus, User, utcnow


class DomainEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    aggregate_id: str
    occurred_at: datetime = Field(default_factory=utcnow)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def event_type(self) -> str:
        return type(self).__name__


class UserCreated(DomainEvent):
    email: str
    first_name: str
    last_name: str

    @classmethod
    def from_user(cls, user: User) -> "UserCreated":
        return cls(
            aggregate_id=user.id.value,
            email=user.email.value,
            first_name=user.first_name,
            last_name=user.last_name,
        )


class UserUpdated(DomainEvent):
    first_name: str
    last_name: str

    @classmethod
    def from_user(cls, user: User) -> "UserUpdated":
        return cls(
            aggregate_id=user.id.value,
            first_name=user.first_name,
            last_name=user.last_name,
        )


class OrderCreated(DomainEvent):
    user_id: str
    items: Tuple[OrderItem, ...]
    total_amount: Decimal

    @classmethod
    def from_order(cls, order: Order) -> "OrderCreated":
        return cls(
            aggregate_id=order.id.value,
            user_id=order.user_id.value,
            items=order.items,
            total_amount=order.total_amount,
        )


class OrderStatusChanged(DomainEvent):
    old_status: OrderStatus
    new_status: OrderStatus

    @classmethod
    def from_transition(
        cls, previous: Order, current: Order
    ) -> "OrderStatusChanged":
        return cls(
            aggregate_id=current.id.value,
            old_status=previous.status,
            new_status=current.status,
        )

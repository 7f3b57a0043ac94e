"""
Pydantic models for API responses.
These define the contract between the API and external clients.
"""

from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel

from shop.domain import Order, OrderItem, User


class HealthCheckResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Body returned for every handled error."""

    code: str
    message: str
    timestamp: datetime


class UserResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id.value,
            email=user.email.value,
            first_name=user.first_name,
            last_name=user.last_name,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class PaginatedUsersResponse(BaseModel):
    """One zero-indexed page of users."""

    users: List[UserResponse]
    page: int
    size: int
    total_count: int
    total_pages: int


class OrderItemResponse(BaseModel):
    product_id: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    @classmethod
    def from_domain(cls, item: OrderItem) -> "OrderItemResponse":
        return cls(
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.total_price,
        )


class OrderResponse(BaseModel):
    id: str
    user_id: str
    items: List[OrderItemResponse]
    status: str
    total_amount: Decimal
    is_modifiable: bool
    is_cancellable: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id.value,
            user_id=order.user_id.value,
            items=[OrderItemResponse.from_domain(i) for i in order.items],
            status=order.status.value,
            total_amount=order.total_amount,
            is_modifiable=order.is_modifiable,
            is_cancellable=order.is_cancellable,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )

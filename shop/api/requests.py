"""
Pydantic models for API requests.
These define the contract between the API and external clients.

Business rules (blank names, positive quantities, minimum order total) are
enforced by the domain models, not here.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from shop.domain import OrderItem


class CreateUserRequest(BaseModel):
    email: str
    first_name: str
    last_name: str


class UpdateUserRequest(BaseModel):
    """Omitted names keep their current value."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None


class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int
    unit_price: Decimal

    def to_domain(self) -> OrderItem:
        return OrderItem.create(
            product_id=self.product_id,
            quantity=self.quantity,
            unit_price=self.unit_price,
        )


class CreateOrderRequest(BaseModel):
    user_id: str
    items: List[OrderItemRequest]


class UpdateOrderStatusRequest(BaseModel):
    status: str

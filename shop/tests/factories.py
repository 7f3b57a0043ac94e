"""
Test factories for creating domain objects using factory_boy.

Design decisions documented:
- Every user gets a unique, well-formed email from a sequence
- Orders default to a single item worth 50.00, above the minimum amount
- ``total_amount`` is derived from the items so built orders are valid
- Timestamps are UTC timezone-aware and start equal
"""

from decimal import Decimal

from factory.base import Factory
from factory.declarations import LazyAttribute, LazyFunction, Sequence
from factory.faker import Faker

from shop.domain import (
    Email,
    Order,
    OrderId,
    OrderItem,
    OrderStatus,
    User,
    UserId,
    utcnow,
)


class UserFactory(Factory):
    class Meta:
        model = User

    id = LazyFunction(UserId.generate)
    email = Sequence(lambda n: Email(value=f"user{n}@example.com"))
    first_name = Faker("first_name")
    last_name = Faker("last_name")
    created_at = LazyFunction(utcnow)
    updated_at = LazyAttribute(lambda o: o.created_at)


class OrderItemFactory(Factory):
    class Meta:
        model = OrderItem

    product_id = Sequence(lambda n: f"prod-{n}")
    quantity = 2
    unit_price = Decimal("25.00")


class OrderFactory(Factory):
    class Meta:
        model = Order

    id = LazyFunction(OrderId.generate)
    user_id = LazyFunction(UserId.generate)
    items = LazyFunction(lambda: (OrderItemFactory.build(),))
    status = OrderStatus.PENDING
    total_amount = LazyAttribute(
        lambda o: sum((i.total_price for i in o.items), Decimal("0"))
    )
    created_at = LazyFunction(utcnow)
    updated_at = LazyAttribute(lambda o: o.created_at)

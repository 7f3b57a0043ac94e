"""
Domain models defined as frozen Pydantic models.

Every model validates itself at construction time, so no instance can be
observed in an invalid state. Models never change in place: the transition
methods (``User.update_profile``, ``Order.update_status``) build and return
a new, fully re-validated instance.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import (
    Any,
    FrozenSet,
    Iterable,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    field_validator,
    model_validator,
)

from shop.exceptions import InvalidArgumentError, InvalidStateTransitionError

MINIMUM_ORDER_AMOUNT = Decimal("10.0")

IdentifierT = TypeVar("IdentifierT", bound="Identifier")
ModelT = TypeVar("ModelT", bound=BaseModel)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _invalid_argument(error: ValidationError) -> InvalidArgumentError:
    """Collapse a Pydantic ValidationError into an InvalidArgumentError."""
    messages = [
        str(detail["msg"]).removeprefix("Value error, ")
        for detail in error.errors()
    ]
    return InvalidArgumentError("; ".join(messages))


def _rebuild(model: ModelT, **changes: Any) -> ModelT:
    """Construct a validated copy of ``model`` with ``changes`` applied.

    ``model_copy(update=...)`` skips validation, so the copy goes back
    through the constructor instead.
    """
    try:
        return type(model)(**{**dict(model), **changes})
    except ValidationError as e:
        raise _invalid_argument(e) from e


class Identifier(BaseModel):
    """Opaque string identifier compared by value."""

    model_config = ConfigDict(frozen=True)

    value: str

    @field_validator("value")
    @classmethod
    def value_must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError(f"{cls.__name__} cannot be blank")
        return v

    @classmethod
    def generate(cls: Type[IdentifierT]) -> IdentifierT:
        """Generate a fresh identifier backed by a uuid4 token."""
        return cls(value=str(uuid.uuid4()))

    @classmethod
    def of(
        cls: Type[IdentifierT], value: Union[IdentifierT, str]
    ) -> IdentifierT:
        """Wrap a raw string, passing existing identifiers through."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value=value)
        except ValidationError as e:
            raise _invalid_argument(e) from e

    def __str__(self) -> str:
        return self.value


class UserId(Identifier):
    pass


class OrderId(Identifier):
    pass


class ProductId(Identifier):
    pass


class Email(BaseModel):
    """E-mail address wrapper. Must contain both '@' and '.'."""

    model_config = ConfigDict(frozen=True)

    value: str

    @field_validator("value")
    @classmethod
    def value_must_look_like_an_email(cls, v: str) -> str:
        if "@" not in v or "." not in v:
            raise ValueError(f"Invalid email format: {v}")
        return v

    @classmethod
    def parse(cls, value: Union["Email", str]) -> "Email":
        if isinstance(value, Email):
            return value
        try:
            return cls(value=value)
        except ValidationError as e:
            raise _invalid_argument(e) from e

    def __str__(self) -> str:
        return self.value


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UserId
    email: Email
    first_name: str
    last_name: str
    created_at: datetime
    updated_at: datetime

    @field_validator("first_name")
    @classmethod
    def first_name_must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("First name cannot be blank")
        return v

    @field_validator("last_name")
    @classmethod
    def last_name_must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Last name cannot be blank")
        return v

    @classmethod
    def create(
        cls, email: Union[Email, str], first_name: str, last_name: str
    ) -> "User":
        """Create a new user with a generated ID and fresh timestamps.

        Raises:
            InvalidArgumentError: If the email is malformed or a name is
                blank
        """
        email = Email.parse(email)
        now = utcnow()
        try:
            return cls(
                id=UserId.generate(),
                email=email,
                first_name=first_name,
                last_name=last_name,
                created_at=now,
                updated_at=now,
            )
        except ValidationError as e:
            raise _invalid_argument(e) from e

    def update_profile(
        self, new_first_name: str, new_last_name: str
    ) -> "User":
        """Return a copy with new names and an advanced ``updated_at``.

        ``id``, ``email`` and ``created_at`` are carried over unchanged.

        Raises:
            InvalidArgumentError: If either name is blank
        """
        return _rebuild(
            self,
            first_name=new_first_name,
            last_name=new_last_name,
            updated_at=utcnow(),
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class OrderStatus(str, Enum):
    """Order lifecycle states.

    The permitted edges live in ``ORDER_STATUS_TRANSITIONS``. DELIVERED and
    CANCELLED are terminal.
    """

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, value: Union["OrderStatus", str]) -> "OrderStatus":
        """Look up a status by value, ignoring case."""
        try:
            return cls(value.upper())
        except (AttributeError, ValueError) as e:
            raise InvalidArgumentError(
                f"Unknown order status: {value}"
            ) from e

    def allowed_transitions(self) -> FrozenSet["OrderStatus"]:
        return ORDER_STATUS_TRANSITIONS[self]

    def can_transition_to(self, new_status: "OrderStatus") -> bool:
        return new_status in ORDER_STATUS_TRANSITIONS[self]

    @property
    def is_terminal(self) -> bool:
        return not ORDER_STATUS_TRANSITIONS[self]


ORDER_STATUS_TRANSITIONS: Mapping[OrderStatus, FrozenSet[OrderStatus]] = (
    MappingProxyType(
        {
            OrderStatus.PENDING: frozenset(
                {OrderStatus.CONFIRMED, OrderStatus.CANCELLED}
            ),
            OrderStatus.CONFIRMED: frozenset(
                {OrderStatus.PROCESSING, OrderStatus.CANCELLED}
            ),
            OrderStatus.PROCESSING: frozenset(
                {OrderStatus.SHIPPED, OrderStatus.CANCELLED}
            ),
            OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
            OrderStatus.DELIVERED: frozenset(),
            OrderStatus.CANCELLED: frozenset(),
        }
    )
)

MODIFIABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})
CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


class OrderItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int
    unit_price: Decimal

    @field_validator("product_id", mode="before")
    @classmethod
    def unwrap_product_id(cls, v: Any) -> Any:
        if isinstance(v, ProductId):
            return v.value
        return v

    @field_validator("product_id")
    @classmethod
    def product_id_must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Product ID cannot be blank")
        return v

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Quantity must be greater than 0")
        return v

    @field_validator("unit_price")
    @classmethod
    def unit_price_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Unit price must be greater than 0")
        return v

    @classmethod
    def create(
        cls,
        product_id: Union[ProductId, str],
        quantity: int,
        unit_price: Union[Decimal, float, str],
    ) -> "OrderItem":
        try:
            return cls(
                product_id=product_id,
                quantity=quantity,
                unit_price=unit_price,
            )
        except ValidationError as e:
            raise _invalid_argument(e) from e

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity


def _sum_item_totals(items: Iterable[OrderItem]) -> Decimal:
    return sum((item.total_price for item in items), Decimal("0"))


class Order(BaseModel):
    """Order aggregate.

    ``total_amount`` is fixed when the order is created. Status changes copy
    it forward untouched; there is no path that edits items afterwards.
    """

    model_config = ConfigDict(frozen=True)

    id: OrderId
    user_id: UserId
    items: Tuple[OrderItem, ...]
    status: OrderStatus = OrderStatus.PENDING
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: Tuple[OrderItem, ...]
    ) -> Tuple[OrderItem, ...]:
        if not v:
            raise ValueError("Order must have at least one item")
        return v

    @model_validator(mode="after")
    def total_amount_must_match_items(self) -> "Order":
        if self.total_amount != _sum_item_totals(self.items):
            raise ValueError(
                "Total amount must equal the sum of the item totals"
            )
        if self.total_amount < MINIMUM_ORDER_AMOUNT:
            raise ValueError(
                f"Minimum order amount is {MINIMUM_ORDER_AMOUNT}"
            )
        return self

    @classmethod
    def create(
        cls,
        user_id: Union[UserId, str],
        items: Iterable[Union[OrderItem, Mapping[str, Any]]],
    ) -> "Order":
        """Create a PENDING order and compute its total.

        Raises:
            InvalidArgumentError: If there are no items, an item is invalid,
                or the total is below ``MINIMUM_ORDER_AMOUNT``
        """
        items = list(items)
        if not items:
            raise InvalidArgumentError("Order must have at least one item")
        try:
            order_items = tuple(
                OrderItem.model_validate(item) for item in items
            )
        except ValidationError as e:
            raise _invalid_argument(e) from e

        total_amount = _sum_item_totals(order_items)
        if total_amount < MINIMUM_ORDER_AMOUNT:
            raise InvalidArgumentError(
                f"Minimum order amount is {MINIMUM_ORDER_AMOUNT}, "
                f"got {total_amount}"
            )

        now = utcnow()
        try:
            return cls(
                id=OrderId.generate(),
                user_id=UserId.of(user_id),
                items=order_items,
                status=OrderStatus.PENDING,
                total_amount=total_amount,
                created_at=now,
                updated_at=now,
            )
        except ValidationError as e:
            raise _invalid_argument(e) from e

    def update_status(self, new_status: Union[OrderStatus, str]) -> "Order":
        """Return a copy moved to ``new_status``.

        Raises:
            InvalidArgumentError: If ``new_status`` is not a known status
            InvalidStateTransitionError: If the edge is not permitted from
                the current status
        """
        new_status = OrderStatus.parse(new_status)
        if not self.status.can_transition_to(new_status):
            raise InvalidStateTransitionError(
                self.status.value, new_status.value
            )
        return _rebuild(self, status=new_status, updated_at=utcnow())

    @property
    def is_modifiable(self) -> bool:
        return self.status in MODIFIABLE_STATUSES

    @property
    def is_cancellable(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def age_in_hours(self, now: Optional[datetime] = None) -> float:
        now = now or utcnow()
        return (now - self.created_at).total_seconds() / 3600.0

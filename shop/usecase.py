"""
Use case services for users and orders.

The services know nothing about storage or messaging. Repositories and the
event publisher are injected and checked against their protocols.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from shop.domain import (
    Email,
    Order,
    OrderId,
    OrderItem,
    OrderStatus,
    User,
    UserId,
)
from shop.events import (
    DomainEvent,
    OrderCreated,
    OrderStatusChanged,
    UserCreated,
    UserUpdated,
)
from shop.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateTransitionError,
    NotFoundError,
)
from shop.repositories import (
    DuplicateEmailError,
    EventPublisher,
    OrderRepository,
    UserRepository,
)
from shop.validation import (
    ensure_event_publisher,
    ensure_order_repository,
    ensure_user_repository,
)

logger = logging.getLogger(__name__)


async def _publish(publisher: EventPublisher, event: DomainEvent) -> None:
    """Publish an event whose state change is already persisted.

    A failure is logged and re-raised. The write is not rolled back.
    """
    logger.debug(
        "About to publish domain event",
        extra={
            "event_id": event.event_id,
            "event_type": event.event_type,
            "aggregate_id": event.aggregate_id,
            "debug_step": "before_event_publish",
        },
    )
    try:
        await publisher.publish(event)
    except Exception as e:
        logger.error(
            "Failed to publish domain event after persisting state change",
            extra={
                "event_id": event.event_id,
                "event_type": event.event_type,
                "aggregate_id": event.aggregate_id,
                "error": str(e),
                "error_type": type(e).__name__,
                "debug_step": "event_publish_failed",
            },
        )
        raise


class UserService:
    """
    Use case service for the User aggregate.

    Each operation is one sequential unit of work: look up, validate
    through the aggregate, persist, publish. The service holds no state of
    its own beyond its injected collaborators, so concurrent calls need no
    locking here. Email uniqueness under concurrency is guaranteed by the
    repository, whose ``DuplicateEmailError`` is translated into
    ``ConflictError``.

    Architectural Notes:
    - Repository and publisher are injected via constructor
      (dependency inversion) and validated against their protocols
    - Invalid input is rejected before any repository call
    - The repository write happens before the event is published
    """

    def __init__(
        self,
        user_repo: UserRepository,
        event_publisher: EventPublisher,
    ) -> None:
        """Initialize the user service.

        Args:
            user_repo: Repository for User persistence
            event_publisher: Publisher for domain events

        Raises:
            RepositoryValidationError: If a collaborator does not satisfy
                its protocol
        """
        self.user_repo = ensure_user_repository(user_repo)
        self.event_publisher = ensure_event_publisher(event_publisher)

    async def create_user(
        self, email: Union[Email, str], first_name: str, last_name: str
    ) -> User:
        """Register a new user.

        Raises:
            InvalidArgumentError: Malformed email or blank name
            ConflictError: A user with this email already exists
        """
        logger.debug(
            "Starting user creation",
            extra={"email": str(email), "debug_step": "use_case_entry"},
        )

        try:
            user = User.create(email, first_name, last_name)
        except InvalidArgumentError as e:
            logger.warning(
                "User creation rejected: invalid input",
                extra={"email": str(email), "error": str(e)},
            )
            raise

        existing = await self.user_repo.find_by_email(user.email)
        if existing is not None:
            logger.warning(
                "User creation rejected: email already registered",
                extra={
                    "email": user.email.value,
                    "existing_user_id": existing.id.value,
                },
            )
            raise ConflictError(
                f"User with email {user.email.value} already exists"
            )

        try:
            saved_user = await self.user_repo.save(user)
        except DuplicateEmailError as e:
            logger.warning(
                "User creation rejected by repository: duplicate email",
                extra={"email": user.email.value, "user_id": user.id.value},
            )
            raise ConflictError(str(e)) from e

        await _publish(self.event_publisher, UserCreated.from_user(saved_user))

        logger.info(
            "User created",
            extra={
                "user_id": saved_user.id.value,
                "email": saved_user.email.value,
            },
        )
        return saved_user

    async def update_user(
        self,
        user_id: Union[UserId, str],
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        """Update a user's names. Omitted names keep their current value.

        Raises:
            NotFoundError: No user exists for ``user_id``
            InvalidArgumentError: A resulting name is blank
        """
        user_id = UserId.of(user_id)
        logger.debug(
            "Starting user update",
            extra={"user_id": user_id.value, "debug_step": "use_case_entry"},
        )

        existing = await self.user_repo.find_by_id(user_id)
        if existing is None:
            logger.warning(
                "User update rejected: user not found",
                extra={"user_id": user_id.value},
            )
            raise NotFoundError("User", user_id.value)

        updated = existing.update_profile(
            first_name if first_name is not None else existing.first_name,
            last_name if last_name is not None else existing.last_name,
        )
        saved_user = await self.user_repo.save(updated)

        await _publish(self.event_publisher, UserUpdated.from_user(saved_user))

        logger.info(
            "User updated",
            extra={"user_id": saved_user.id.value},
        )
        return saved_user

    async def get_user(self, user_id: Union[UserId, str]) -> Optional[User]:
        return await self.user_repo.find_by_id(UserId.of(user_id))

    async def get_user_by_email(
        self, email: Union[Email, str]
    ) -> Optional[User]:
        return await self.user_repo.find_by_email(Email.parse(email))

    async def get_all_users(
        self, page: int = 0, size: int = 10
    ) -> Tuple[List[User], int]:
        """Return one zero-indexed page of users and the total user count.

        Raises:
            InvalidArgumentError: ``page`` is negative or ``size`` is not
                positive
        """
        if page < 0:
            raise InvalidArgumentError("Page must be zero or greater")
        if size < 1:
            raise InvalidArgumentError("Page size must be at least 1")

        users = await self.user_repo.find_all(page, size)
        total_count = await self.user_repo.count()
        logger.debug(
            "Listed users",
            extra={
                "page": page,
                "size": size,
                "returned": len(users),
                "total_count": total_count,
            },
        )
        return users, total_count

    async def delete_user(self, user_id: Union[UserId, str]) -> bool:
        """Delete a user. Returns False when there was nothing to delete."""
        user_id = UserId.of(user_id)
        deleted = await self.user_repo.delete(user_id)
        logger.info(
            "User deletion processed",
            extra={"user_id": user_id.value, "deleted": deleted},
        )
        return deleted

    async def count_users(self) -> int:
        return await self.user_repo.count()


class OrderService:
    """
    Use case service for the Order aggregate.

    Status validation is delegated entirely to ``Order.update_status`` and
    its transition table; the service only sequences lookup, transition,
    persistence and publication.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        user_repo: UserRepository,
        event_publisher: EventPublisher,
    ) -> None:
        self.order_repo = ensure_order_repository(order_repo)
        self.user_repo = ensure_user_repository(user_repo)
        self.event_publisher = ensure_event_publisher(event_publisher)

    async def create_order(
        self,
        user_id: Union[UserId, str],
        items: Iterable[Union[OrderItem, Mapping[str, Any]]],
    ) -> Order:
        """Place a new PENDING order for an existing user.

        Raises:
            InvalidArgumentError: No items, an invalid item, or a total
                below the minimum order amount
            NotFoundError: ``user_id`` does not resolve to a user
        """
        user_id = UserId.of(user_id)
        logger.debug(
            "Starting order creation",
            extra={"user_id": user_id.value, "debug_step": "use_case_entry"},
        )

        try:
            order = Order.create(user_id, items)
        except InvalidArgumentError as e:
            logger.warning(
                "Order creation rejected: invalid order data",
                extra={"user_id": user_id.value, "error": str(e)},
            )
            raise

        user = await self.user_repo.find_by_id(user_id)
        if user is None:
            logger.warning(
                "Order creation rejected: user not found",
                extra={"user_id": user_id.value},
            )
            raise NotFoundError("User", user_id.value)

        saved_order = await self.order_repo.save(order)

        await _publish(
            self.event_publisher, OrderCreated.from_order(saved_order)
        )

        logger.info(
            "Order created",
            extra={
                "order_id": saved_order.id.value,
                "user_id": saved_order.user_id.value,
                "item_count": len(saved_order.items),
                "total_amount": str(saved_order.total_amount),
            },
        )
        return saved_order

    async def update_order_status(
        self,
        order_id: Union[OrderId, str],
        new_status: Union[OrderStatus, str],
    ) -> Order:
        """Move an order along the status state machine.

        Raises:
            NotFoundError: No order exists for ``order_id``
            InvalidStateTransitionError: The edge is not permitted
            InvalidArgumentError: ``new_status`` is not a known status
        """
        order_id = OrderId.of(order_id)
        new_status = OrderStatus.parse(new_status)
        logger.debug(
            "Starting order status update",
            extra={
                "order_id": order_id.value,
                "requested_status": new_status.value,
                "debug_step": "use_case_entry",
            },
        )

        existing = await self.order_repo.find_by_id(order_id)
        if existing is None:
            logger.warning(
                "Order status update rejected: order not found",
                extra={"order_id": order_id.value},
            )
            raise NotFoundError("Order", order_id.value)

        try:
            updated = existing.update_status(new_status)
        except InvalidStateTransitionError as e:
            logger.warning(
                "Order status update rejected",
                extra={
                    "order_id": order_id.value,
                    "current_status": existing.status.value,
                    "requested_status": new_status.value,
                    "error": str(e),
                },
            )
            raise

        saved_order = await self.order_repo.save(updated)

        await _publish(
            self.event_publisher,
            OrderStatusChanged.from_transition(existing, saved_order),
        )

        logger.info(
            "Order status changed",
            extra={
                "order_id": saved_order.id.value,
                "old_status": existing.status.value,
                "new_status": saved_order.status.value,
            },
        )
        return saved_order

    async def cancel_order(self, order_id: Union[OrderId, str]) -> Order:
        return await self.update_order_status(
            order_id, OrderStatus.CANCELLED
        )

    async def get_order(
        self, order_id: Union[OrderId, str]
    ) -> Optional[Order]:
        return await self.order_repo.find_by_id(OrderId.of(order_id))

    async def get_orders_by_user(
        self, user_id: Union[UserId, str]
    ) -> List[Order]:
        return await self.order_repo.find_by_user_id(UserId.of(user_id))

    async def get_orders_by_status(
        self, status: Union[OrderStatus, str]
    ) -> List[Order]:
        return await self.order_repo.find_by_status(OrderStatus.parse(status))

"""
Repository and event publisher interfaces defined as Protocols.

The domain services depend only on these capability interfaces, never on a
concrete storage or broker technology. Implementations are injected through
the service constructors and checked at construction time with the
``ensure_*`` helpers in ``shop.validation``.

All operations in this module follow these principles:

- **Async**: Every method is a coroutine so implementations are free to do
  network I/O without blocking the event loop.

- **Domain Objects**: Methods accept and return domain objects or
  primitives, never storage- or transport-specific types.

- **Single-aggregate writes**: Each write touches exactly one aggregate.
  There is no multi-aggregate transaction and no compensation.

- **Consistency is the implementation's job**: The services hold no shared
  state and take no locks. Implementations must give read-your-write
  consistency per ID and must reject duplicate e-mail writes atomically.
  Concurrent updates to one aggregate resolve as last write wins.

Architectural Notes:

- These are pure interfaces with no implementation details
- In-memory implementations live in ``shop.repos.memory`` and
  MinIO-backed ones in ``shop.repos.minio``
- Tests substitute ``MagicMock(spec=...)`` doubles for any of them
"""

from typing import List, Optional, Protocol, Sequence, runtime_checkable

from shop.domain import Email, Order, OrderId, OrderStatus, User, UserId
from shop.events import DomainEvent


class DuplicateEmailError(Exception):
    """Raised by a UserRepository when another user already owns an email.

    This is the collaborator-side conflict signal. The services translate it
    into ``shop.exceptions.ConflictError``.
    """

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"User with email {email} already exists")


@runtime_checkable
class UserRepository(Protocol):
    """Persists and looks up User aggregates.

    Email uniqueness spans the whole user population, so it is enforced
    here rather than by the aggregate.
    """

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Retrieve a user by ID.

        Args:
            user_id: Identifier of the user

        Returns:
            User if found, None otherwise

        Implementation Notes:
        - Should handle missing users gracefully (return None, don't raise)
        """
        ...

    async def find_by_email(self, email: Email) -> Optional[User]:
        """Retrieve a user by email.

        Matching is exact and case-sensitive.

        Args:
            email: Email value object

        Returns:
            User if found, None otherwise
        """
        ...

    async def save(self, user: User) -> User:
        """Insert or replace a user by ID.

        Args:
            user: Complete User aggregate to persist

        Returns:
            The persisted User

        Raises:
            DuplicateEmailError: If a different user already owns
                ``user.email``

        Implementation Notes:
        - The uniqueness check and the write must be atomic with respect
          to other writers
        - Saving the same user state twice is safe
        """
        ...

    async def delete(self, user_id: UserId) -> bool:
        """Delete a user by ID.

        Returns:
            True if a user was removed, False if none existed
        """
        ...

    async def find_all(self, page: int = 0, size: int = 10) -> List[User]:
        """Return one page of users.

        Args:
            page: Zero-indexed page number
            size: Maximum number of users per page

        Implementation Notes:
        - Offset based: skips ``page * size`` users
        - Ordering must be stable between calls; insertion order is
          recommended
        """
        ...

    async def count(self) -> int:
        """Return the total number of stored users."""
        ...


@runtime_checkable
class OrderRepository(Protocol):
    """Persists and looks up Order aggregates."""

    async def find_by_id(self, order_id: OrderId) -> Optional[Order]:
        """Retrieve an order by ID.

        Returns:
            Order if found, None otherwise
        """
        ...

    async def save(self, order: Order) -> Order:
        """Insert or replace an order by ID.

        Returns:
            The persisted Order

        Implementation Notes:
        - Must persist the full state, including status and timestamps
        - Saving the same order state twice is safe
        """
        ...

    async def find_by_user_id(self, user_id: UserId) -> List[Order]:
        """Return every order placed by ``user_id`` in insertion order."""
        ...

    async def find_by_status(self, status: OrderStatus) -> List[Order]:
        """Return every order currently in ``status`` in insertion order."""
        ...

    async def find_all(self) -> List[Order]:
        """Return every stored order in insertion order."""
        ...

    async def delete(self, order_id: OrderId) -> bool:
        """Delete an order by ID.

        Returns:
            True if an order was removed, False if none existed
        """
        ...


@runtime_checkable
class EventPublisher(Protocol):
    """Publishes domain events to external consumers.

    Publication is best effort from the services' point of view: they call
    it after the repository write has committed and do not roll back when
    it fails. At-least-once delivery (outbox, retries) belongs to the
    implementation.
    """

    async def publish(self, event: DomainEvent) -> None:
        """Publish a single event.

        Raises:
            Any transport error, unchanged
        """
        ...

    async def publish_batch(self, events: Sequence[DomainEvent]) -> None:
        """Publish several events in order."""
        ...


@runtime_checkable
class EventHandler(Protocol):
    """Consumes domain events delivered by a publisher."""

    async def handle(self, event: DomainEvent) -> None:
        ...

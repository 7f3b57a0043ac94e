"""
Runtime validation of architectural contracts.

The domain services receive their collaborators through constructor
injection. This module checks those collaborators against the Protocols in
``shop.repositories`` using ``isinstance()`` with ``@runtime_checkable``, so
wiring mistakes fail when a service is built rather than halfway through a
request.
"""

import logging
from typing import Type, TypeVar

from shop.repositories import EventPublisher, OrderRepository, UserRepository

logger = logging.getLogger(__name__)

P = TypeVar("P")


class RepositoryValidationError(Exception):
    """Raised when repository contract validation fails"""

    pass


def validate_repository_protocol(
    repository: object, protocol: Type[P]
) -> None:
    """
    Validate that an implementation satisfies a protocol contract.

    Args:
        repository: The implementation to validate
        protocol: The protocol class to validate against

    Raises:
        RepositoryValidationError: If validation fails

    Example:
        >>> from shop.repos.memory import MemoryUserRepository
        >>> validate_repository_protocol(
        ...     MemoryUserRepository(), UserRepository
        ... )
    """
    logger.debug(
        "Validating repository protocol",
        extra={
            "repository_type": type(repository).__name__,
            "protocol_name": protocol.__name__,
        },
    )

    if not isinstance(repository, protocol):
        error_message = (
            f"Repository {type(repository).__name__} does not implement "
            f"{protocol.__name__} protocol. Missing or incorrect methods."
        )

        logger.error(
            "Repository protocol validation failed",
            extra={
                "repository_type": type(repository).__name__,
                "protocol_name": protocol.__name__,
            },
        )

        raise RepositoryValidationError(error_message)

    logger.debug(
        "Repository protocol validation passed",
        extra={
            "repository_type": type(repository).__name__,
            "protocol_name": protocol.__name__,
        },
    )


def ensure_repository_protocol(repository: object, protocol: Type[P]) -> P:
    """
    Validate and return an implementation with the protocol's type.

    Returns:
        The validated implementation (type checker knows it satisfies the
        protocol)

    Raises:
        RepositoryValidationError: If validation fails
    """
    validate_repository_protocol(repository, protocol)
    return repository  # type: ignore[return-value]


def ensure_user_repository(repo: object) -> UserRepository:
    """Ensure an object satisfies the UserRepository protocol"""
    return ensure_repository_protocol(repo, UserRepository)  # type: ignore[type-abstract]


def ensure_order_repository(repo: object) -> OrderRepository:
    """Ensure an object satisfies the OrderRepository protocol"""
    return ensure_repository_protocol(repo, OrderRepository)  # type: ignore[type-abstract]


def ensure_event_publisher(publisher: object) -> EventPublisher:
    """Ensure an object satisfies the EventPublisher protocol"""
    return ensure_repository_protocol(publisher, EventPublisher)  # type: ignore[type-abstract]

"""
Typed failures raised by the domain model and the domain services.

Callers (the HTTP layer in particular) translate these kinds into their own
status vocabulary. Collaborator failures (storage or broker errors) are not
wrapped and propagate unchanged.
"""


class DomainError(Exception):
    """Base class for business rule violations"""

    pass


class InvalidArgumentError(DomainError, ValueError):
    """Raised when input fails a construction or transition invariant"""

    pass


class NotFoundError(DomainError, LookupError):
    """Raised when a referenced aggregate does not exist"""

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


class ConflictError(DomainError):
    """Raised when a uniqueness rule is violated"""

    pass


class InvalidStateTransitionError(DomainError):
    """Raised when an order status change is not a permitted edge"""

    def __init__(self, current_status: str, requested_status: str) -> None:
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            f"Cannot transition from {current_status} to {requested_status}"
        )

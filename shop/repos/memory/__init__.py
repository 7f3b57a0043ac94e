"""
Memory implementations of the shop repository and publisher protocols.

These use Python dictionaries for storage and are ideal for tests and local
runs where external services should be avoided. They keep the same async
interfaces as the MinIO implementations.
"""

from .events import MemoryEventPublisher
from .order import MemoryOrderRepository
from .user import MemoryUserRepository

__all__ = [
    "MemoryEventPublisher",
    "MemoryOrderRepository",
    "MemoryUserRepository",
]

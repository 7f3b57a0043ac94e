"""
Memory implementation of UserRepository.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from shop.domain import Email, User, UserId
from shop.repositories import DuplicateEmailError, UserRepository
from .base import MemoryRepositoryMixin

logger = logging.getLogger(__name__)


class MemoryUserRepository(UserRepository, MemoryRepositoryMixin[User]):
    """
    Memory implementation of UserRepository using Python dictionaries.

    - Users: dictionary keyed by user ID
    - Email index: dictionary mapping email value to user ID

    The uniqueness check and the write run under one ``asyncio.Lock`` so two
    coroutines cannot both claim the same email.
    """

    def __init__(self) -> None:
        self.logger = logger
        self.entity_name = "User"
        self.storage_dict: Dict[str, User] = {}
        self.email_index: Dict[str, str] = {}
        self.lock = asyncio.Lock()

        logger.debug("Initializing MemoryUserRepository")

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        return self.get_entity(user_id.value)

    async def find_by_email(self, email: Email) -> Optional[User]:
        user_id = self.email_index.get(email.value)
        if user_id is None:
            return None
        return self.get_entity(user_id)

    async def save(self, user: User) -> User:
        async with self.lock:
            owner = self.email_index.get(user.email.value)
            if owner is not None and owner != user.id.value:
                self.logger.warning(
                    "MemoryUserRepository: Rejecting duplicate email",
                    extra={
                        "email": user.email.value,
                        "user_id": user.id.value,
                        "owner_id": owner,
                    },
                )
                raise DuplicateEmailError(user.email.value)

            previous = self.storage_dict.get(user.id.value)
            if previous is not None and previous.email != user.email:
                self.email_index.pop(previous.email.value, None)

            self.email_index[user.email.value] = user.id.value
            return self.save_entity(user.id.value, user)

    async def delete(self, user_id: UserId) -> bool:
        async with self.lock:
            user = self.storage_dict.get(user_id.value)
            if user is not None:
                self.email_index.pop(user.email.value, None)
            return self.delete_entity(user_id.value)

    async def find_all(self, page: int = 0, size: int = 10) -> List[User]:
        start = page * size
        return self.list_entities()[start : start + size]

    async def count(self) -> int:
        return len(self.storage_dict)

    def _add_entity_specific_log_data(
        self, entity: User, log_data: Dict[str, Any]
    ) -> None:
        log_data["email"] = entity.email.value

"""
Minio implementation of UserRepository.

Users are stored as JSON objects named by user ID in the ``users`` bucket.
A second bucket, ``user-emails``, maps each email (object name) to the ID of
the user that owns it and backs both ``find_by_email`` and the uniqueness
check in ``save``.
"""

import asyncio
import logging
from typing import List, Optional

from minio.error import S3Error

from shop.domain import Email, User, UserId
from shop.repositories import DuplicateEmailError, UserRepository
from .client import MinioClient, MinioRepositoryMixin


class MinioUserRepository(UserRepository, MinioRepositoryMixin):
    """
    Minio implementation of UserRepository.

    The check-then-write in ``save`` is serialized per repository instance
    with an ``asyncio.Lock``. MinIO offers no conditional put through this
    client, so two processes writing the same new email concurrently are
    not excluded from each other.
    """

    def __init__(
        self,
        client: MinioClient,
        users_bucket: str = "users",
        email_index_bucket: str = "user-emails",
    ) -> None:
        self.client = client
        self.logger = logging.getLogger("MinioUserRepository")
        self.users_bucket = users_bucket
        self.email_index_bucket = email_index_bucket
        self.lock = asyncio.Lock()
        self.ensure_buckets_exist([self.users_bucket, self.email_index_bucket])

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        return self.get_json_object(self.users_bucket, user_id.value, User)

    async def find_by_email(self, email: Email) -> Optional[User]:
        owner = self._email_owner(email)
        if owner is None:
            return None
        return await self.find_by_id(UserId(value=owner))

    async def save(self, user: User) -> User:
        async with self.lock:
            owner = self._email_owner(user.email)
            if owner is not None and owner != user.id.value:
                self.logger.warning(
                    "MinioUserRepository: Rejecting duplicate email",
                    extra={
                        "email": user.email.value,
                        "user_id": user.id.value,
                        "owner_id": owner,
                    },
                )
                raise DuplicateEmailError(user.email.value)

            previous = await self.find_by_id(user.id)
            new_claim = previous is None or previous.email != user.email

            # The index entry is written first so a stored user is never
            # left without one.
            self.put_bytes(
                self.email_index_bucket,
                user.email.value,
                user.id.value.encode("utf-8"),
                content_type="text/plain",
            )
            try:
                self.put_json_object(
                    self.users_bucket,
                    user.id.value,
                    user,
                    metadata={"email": user.email.value},
                )
            except S3Error:
                if new_claim:
                    self.logger.warning(
                        "MinioUserRepository: Releasing email claim after "
                        "failed user write",
                        extra={
                            "email": user.email.value,
                            "user_id": user.id.value,
                        },
                    )
                    self.remove(self.email_index_bucket, user.email.value)
                raise
            if previous is not None and new_claim:
                self.remove(self.email_index_bucket, previous.email.value)

            self.logger.info(
                "MinioUserRepository: User persisted",
                extra={
                    "user_id": user.id.value,
                    "is_new": previous is None,
                    "bucket": self.users_bucket,
                },
            )
            return user

    async def delete(self, user_id: UserId) -> bool:
        async with self.lock:
            user = await self.find_by_id(user_id)
            if user is None:
                self.logger.debug(
                    "MinioUserRepository: Nothing to delete",
                    extra={"user_id": user_id.value},
                )
                return False
            self.remove(self.email_index_bucket, user.email.value)
            self.remove(self.users_bucket, user_id.value)
            self.logger.info(
                "MinioUserRepository: User deleted",
                extra={"user_id": user_id.value},
            )
            return True

    async def find_all(self, page: int = 0, size: int = 10) -> List[User]:
        # Object listings are ordered by key, so order by creation instead.
        users = sorted(
            self.list_json_objects(self.users_bucket, User),
            key=lambda u: (u.created_at, u.id.value),
        )
        start = page * size
        return users[start : start + size]

    async def count(self) -> int:
        return len(self.list_object_names(self.users_bucket))

    def _email_owner(self, email: Email) -> Optional[str]:
        data = self.get_bytes(self.email_index_bucket, email.value)
        if data is None:
            return None
        return data.decode("utf-8")

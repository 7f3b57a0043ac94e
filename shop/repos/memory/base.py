"""
Shared storage helpers for the memory repositories.
"""

import asyncio
import logging
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class MemoryRepositoryMixin(Generic[T]):
    """
    Dictionary storage keyed by the entity's identifier value.

    Python dicts preserve insertion order, and replacing a value under an
    existing key keeps its position, so listing is stable across calls and
    follows first-insertion order. ``lock`` serializes check-then-write
    sequences between coroutines.

    Classes using this mixin must set ``logger``, ``entity_name``,
    ``storage_dict`` and ``lock`` in ``__init__``.
    """

    logger: logging.Logger
    entity_name: str
    storage_dict: Dict[str, T]
    lock: asyncio.Lock

    def get_entity(self, entity_id: str) -> Optional[T]:
        entity = self.storage_dict.get(entity_id)
        if entity is None:
            self.logger.debug(
                f"Memory{self.entity_name}Repository: "
                f"{self.entity_name} not found",
                extra={"entity_id": entity_id},
            )
        return entity

    def save_entity(self, entity_id: str, entity: T) -> T:
        is_new = entity_id not in self.storage_dict
        self.storage_dict[entity_id] = entity

        log_data: Dict[str, Any] = {"entity_id": entity_id, "is_new": is_new}
        self._add_entity_specific_log_data(entity, log_data)
        self.logger.info(
            f"Memory{self.entity_name}Repository: {self.entity_name} saved",
            extra=log_data,
        )
        return entity

    def delete_entity(self, entity_id: str) -> bool:
        removed = self.storage_dict.pop(entity_id, None) is not None
        self.logger.info(
            f"Memory{self.entity_name}Repository: "
            f"{self.entity_name} delete processed",
            extra={"entity_id": entity_id, "deleted": removed},
        )
        return removed

    def list_entities(self) -> List[T]:
        return list(self.storage_dict.values())

    def _add_entity_specific_log_data(
        self, entity: T, log_data: Dict[str, Any]
    ) -> None:
        """Hook for subclasses to add fields to the save log entry."""
        pass

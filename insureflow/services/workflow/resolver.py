"""Get-or-create resolution of shared rows keyed by a natural key."""

from typing import Any, Dict, Optional, Protocol

from insureflow.core.exceptions import DatabaseError
from insureflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class NaturalKeyRepository(Protocol):
    """Storage operations the resolver needs from a repository."""

    async def get_by_natural_key(self, key: str) -> Optional[int]:
        ...

    async def insert_if_absent(self, key: str, fields: Dict[str, Any]) -> Optional[int]:
        """Insert unless the key exists; None when a conflicting row won."""
        ...


class IdempotentResourceResolver:
    """Resolve a natural key to a row id, creating the row once.

    An existing row is returned untouched; incoming fields never overwrite
    it. Mutual exclusion comes from the unique index on the key: a losing
    concurrent insert is reported as a conflict and the winner's row is
    re-fetched.
    """

    def __init__(self, repository: NaturalKeyRepository, resource_name: str = "resource"):
        self.repository = repository
        self.resource_name = resource_name

    async def resolve(self, natural_key: str, fields: Dict[str, Any]) -> int:
        existing_id = await self.repository.get_by_natural_key(natural_key)
        if existing_id is not None:
            LOGGER.debug(f"Reusing {self.resource_name} {existing_id}", extra={"key": natural_key})
            return existing_id

        created_id = await self.repository.insert_if_absent(natural_key, fields)
        if created_id is not None:
            LOGGER.info(f"Created {self.resource_name} {created_id}", extra={"key": natural_key})
            return created_id

        winner_id = await self.repository.get_by_natural_key(natural_key)
        if winner_id is None:
            raise DatabaseError(
                f"{self.resource_name} '{natural_key}' conflicted on insert but cannot be read back"
            )

        LOGGER.info(
            f"Concurrent insert of {self.resource_name} resolved to {winner_id}",
            extra={"key": natural_key},
        )
        return winner_id

"""Repository for bank requisites keyed by bank identifier code."""

from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from insureflow.database.models import Requisites
from insureflow.repositories.base_repository import BaseRepository
from insureflow.utils.logging import get_logger

LOGGER = get_logger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class RequisitesRepository(BaseRepository[Requisites]):
    """Requisites rows are unique per ``bic``; rows are never overwritten."""

    natural_key = "bic"

    def __init__(self, session: AsyncSession):
        super().__init__(session, Requisites)

    async def get_by_natural_key(self, bic: str) -> Optional[int]:
        """Return the id of the requisites stored for ``bic``, if any."""
        result = await self.session.execute(select(Requisites.id).where(Requisites.bic == bic))
        return result.scalar_one_or_none()

    async def insert_if_absent(self, bic: str, fields: Dict[str, Any]) -> Optional[int]:
        """Insert requisites unless a row with the same ``bic`` exists.

        The unique index on ``bic`` decides the winner between concurrent
        inserts. Returns the new id, or None when the key was already taken.
        """
        values = {**fields, "bic": bic}
        dialect = self.session.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)

        if insert is not None:
            stmt = (
                insert(Requisites)
                .values(**values)
                .on_conflict_do_nothing(index_elements=[Requisites.bic])
                .returning(Requisites.id)
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

        # Generic path: the savepoint keeps the outer transaction usable
        try:
            async with self.session.begin_nested():
                instance = Requisites(**values)
                self.session.add(instance)
                await self.session.flush()
            return instance.id
        except IntegrityError:
            LOGGER.info("Requisites insert lost a race", extra={"bic": bic})
            return None

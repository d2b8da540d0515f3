from sqlalchemy.ext.asyncio import AsyncSession

from insureflow.database.models import OutboxEvent
from insureflow.repositories.base_repository import BaseRepository
from insureflow.schemas.enums import OutboxEventKind


class OutboxRepository(BaseRepository[OutboxEvent]):
    """Outbox rows are written in the workflow transaction and relayed later."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, OutboxEvent)

    async def insert(self, reference_id: int, event_kind: OutboxEventKind) -> OutboxEvent:
        return await self.create(reference_id=reference_id, event_kind=event_kind.value)

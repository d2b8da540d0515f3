from typing import Iterable, List, Sequence
from uuid import UUID

from sqlalchemy import Table, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from insureflow.database.models import (
    Document,
    application_documents,
    client_documents,
    insurance_documents,
    person_documents,
)
from insureflow.models.artifacts import UploadedArtifact
from insureflow.repositories.base_repository import BaseRepository
from insureflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DocumentRepository(BaseRepository[Document]):
    """Repository for document metadata and its links to owners.

    Inherits from BaseRepository for standard CRUD operations.
    """

    def __init__(self, session: AsyncSession):
        """Initialize document repository.

        Args:
            session: SQLAlchemy async session
        """
        super().__init__(session, Document)

    async def create_batch(self, artifacts: Sequence[UploadedArtifact]) -> List[int]:
        """Store metadata rows for uploaded artifacts.

        Args:
            artifacts: Documents already written to the object store

        Returns:
            IDs of the created Document rows, in input order
        """
        documents = [
            Document(
                name=artifact.name,
                storage_key=artifact.storage_key,
                content_type=artifact.content_type,
                doc_type=artifact.doc_type,
            )
            for artifact in artifacts
        ]
        if not documents:
            return []

        self.session.add_all(documents)
        await self.session.flush()

        LOGGER.info(f"Stored metadata for {len(documents)} documents")
        return [document.id for document in documents]

    async def _link(self, table: Table, owner_column: str, owner_id, document_ids: Iterable[int]) -> None:
        rows = [
            {owner_column: owner_id, "document_id": document_id}
            for document_id in dict.fromkeys(document_ids)
        ]
        if not rows:
            return
        await self.session.execute(insert(table), rows)

    async def link_to_client(self, client_id: int, document_ids: Iterable[int]) -> None:
        await self._link(client_documents, "client_id", client_id, document_ids)

    async def link_to_person(self, insured_person_id: int, document_ids: Iterable[int]) -> None:
        await self._link(person_documents, "insured_person_id", insured_person_id, document_ids)

    async def link_to_insurance(self, insurance_id: UUID, document_ids: Iterable[int]) -> None:
        await self._link(insurance_documents, "insurance_id", insurance_id, document_ids)

    async def link_to_application(self, application_id: UUID, document_ids: Iterable[int]) -> None:
        await self._link(application_documents, "application_id", application_id, document_ids)

    async def get_client_document_ids(self, client_id: int) -> List[int]:
        """Documents a client already has on file; empty when there are none."""
        result = await self.session.execute(
            select(client_documents.c.document_id)
            .where(client_documents.c.client_id == client_id)
            .order_by(client_documents.c.document_id)
        )
        return list(result.scalars().all())

    async def count_for_insurance(self, insurance_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(insurance_documents)
            .where(insurance_documents.c.insurance_id == insurance_id)
        )
        return result.scalar_one()

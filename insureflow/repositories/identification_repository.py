"""Repository for client identifications and the references attached to them."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from insureflow.core.exceptions import ReferenceAlreadyAttachedError
from insureflow.database.models import Identification, IdentificationReference
from insureflow.repositories.base_repository import BaseRepository
from insureflow.schemas.enums import IdentificationStatus
from insureflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class IdentificationRepository(BaseRepository[Identification]):
    """Repository for Identification entity operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Identification)

    async def get_by_client_and_provider(
        self, external_client_id: int, provider_id: int
    ) -> Optional[Identification]:
        """Get the most recent identification of a client with a provider.

        A client re-identified after a failed attempt has several records;
        only the latest one is relevant.
        """
        stmt = (
            select(Identification)
            .where(
                Identification.external_client_id == external_client_id,
                Identification.provider_id == provider_id,
            )
            .order_by(Identification.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_identification(
        self,
        client_id: int,
        external_client_id: int,
        provider_id: int,
        status: IdentificationStatus = IdentificationStatus.NEW,
    ) -> Identification:
        identification = await self.create(
            client_id=client_id,
            external_client_id=external_client_id,
            provider_id=provider_id,
            status=status.value,
        )
        LOGGER.info(
            f"Created identification {identification.id}",
            extra={"client_id": client_id, "provider_id": provider_id, "status": status.value},
        )
        return identification

    async def update_status(self, identification_id: int, status: IdentificationStatus) -> Optional[Identification]:
        """Set the status of an identification; None if it does not exist."""
        return await self.update(identification_id, status=status.value)

    async def attach_reference(self, identification_id: int, reference_id: int) -> IdentificationReference:
        """Attach an external reference to an identification.

        Raises:
            ReferenceAlreadyAttachedError: If the reference id is already used
        """
        existing = await self.session.execute(
            select(IdentificationReference.id).where(
                IdentificationReference.external_reference_id == reference_id
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ReferenceAlreadyAttachedError(reference_id)

        reference = IdentificationReference(
            identification_id=identification_id,
            external_reference_id=reference_id,
        )
        self.session.add(reference)
        try:
            await self.session.flush()
        except IntegrityError as e:
            # Concurrent attach of the same reference; the unique index decides
            raise ReferenceAlreadyAttachedError(reference_id) from e

        return reference

"""Repositories for insurance policies and their beneficiaries."""

from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from insureflow.database.models import Beneficiary, Insurance
from insureflow.repositories.base_repository import BaseRepository
from insureflow.schemas.workflows import BeneficiaryData
from insureflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class InsuranceRepository(BaseRepository[Insurance]):
    """Repository for Insurance entity operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Insurance)

    async def get_with_beneficiaries(self, insurance_id: UUID) -> Optional[Insurance]:
        """Get an insurance with its beneficiaries eagerly loaded."""
        stmt = (
            select(Insurance)
            .options(selectinload(Insurance.beneficiaries))
            .where(Insurance.id == insurance_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


class BeneficiaryRepository(BaseRepository[Beneficiary]):
    """Repository for beneficiaries of a policy."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Beneficiary)

    async def create_batch(
        self, insurance_id: UUID, beneficiaries: Sequence[BeneficiaryData]
    ) -> List[int]:
        """Create beneficiaries linked to ``insurance_id``.

        Returns:
            IDs of the created rows
        """
        rows = [
            Beneficiary(
                insurance_id=insurance_id,
                name=beneficiary.name,
                surname=beneficiary.surname,
                patronymic=beneficiary.patronymic,
                birth_date=beneficiary.birth_date,
                share=beneficiary.share,
                relation=beneficiary.relation,
            )
            for beneficiary in beneficiaries
        ]
        if not rows:
            return []

        self.session.add_all(rows)
        await self.session.flush()

        LOGGER.info(f"Created {len(rows)} beneficiaries for insurance {insurance_id}")
        return [row.id for row in rows]

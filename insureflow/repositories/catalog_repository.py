"""Read-only lookups of catalog data: providers, products and application types."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from insureflow.database.models import ApplicationType, Product, Provider
from insureflow.repositories.base_repository import BaseRepository


class ProviderRepository(BaseRepository[Provider]):
    """Repository for insurance providers."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Provider)

    async def get_by_code(self, code: str) -> Optional[Provider]:
        """Get provider by its business code."""
        result = await self.session.execute(select(Provider).where(Provider.code == code))
        return result.scalar_one_or_none()


class ProductRepository(BaseRepository[Product]):
    """Repository for catalog products."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Product)


class ApplicationTypeRepository(BaseRepository[ApplicationType]):
    """Repository for application types."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ApplicationType)

    async def get_by_code(self, code: str) -> Optional[ApplicationType]:
        result = await self.session.execute(
            select(ApplicationType).where(ApplicationType.code == code)
        )
        return result.scalar_one_or_none()

from sqlalchemy.ext.asyncio import AsyncSession

from insureflow.database.models import Application
from insureflow.repositories.base_repository import BaseRepository


class ApplicationRepository(BaseRepository[Application]):
    """Repository for applications filed against policies."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Application)

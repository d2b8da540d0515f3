"""Repositories for clients, insured persons and their passports."""

from sqlalchemy.ext.asyncio import AsyncSession

from insureflow.database.models import Client, InsuredPerson, Passport
from insureflow.repositories.base_repository import BaseRepository
from insureflow.schemas.workflows import PassportData, PersonData
from insureflow.utils.logging import get_logger

LOGGER = get_logger(__name__)

_PERSON_FIELDS = (
    "name",
    "surname",
    "patronymic",
    "birth_date",
    "phone",
    "email",
    "registration_address",
    "actual_address",
    "postal_address",
    "citizenship_country_code",
    "migration_card_number",
    "residence_permit_number",
)


def person_columns(person: PersonData) -> dict:
    """Column values shared by ``Client`` and ``InsuredPerson``."""
    return {field: getattr(person, field) for field in _PERSON_FIELDS}


class PassportRepository(BaseRepository[Passport]):
    """Repository for passports."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Passport)

    async def save_passport(
        self,
        passport: PassportData,
        client_id: int = None,
        insured_person_id: int = None,
    ) -> Passport:
        """Store a passport for a client or an insured person."""
        return await self.create(
            series=passport.series,
            number=passport.number,
            issued_by=passport.issued_by,
            issue_date=passport.issue_date,
            department_code=passport.department_code,
            client_id=client_id,
            insured_person_id=insured_person_id,
        )


class ClientRepository(BaseRepository[Client]):
    """Repository for identified clients."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Client)
        self.passports = PassportRepository(session)

    async def create_with_passport(self, external_client_id: int, person: PersonData) -> Client:
        """Create a client record together with its passport.

        Args:
            external_client_id: Client identifier of the calling system
            person: Personal data collected for the identification

        Returns:
            Created Client instance
        """
        client = await self.create(
            external_client_id=external_client_id,
            person_type=person.person_type,
            **person_columns(person),
        )
        await self.passports.save_passport(person.passport, client_id=client.id)

        LOGGER.info(f"Created client {client.id} for external client {external_client_id}")
        return client


class InsuredPersonRepository(BaseRepository[InsuredPerson]):
    """Repository for insured persons."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, InsuredPerson)
        self.passports = PassportRepository(session)

    async def create_with_passport(self, person: PersonData) -> InsuredPerson:
        insured_person = await self.create(**person_columns(person))
        await self.passports.save_passport(person.passport, insured_person_id=insured_person.id)
        return insured_person

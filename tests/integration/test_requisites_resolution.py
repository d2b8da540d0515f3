import pytest
from sqlalchemy import select

from insureflow.database.models import Requisites
from insureflow.repositories.requisites_repository import RequisitesRepository
from insureflow.services.workflow.resolver import IdempotentResourceResolver

BIC = "044525225"
FIELDS = {"bank_name": "Sber", "account": "40817810099910004312", "corr_account": None}


@pytest.mark.asyncio
async def test_insert_if_absent_reports_conflict(session):
    repository = RequisitesRepository(session)

    async with session.begin():
        created_id = await repository.insert_if_absent(BIC, FIELDS)
        assert created_id is not None
        assert await repository.insert_if_absent(BIC, {**FIELDS, "bank_name": "Other"}) is None
        assert await repository.get_by_natural_key(BIC) == created_id


@pytest.mark.asyncio
async def test_resolve_reuses_existing_row(session_maker, count_rows):
    async with session_maker() as session:
        async with session.begin():
            resolver = IdempotentResourceResolver(RequisitesRepository(session), "requisites")
            first = await resolver.resolve(BIC, FIELDS)
            second = await resolver.resolve(BIC, {**FIELDS, "bank_name": "Other"})

    assert first == second
    assert await count_rows(Requisites) == 1


@pytest.mark.asyncio
async def test_lost_race_resolves_to_committed_winner(session_maker, count_rows):
    async with session_maker() as session:
        async with session.begin():
            winner_id = await RequisitesRepository(session).insert_if_absent(BIC, FIELDS)

    async with session_maker() as session:
        async with session.begin():
            repository = RequisitesRepository(session)
            real_probe = repository.get_by_natural_key
            probes = []

            # First probe runs before the competing insert became visible
            async def stale_probe(bic):
                probes.append(bic)
                if len(probes) == 1:
                    return None
                return await real_probe(bic)

            repository.get_by_natural_key = stale_probe
            resolved = await IdempotentResourceResolver(repository, "requisites").resolve(
                BIC, {**FIELDS, "bank_name": "Loser Bank"}
            )

    assert resolved == winner_id
    assert len(probes) == 2
    assert await count_rows(Requisites) == 1
    async with session_maker() as session:
        stored = (await session.execute(select(Requisites))).scalar_one()
    assert stored.bank_name == "Sber"

from datetime import date
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from insureflow.core.exceptions import (
    AgeOutOfRangeError,
    ClientNotIdentifiedError,
    DatabaseError,
    IdentificationNotFoundError,
    InsuranceNotFoundError,
    InsuranceSumOutOfRangeError,
    ProductInactiveError,
    ProductNotFoundError,
    ShareLimitExceededError,
    StorageError,
)
from insureflow.database.models import (
    Beneficiary,
    Document,
    Insurance,
    InsuredPerson,
    OutboxEvent,
    Passport,
    Requisites,
    insurance_documents,
    person_documents,
)
from insureflow.repositories.insurance_repository import BeneficiaryRepository
from insureflow.services.insurance_service import InsuranceService


@pytest.fixture
def make_service(build_service):
    def _make(blob_store, config=None):
        return build_service(InsuranceService, blob_store, config)

    return _make


@pytest.fixture
def read_insurance(session_maker, blob_store, workflow_config, clock):
    async def _read(insurance_id):
        async with session_maker() as session:
            service = InsuranceService(session, blob_store=blob_store, config=workflow_config, clock=clock)
            return await service.get_insurance(insurance_id)

    return _read


async def assert_nothing_persisted(count_rows):
    for target in (Insurance, Beneficiary, InsuredPerson, Passport, Document, Requisites, insurance_documents):
        assert await count_rows(target) == 0, target


@pytest.mark.asyncio
async def test_create_insurance_round_trip(
    make_service, blob_store, seed_identification, make_insurance_request, make_person, make_document,
    read_insurance, count_rows,
):
    seeded = await seed_identification(document_count=2)
    insured = make_person(documents=[make_document("insured-passport.pdf")])
    request = make_insurance_request(client_id=seeded.external_client_id, insured_person=insured)

    insurance_id = await make_service(blob_store).create_insurance(request)

    insurance = await read_insurance(insurance_id)
    assert insurance.insurance_sum == Decimal("500")
    assert [b.share for b in insurance.beneficiaries] == [100.0]
    assert insurance.document_count == 3
    assert insurance.status == "new"
    assert insurance.currency == "RUB"
    assert insurance.duration_years == 5
    assert len(insurance.contract_number) == 10
    assert insurance.insured_person_id is not None

    assert len(blob_store.objects) == 1
    assert all(key.startswith("insured_persons/") for key in blob_store.objects)
    assert await count_rows(person_documents) == 1
    assert await count_rows(Passport) == 1
    assert await count_rows(OutboxEvent) == 0


@pytest.mark.asyncio
async def test_create_insurance_without_insured_person(
    make_service, blob_store, seed_identification, make_insurance_request, read_insurance,
):
    seeded = await seed_identification()
    request = make_insurance_request(client_id=seeded.external_client_id, shares=(50, 25, 25))

    insurance_id = await make_service(blob_store).create_insurance(request)

    insurance = await read_insurance(insurance_id)
    assert insurance.insured_person_id is None
    assert sorted(b.share for b in insurance.beneficiaries) == [25.0, 25.0, 50.0]
    assert insurance.document_count == 0
    assert blob_store.put_calls == 0


@pytest.mark.asyncio
async def test_share_limit_rejected_before_any_upload(
    make_service, blob_store, seed_identification, make_insurance_request, make_person, make_document, count_rows,
):
    seeded = await seed_identification()
    insured = make_person(documents=[make_document()])
    request = make_insurance_request(client_id=seeded.external_client_id, shares=(60, 41), insured_person=insured)

    with pytest.raises(ShareLimitExceededError):
        await make_service(blob_store).create_insurance(request)

    assert blob_store.put_calls == 0
    await assert_nothing_persisted(count_rows)


@pytest.mark.asyncio
async def test_nth_upload_failure_compensates_earlier_uploads(
    make_service, make_blob_store, sequential_config, seed_identification, make_insurance_request,
    make_person, make_document, count_rows,
):
    seeded = await seed_identification()
    store = make_blob_store(fail_on_put=3)
    insured = make_person(documents=[make_document(f"page-{i}.pdf") for i in range(4)])
    request = make_insurance_request(client_id=seeded.external_client_id, insured_person=insured)

    with pytest.raises(StorageError):
        await make_service(store, config=sequential_config).create_insurance(request)

    assert len(store.deleted) == 2
    assert store.objects == {}
    await assert_nothing_persisted(count_rows)


@pytest.mark.asyncio
async def test_concurrent_upload_failure_leaves_no_objects(
    make_service, make_blob_store, seed_identification, make_insurance_request, make_person, make_document,
    count_rows,
):
    seeded = await seed_identification()
    store = make_blob_store(fail_on_put=2)
    insured = make_person(documents=[make_document(f"page-{i}.pdf") for i in range(4)])
    request = make_insurance_request(client_id=seeded.external_client_id, insured_person=insured)

    with pytest.raises(StorageError):
        await make_service(store).create_insurance(request)

    assert store.objects == {}
    await assert_nothing_persisted(count_rows)


@pytest.mark.asyncio
async def test_failed_compensation_keeps_original_error(
    make_service, make_blob_store, sequential_config, seed_identification, make_insurance_request,
    make_person, make_document,
):
    seeded = await seed_identification()
    store = make_blob_store(fail_on_put=2, fail_on_delete=True)
    insured = make_person(documents=[make_document("a.pdf"), make_document("b.pdf")])
    request = make_insurance_request(client_id=seeded.external_client_id, insured_person=insured)

    service = make_service(store, config=sequential_config)
    with pytest.raises(StorageError, match="simulated outage on put #2"):
        await service.create_insurance(request)

    assert len(store.objects) == 1
    assert service.executor.last_report.orphaned == list(store.objects)


@pytest.mark.asyncio
async def test_database_failure_after_upload_is_compensated(
    make_service, blob_store, seed_identification, make_insurance_request, make_person, make_document,
    count_rows,
):
    seeded = await seed_identification()
    insured = make_person(documents=[make_document()])
    request = make_insurance_request(client_id=seeded.external_client_id, insured_person=insured)

    with patch.object(
        BeneficiaryRepository,
        "create_batch",
        side_effect=OperationalError("INSERT INTO beneficiaries", {}, Exception("disk I/O error")),
    ):
        with pytest.raises(DatabaseError):
            await make_service(blob_store).create_insurance(request)

    assert blob_store.objects == {}
    assert len(blob_store.deleted) == 1
    await assert_nothing_persisted(count_rows)


@pytest.mark.asyncio
async def test_requisites_are_shared_and_never_overwritten(
    make_service, blob_store, seed_identification, make_insurance_request, session_maker, count_rows,
):
    seeded = await seed_identification()
    first = make_insurance_request(client_id=seeded.external_client_id)
    second = first.model_copy(update={"requisites": first.requisites.model_copy(update={"bank_name": "Renamed"})})

    first_id = await make_service(blob_store).create_insurance(first)
    second_id = await make_service(blob_store).create_insurance(second)

    assert first_id != second_id
    assert await count_rows(Requisites) == 1
    async with session_maker() as session:
        requisites = (await session.execute(select(Requisites))).scalar_one()
    assert requisites.bank_name == "Sber"


@pytest.mark.asyncio
async def test_client_not_identified(make_service, blob_store, seed_identification, make_insurance_request):
    seeded = await seed_identification(status="in_progress")

    with pytest.raises(ClientNotIdentifiedError):
        await make_service(blob_store).create_insurance(
            make_insurance_request(client_id=seeded.external_client_id)
        )


@pytest.mark.asyncio
async def test_missing_identification(make_service, blob_store, make_insurance_request):
    with pytest.raises(IdentificationNotFoundError):
        await make_service(blob_store).create_insurance(make_insurance_request(client_id=999))


@pytest.mark.asyncio
async def test_missing_product(make_service, blob_store, seed_identification, make_insurance_request):
    seeded = await seed_identification()

    with pytest.raises(ProductNotFoundError):
        await make_service(blob_store).create_insurance(
            make_insurance_request(client_id=seeded.external_client_id, product_id=9999)
        )


@pytest.mark.asyncio
async def test_inactive_product(make_service, blob_store, catalog, seed_identification, make_insurance_request):
    seeded = await seed_identification()

    with pytest.raises(ProductInactiveError):
        await make_service(blob_store).create_insurance(
            make_insurance_request(client_id=seeded.external_client_id, product_id=catalog.retired_product_id)
        )


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["99.99", "1000.01"])
async def test_sum_outside_product_limits(
    make_service, blob_store, seed_identification, make_insurance_request, amount,
):
    seeded = await seed_identification()

    with pytest.raises(InsuranceSumOutOfRangeError):
        await make_service(blob_store).create_insurance(
            make_insurance_request(client_id=seeded.external_client_id, insurance_sum=amount)
        )


@pytest.mark.asyncio
async def test_underage_insured_person(
    make_service, blob_store, seed_identification, make_insurance_request, make_person, make_document, count_rows,
):
    seeded = await seed_identification()
    insured = make_person(birth_date=date(2008, 10, 20), documents=[make_document()])

    with pytest.raises(AgeOutOfRangeError):
        await make_service(blob_store).create_insurance(
            make_insurance_request(client_id=seeded.external_client_id, insured_person=insured)
        )

    assert blob_store.put_calls == 0
    await assert_nothing_persisted(count_rows)


@pytest.mark.asyncio
async def test_get_missing_insurance(read_insurance, catalog):
    with pytest.raises(InsuranceNotFoundError):
        await read_insurance(uuid4())

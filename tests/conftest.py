"""Pytest configuration and shared fixtures."""

import base64
import os
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio

# Set required environment variables for testing BEFORE importing the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("AUTO_MIGRATE", "false")

from fastapi.testclient import TestClient
from sqlalchemy import func, insert, select

from insureflow.core.config import settings
from insureflow.core.database import Base, build_engine, build_session_maker
from insureflow.core.exceptions import StorageError
from insureflow.database.models import (
    ApplicationType,
    Client,
    Document,
    Identification,
    Product,
    Provider,
    client_documents,
)
from insureflow.main import app
from insureflow.schemas.enums import IdentificationStatus
from insureflow.schemas.workflows import (
    BeneficiaryData,
    CreateInsuranceRequest,
    DocumentUpload,
    PassportData,
    PersonData,
    RequisitesData,
)
from insureflow.services.storage_service import BlobStore

TODAY = date(2026, 10, 19)


class FakeBlobStore(BlobStore):
    """In-memory object store that can be told to fail."""

    def __init__(self, fail_on_put: int = None, fail_on_delete: bool = False):
        self.objects = {}
        self.put_calls = 0
        self.deleted = []
        self.fail_on_put = fail_on_put
        self.fail_on_delete = fail_on_delete

    async def put(self, key: str, content: bytes, content_type: str) -> None:
        self.put_calls += 1
        if self.fail_on_put is not None and self.put_calls == self.fail_on_put:
            raise StorageError(f"Upload failed: simulated outage on put #{self.put_calls}")
        self.objects[key] = content

    async def delete(self, key: str) -> None:
        if self.fail_on_delete:
            raise StorageError("Delete failed: simulated outage")
        self.deleted.append(key)
        self.objects.pop(key, None)


@pytest.fixture
def test_client() -> TestClient:
    """Create FastAPI test client.

    Returns:
        TestClient: FastAPI test client instance
    """
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def make_blob_store():
    return FakeBlobStore


@pytest.fixture
def clock():
    return lambda: TODAY


@pytest.fixture
def workflow_config():
    return settings.workflow.model_copy()


@pytest.fixture
def sequential_config():
    return settings.workflow.model_copy(update={"concurrent_uploads": False})


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """File backed SQLite database with the full schema, one per test."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'insureflow.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    return build_session_maker(db_engine)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def count_rows(session_maker):
    """Count committed rows of a model or association table."""

    async def _count(target) -> int:
        async with session_maker() as session:
            result = await session.execute(select(func.count()).select_from(target))
            return result.scalar_one()

    return _count


@pytest_asyncio.fixture
async def catalog(session_maker):
    """Provider with an active and an inactive product plus one application type."""
    async with session_maker() as session:
        async with session.begin():
            provider = Provider(code="alfa", name="Alfa Insurance")
            session.add(provider)
            await session.flush()

            product = Product(
                provider_id=provider.id,
                name="Life Basic",
                currency="RUB",
                min_sum=Decimal("100"),
                max_sum=Decimal("1000"),
                is_active=True,
            )
            retired_product = Product(
                provider_id=provider.id,
                name="Life Legacy",
                currency="RUB",
                min_sum=Decimal("100"),
                max_sum=Decimal("1000"),
                is_active=False,
            )
            application_type = ApplicationType(code="claim", name="Insurance claim")
            session.add_all([product, retired_product, application_type])
            await session.flush()

            return SimpleNamespace(
                provider_id=provider.id,
                provider_code=provider.code,
                product_id=product.id,
                retired_product_id=retired_product.id,
                application_type=application_type.code,
            )


@pytest.fixture
def seed_identification(session_maker, catalog):
    """Store a client with an identification in the given status."""

    async def _seed(
        external_client_id: int = 501,
        status: str = IdentificationStatus.IDENTIFIED.value,
        document_count: int = 0,
    ) -> SimpleNamespace:
        async with session_maker() as session:
            async with session.begin():
                client = Client(
                    external_client_id=external_client_id,
                    person_type="individual",
                    name="Anna",
                    surname="Petrova",
                    birth_date=date(1990, 5, 17),
                )
                session.add(client)
                await session.flush()

                document_ids = []
                for index in range(document_count):
                    document = Document(
                        name=f"scan-{index}.pdf",
                        storage_key=f"clients/{client.id}/prior-{index}.pdf",
                        content_type="application/pdf",
                        doc_type="passport_scan",
                    )
                    session.add(document)
                    await session.flush()
                    document_ids.append(document.id)
                if document_ids:
                    await session.execute(
                        insert(client_documents),
                        [{"client_id": client.id, "document_id": doc_id} for doc_id in document_ids],
                    )

                identification = Identification(
                    client_id=client.id,
                    external_client_id=external_client_id,
                    provider_id=catalog.provider_id,
                    status=status,
                )
                session.add(identification)
                await session.flush()

                return SimpleNamespace(
                    client_id=client.id,
                    external_client_id=external_client_id,
                    identification_id=identification.id,
                    document_ids=document_ids,
                )

    return _seed


@pytest.fixture
def make_document():
    def _make(name: str = "passport.pdf", payload: bytes = b"%PDF-1.4 scan", doc_type: str = "passport_scan"):
        return DocumentUpload(
            name=name,
            doc_type=doc_type,
            content=base64.b64encode(payload).decode(),
        )

    return _make


@pytest.fixture
def make_person(make_document):
    def _make(birth_date: date = date(1990, 5, 17), documents=(), person_type: str = "individual"):
        return PersonData(
            person_type=person_type,
            name="Ivan",
            surname="Sidorov",
            birth_date=birth_date,
            phone="+70000000000",
            passport=PassportData(
                series="4510",
                number="123456",
                issued_by="Department of Internal Affairs",
                issue_date=date(2010, 6, 1),
            ),
            documents=list(documents),
        )

    return _make


@pytest.fixture
def make_insurance_request(catalog):
    def _make(
        client_id: int = 501,
        shares=(100.0,),
        insurance_sum: str = "500",
        insured_person=None,
        product_id: int = None,
        bic: str = "044525225",
    ) -> CreateInsuranceRequest:
        return CreateInsuranceRequest(
            client_id=client_id,
            product_id=product_id or catalog.product_id,
            insurance_sum=Decimal(insurance_sum),
            requisites=RequisitesData(
                bic=bic,
                bank_name="Sber",
                account="40817810099910004312",
                corr_account="30101810400000000225",
            ),
            insured_person=insured_person,
            beneficiaries=[
                BeneficiaryData(
                    name=f"Heir{index}",
                    surname="Sidorova",
                    birth_date=date(2000, 1, 1),
                    share=share,
                    relation="child",
                )
                for index, share in enumerate(shares)
            ],
        )

    return _make


@pytest_asyncio.fixture
async def build_service(session_maker, workflow_config, clock):
    """Build a workflow service bound to its own session."""
    sessions = []

    def _build(service_class, blob_store, config=None):
        session = session_maker()
        sessions.append(session)
        return service_class(session, blob_store=blob_store, config=config or workflow_config, clock=clock)

    yield _build

    for session in sessions:
        await session.close()

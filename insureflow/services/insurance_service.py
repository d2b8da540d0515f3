"""Insurance policy workflow.

Creates a policy for an identified client: validates the product, the
identification and the financial data, resolves the bank requisites, stores
the optional insured person with their documents, then creates the policy
with its beneficiaries and links every relevant document to it.
"""

import secrets
import string
from dataclasses import dataclass
from typing import Optional, Tuple
from uuid import UUID

from insureflow.core.exceptions import InsuranceNotFoundError, ProviderNotFoundError
from insureflow.database.models import Identification, Product
from insureflow.models.artifacts import CompensationLog
from insureflow.repositories.catalog_repository import ProductRepository, ProviderRepository
from insureflow.repositories.identification_repository import IdentificationRepository
from insureflow.repositories.insurance_repository import BeneficiaryRepository, InsuranceRepository
from insureflow.repositories.person_repository import InsuredPersonRepository
from insureflow.repositories.requisites_repository import RequisitesRepository
from insureflow.schemas.enums import InsuranceStatus
from insureflow.schemas.workflows import (
    BeneficiaryResponse,
    CreateInsuranceRequest,
    InsuranceResponse,
    PersonData,
)
from insureflow.services.base_service import WorkflowService
from insureflow.services.workflow.attachments import DocumentOwner, OwnerKind
from insureflow.services.workflow.resolver import IdempotentResourceResolver
from insureflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class InsuredPersonResult:
    """Outcome of the insured person sub-steps."""

    person_id: Optional[int]
    document_ids: Tuple[int, ...] = ()


NO_INSURED_PERSON = InsuredPersonResult(person_id=None)


def generate_contract_number(length: int) -> str:
    return "".join(secrets.choice(string.digits) for _ in range(length))


class InsuranceService(WorkflowService):
    """Service for the insurance policy workflow."""

    def __init__(self, session, blob_store=None, config=None, **kwargs):
        super().__init__(session, blob_store=blob_store, config=config, **kwargs)
        self.products = ProductRepository(session)
        self.providers = ProviderRepository(session)
        self.identifications = IdentificationRepository(session)
        self.insured_persons = InsuredPersonRepository(session)
        self.insurances = InsuranceRepository(session)
        self.beneficiaries = BeneficiaryRepository(session)
        self.requisites = IdempotentResourceResolver(RequisitesRepository(session), "requisites")

    async def create_insurance(self, request: CreateInsuranceRequest) -> UUID:
        """Create an insurance policy.

        Args:
            request: Policy data submitted by the client

        Returns:
            ID of the created insurance

        Raises:
            NotFoundError: Product, provider or identification is missing
            PreconditionFailedError: A business rule rejected the request
            UpstreamFailureError: Object store or database failed
        """
        return await self.execute("create_insurance", request=request)

    async def _create_insurance(self, log: CompensationLog, request: CreateInsuranceRequest) -> UUID:
        product, identification = await self._load_context(request)

        self.validation.insurance_sum(request.insurance_sum, product)
        self.validation.shares(request.beneficiaries)

        requisites_id = await self.requisites.resolve(
            request.requisites.bic,
            request.requisites.model_dump(exclude={"bic"}),
        )

        insured = await self._process_insured_person(request.insured_person, log)

        insurance = await self.insurances.create(
            contract_number=generate_contract_number(self.config.contract_number_length),
            status=InsuranceStatus.NEW.value,
            currency=product.currency,
            duration_years=self.config.default_insurance_duration,
            client_id=request.client_id,
            identification_id=identification.id,
            product_id=product.id,
            provider_id=identification.provider_id,
            requisites_id=requisites_id,
            insured_person_id=insured.person_id,
            insurance_sum=request.insurance_sum,
        )

        await self.beneficiaries.create_batch(insurance.id, request.beneficiaries)

        prior_ids = await self.attachments.prior_client_documents(identification.client_id)
        linked = await self.attachments.link_all(
            DocumentOwner(OwnerKind.INSURANCE, insurance.id),
            uploaded_ids=insured.document_ids,
            prior_ids=prior_ids,
        )

        LOGGER.info(
            f"Created insurance {insurance.id}",
            extra={"client_id": request.client_id, "documents": linked},
        )
        return insurance.id

    async def _load_context(self, request: CreateInsuranceRequest) -> Tuple[Product, Identification]:
        product = self.validation.product(
            await self.products.get_by_id(request.product_id), request.product_id
        )

        provider = await self.providers.get_by_id(product.provider_id)
        if provider is None:
            raise ProviderNotFoundError(str(product.provider_id))

        identification = await self.identifications.get_by_client_and_provider(
            request.client_id, provider.id
        )
        identification = self.validation.identification(
            identification, request.client_id, provider.code
        )
        return product, identification

    async def _process_insured_person(
        self, person: Optional[PersonData], log: CompensationLog
    ) -> InsuredPersonResult:
        if person is None:
            return NO_INSURED_PERSON

        self.validation.age(person.birth_date, self.clock())

        insured_person = await self.insured_persons.create_with_passport(person)
        document_ids = await self.attachments.attach(
            DocumentOwner(OwnerKind.INSURED_PERSON, insured_person.id),
            person.documents,
            log,
        )
        return InsuredPersonResult(person_id=insured_person.id, document_ids=tuple(document_ids))

    async def get_insurance(self, insurance_id: UUID) -> InsuranceResponse:
        """Re-read a committed insurance with its beneficiaries and document count."""
        async with self.session.begin():
            insurance = await self.insurances.get_with_beneficiaries(insurance_id)
            if insurance is None:
                raise InsuranceNotFoundError(insurance_id)
            document_count = await self.attachments.documents.count_for_insurance(insurance_id)

        return InsuranceResponse(
            id=insurance.id,
            contract_number=insurance.contract_number,
            status=insurance.status,
            currency=insurance.currency,
            duration_years=insurance.duration_years,
            insurance_sum=insurance.insurance_sum,
            product_id=insurance.product_id,
            requisites_id=insurance.requisites_id,
            insured_person_id=insurance.insured_person_id,
            beneficiaries=[
                BeneficiaryResponse.model_validate(beneficiary)
                for beneficiary in insurance.beneficiaries
            ],
            document_count=document_count,
        )

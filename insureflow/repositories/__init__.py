"""Repository layer modules."""

from insureflow.repositories.application_repository import ApplicationRepository
from insureflow.repositories.catalog_repository import (
    ApplicationTypeRepository,
    ProductRepository,
    ProviderRepository,
)
from insureflow.repositories.document_repository import DocumentRepository
from insureflow.repositories.identification_repository import IdentificationRepository
from insureflow.repositories.insurance_repository import BeneficiaryRepository, InsuranceRepository
from insureflow.repositories.outbox_repository import OutboxRepository
from insureflow.repositories.person_repository import (
    ClientRepository,
    InsuredPersonRepository,
    PassportRepository,
)
from insureflow.repositories.requisites_repository import RequisitesRepository

__all__ = [
    "ApplicationRepository",
    "ApplicationTypeRepository",
    "BeneficiaryRepository",
    "ClientRepository",
    "DocumentRepository",
    "IdentificationRepository",
    "InsuranceRepository",
    "InsuredPersonRepository",
    "OutboxRepository",
    "PassportRepository",
    "ProductRepository",
    "ProviderRepository",
    "RequisitesRepository",
]

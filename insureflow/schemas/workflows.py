"""Request and response models for the insurance, identification and application workflows.

Requests are frozen: a workflow never mutates its input once started.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Base64Bytes, BaseModel, ConfigDict, Field


class RequestModel(BaseModel):
    """Base for immutable workflow inputs."""

    model_config = ConfigDict(frozen=True)


class PassportData(RequestModel):
    """Identity document of a person."""

    series: str = Field(..., min_length=1)
    number: str = Field(..., min_length=1)
    issued_by: str
    issue_date: date
    department_code: Optional[str] = None


class DocumentUpload(RequestModel):
    """Document blob submitted with a request, base64 encoded in JSON."""

    name: str = Field(..., min_length=1, description="Display name of the document")
    doc_type: str = Field(..., min_length=1, description="Document type tag, e.g. 'passport_scan'")
    content: Base64Bytes = Field(..., description="Base64 encoded file content")
    content_type: Optional[str] = Field(
        default=None, description="Declared MIME type; detected from content when omitted"
    )


class PersonData(RequestModel):
    """Personal data of a client or of an insured person."""

    person_type: str = Field(default="individual")
    name: str
    surname: str
    patronymic: Optional[str] = None
    birth_date: date
    phone: Optional[str] = None
    email: Optional[str] = None
    registration_address: Optional[str] = None
    actual_address: Optional[str] = None
    postal_address: Optional[str] = None
    passport: PassportData
    citizenship_country_code: Optional[str] = None
    migration_card_number: Optional[str] = None
    residence_permit_number: Optional[str] = None
    documents: list[DocumentUpload] = Field(default_factory=list)


class BeneficiaryData(RequestModel):
    """Beneficiary of a policy; share is a percentage."""

    name: str
    surname: str
    patronymic: Optional[str] = None
    birth_date: date
    share: float
    relation: str


class RequisitesData(RequestModel):
    """Bank account details; ``bic`` is the natural key."""

    bic: str = Field(..., min_length=9, max_length=9, pattern=r"^\d{9}$")
    bank_name: str
    account: str
    corr_account: Optional[str] = None


class CreateInsuranceRequest(RequestModel):
    """Input of the insurance workflow."""

    client_id: int = Field(..., description="External client identifier")
    product_id: int
    insurance_sum: Decimal = Field(..., gt=0)
    requisites: RequisitesData
    insured_person: Optional[PersonData] = None
    beneficiaries: list[BeneficiaryData] = Field(default_factory=list)


class RegisterIdentificationRequest(RequestModel):
    """First contact of a client with a provider."""

    client_id: int
    provider: str
    person: PersonData


class AttachReferenceRequest(RequestModel):
    """Attach an external reference (e.g. a policy) to the client's identification."""

    reference_id: int
    client_id: int
    provider: str
    person: PersonData


class CreateApplicationRequest(RequestModel):
    """Input of the application workflow."""

    insurance_id: UUID
    client_id: int
    application_type: str
    documents: list[DocumentUpload] = Field(default_factory=list)


class BeneficiaryResponse(BaseModel):
    """Stored beneficiary of a policy."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    surname: str
    share: float
    relation: str


class InsuranceResponse(BaseModel):
    """Committed insurance policy as re-read from storage."""

    id: UUID
    contract_number: str
    status: str
    currency: str
    duration_years: int
    insurance_sum: Decimal
    product_id: int
    requisites_id: int
    insured_person_id: Optional[int] = None
    beneficiaries: list[BeneficiaryResponse] = Field(default_factory=list)
    document_count: int = 0


class IdentificationResponse(BaseModel):
    """Identification a request ended up attached to."""

    identification_id: int
    status: str
    created: bool = Field(..., description="True when a new identification record was created")
    outbox_event_id: Optional[int] = None


class CreatedResponse(BaseModel):
    """Identifier of a freshly created root entity."""

    id: UUID


class UpdateIdentificationStatusRequest(RequestModel):
    """Provider callback reporting the outcome of an identification."""

    status: str = Field(..., min_length=1)

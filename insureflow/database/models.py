"""SQLAlchemy models for all database tables."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    TIMESTAMP,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from insureflow.core.database import Base
from insureflow.schemas.enums import ApplicationStatus, IdentificationStatus, InsuranceStatus


class PersonColumnsMixin:
    """Personal data shared by identified clients and insured persons."""

    name: Mapped[str] = mapped_column(String, nullable=False)
    surname: Mapped[str] = mapped_column(String, nullable=False)
    patronymic: Mapped[str | None] = mapped_column(String, nullable=True)
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    registration_address: Mapped[str | None] = mapped_column(String, nullable=True)
    actual_address: Mapped[str | None] = mapped_column(String, nullable=True)
    postal_address: Mapped[str | None] = mapped_column(String, nullable=True)
    citizenship_country_code: Mapped[str | None] = mapped_column(String(3), nullable=True)
    migration_card_number: Mapped[str | None] = mapped_column(String, nullable=True)
    residence_permit_number: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )


# Association tables linking document metadata rows to their owners
client_documents = Table(
    "client_documents",
    Base.metadata,
    Column("client_id", ForeignKey("clients.id", ondelete="CASCADE"), primary_key=True),
    Column("document_id", ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True),
)

person_documents = Table(
    "person_documents",
    Base.metadata,
    Column("insured_person_id", ForeignKey("insured_persons.id", ondelete="CASCADE"), primary_key=True),
    Column("document_id", ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True),
)

insurance_documents = Table(
    "insurance_documents",
    Base.metadata,
    Column("insurance_id", ForeignKey("insurances.id", ondelete="CASCADE"), primary_key=True),
    Column("document_id", ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True),
)

application_documents = Table(
    "application_documents",
    Base.metadata,
    Column("application_id", ForeignKey("applications.id", ondelete="CASCADE"), primary_key=True),
    Column("document_id", ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True),
)


class Provider(Base):
    """Insurance company that identifies clients and issues policies."""

    __tablename__ = "providers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)

    products: Mapped[list["Product"]] = relationship("Product", back_populates="provider")


class Product(Base):
    """Catalog product with its insurance sum limits."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    provider_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("providers.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="RUB")
    min_sum: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    max_sum: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    provider: Mapped["Provider"] = relationship("Provider", back_populates="products")


class Requisites(Base):
    """Bank account data, one row per bank identifier code."""

    __tablename__ = "requisites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bic: Mapped[str] = mapped_column(String(9), unique=True, nullable=False)
    bank_name: Mapped[str] = mapped_column(String, nullable=False)
    account: Mapped[str] = mapped_column(String, nullable=False)
    corr_account: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )


class Client(PersonColumnsMixin, Base):
    """Client data collected for an identification."""

    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_client_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    person_type: Mapped[str] = mapped_column(String, nullable=False)

    passports: Mapped[list["Passport"]] = relationship("Passport", back_populates="client")
    identifications: Mapped[list["Identification"]] = relationship(
        "Identification", back_populates="client"
    )
    documents: Mapped[list["Document"]] = relationship("Document", secondary=client_documents)


class InsuredPerson(PersonColumnsMixin, Base):
    """Person insured by a policy when different from the client."""

    __tablename__ = "insured_persons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    passports: Mapped[list["Passport"]] = relationship("Passport", back_populates="insured_person")
    documents: Mapped[list["Document"]] = relationship("Document", secondary=person_documents)


class Passport(Base):
    """Passport of a client or of an insured person."""

    __tablename__ = "passports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    series: Mapped[str] = mapped_column(String, nullable=False)
    number: Mapped[str] = mapped_column(String, nullable=False)
    issued_by: Mapped[str] = mapped_column(String, nullable=False)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    department_code: Mapped[str | None] = mapped_column(String, nullable=True)
    client_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=True
    )
    insured_person_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("insured_persons.id", ondelete="CASCADE"), nullable=True
    )

    client: Mapped["Client | None"] = relationship("Client", back_populates="passports")
    insured_person: Mapped["InsuredPerson | None"] = relationship(
        "InsuredPerson", back_populates="passports"
    )


class Document(Base):
    """Metadata of a document whose content lives in the object store."""

    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    storage_key: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    content_type: Mapped[str] = mapped_column(String, nullable=False)
    doc_type: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )


class Identification(Base):
    """Identification of a client with a provider."""

    __tablename__ = "identifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("clients.id"), nullable=False
    )
    external_client_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    provider_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("providers.id"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=IdentificationStatus.NEW.value
    )  # new | in_progress | identified | not_identified | error
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    client: Mapped["Client"] = relationship("Client", back_populates="identifications")
    provider: Mapped["Provider"] = relationship("Provider")
    references: Mapped[list["IdentificationReference"]] = relationship(
        "IdentificationReference", back_populates="identification", cascade="all, delete-orphan"
    )


class IdentificationReference(Base):
    """External reference (e.g. a policy) attached to an identification."""

    __tablename__ = "identification_references"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    identification_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("identifications.id", ondelete="CASCADE"), nullable=False
    )
    external_reference_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    identification: Mapped["Identification"] = relationship(
        "Identification", back_populates="references"
    )


class OutboxEvent(Base):
    """Notification waiting to be relayed to downstream systems."""

    __tablename__ = "outbox_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reference_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    event_kind: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )


class Insurance(Base):
    """Insurance policy created by the insurance workflow."""

    __tablename__ = "insurances"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    contract_number: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=InsuranceStatus.NEW.value
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    duration_years: Mapped[int] = mapped_column(Integer, nullable=False)
    client_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    identification_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("identifications.id"), nullable=False
    )
    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id"), nullable=False
    )
    provider_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("providers.id"), nullable=False
    )
    requisites_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("requisites.id"), nullable=False
    )
    insured_person_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("insured_persons.id"), nullable=True
    )
    insurance_sum: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    identification: Mapped["Identification"] = relationship("Identification")
    requisites: Mapped["Requisites"] = relationship("Requisites")
    insured_person: Mapped["InsuredPerson | None"] = relationship("InsuredPerson")
    beneficiaries: Mapped[list["Beneficiary"]] = relationship(
        "Beneficiary", back_populates="insurance", cascade="all, delete-orphan"
    )
    documents: Mapped[list["Document"]] = relationship("Document", secondary=insurance_documents)


class Beneficiary(Base):
    """Beneficiary of an insurance policy with its share in percent."""

    __tablename__ = "beneficiaries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    insurance_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("insurances.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    surname: Mapped[str] = mapped_column(String, nullable=False)
    patronymic: Mapped[str | None] = mapped_column(String, nullable=True)
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    share: Mapped[float] = mapped_column(Float, nullable=False)
    relation: Mapped[str] = mapped_column(String, nullable=False)

    insurance: Mapped["Insurance"] = relationship("Insurance", back_populates="beneficiaries")


class ApplicationType(Base):
    """Kind of application a client can file (claim, termination, ...)."""

    __tablename__ = "application_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)


class Application(Base):
    """Application filed by a client against one of their policies."""

    __tablename__ = "applications"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    insurance_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("insurances.id"), nullable=False
    )
    application_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("application_types.id"), nullable=False
    )
    client_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=ApplicationStatus.NEW.value
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    application_type: Mapped["ApplicationType"] = relationship("ApplicationType")
    documents: Mapped[list["Document"]] = relationship("Document", secondary=application_documents)

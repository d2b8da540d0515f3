"""Database module for SQLAlchemy models and session management."""

from insureflow.core.database import Base, async_session_maker, engine, get_async_session
from insureflow.database.models import (
    Application,
    ApplicationType,
    Beneficiary,
    Client,
    Document,
    Identification,
    IdentificationReference,
    Insurance,
    InsuredPerson,
    OutboxEvent,
    Passport,
    Product,
    Provider,
    Requisites,
)

__all__ = [
    "Base",
    "engine",
    "async_session_maker",
    "get_async_session",
    "Application",
    "ApplicationType",
    "Beneficiary",
    "Client",
    "Document",
    "Identification",
    "IdentificationReference",
    "Insurance",
    "InsuredPerson",
    "OutboxEvent",
    "Passport",
    "Product",
    "Provider",
    "Requisites",
]

"""Status and event enumerations shared by models, schemas and services."""

from enum import Enum


class IdentificationStatus(str, Enum):
    """Lifecycle state of a client identification with a provider."""
    NEW = "new"
    IN_PROGRESS = "in_progress"
    IDENTIFIED = "identified"
    NOT_IDENTIFIED = "not_identified"
    ERROR = "error"


class InsuranceStatus(str, Enum):
    """Lifecycle state of an insurance policy."""
    NEW = "new"
    ACTIVE = "active"
    CANCELLED = "cancelled"


class ApplicationStatus(str, Enum):
    """Lifecycle state of an application filed against a policy."""
    NEW = "new"
    IN_REVIEW = "in_review"
    CLOSED = "closed"


class OutboxEventKind(str, Enum):
    """Notification kinds written to the outbox for downstream systems."""
    REFERENCE_IDENTIFIED = "identified"

"""Custom exception hierarchy.

Every workflow error belongs to one of four kinds surfaced to callers:
``NotFoundError``, ``PreconditionFailedError``, ``ConflictError`` and
``UpstreamFailureError``. Anything else escaping a workflow is a defect.
"""


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass


# --- NotFound -------------------------------------------------------------

class NotFoundError(AppError):
    """A referenced entity does not exist."""
    pass


class ProductNotFoundError(NotFoundError):
    """Raised when the requested product does not exist."""
    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class ProviderNotFoundError(NotFoundError):
    """Raised when a provider code is unknown."""
    def __init__(self, provider: str):
        super().__init__(f"Provider '{provider}' not found")
        self.provider = provider


class IdentificationNotFoundError(NotFoundError):
    """Raised when the client has no identification with the provider."""
    def __init__(self, client_id: int, provider: str = None):
        detail = f" with provider '{provider}'" if provider else ""
        super().__init__(f"Identification for client {client_id}{detail} not found")
        self.client_id = client_id
        self.provider = provider


class InsuranceNotFoundError(NotFoundError):
    """Raised when an insurance policy does not exist."""
    def __init__(self, insurance_id):
        super().__init__(f"Insurance {insurance_id} not found")
        self.insurance_id = insurance_id


class ApplicationTypeNotFoundError(NotFoundError):
    """Raised when an application type code is unknown."""
    def __init__(self, code: str):
        super().__init__(f"Application type '{code}' not found")
        self.code = code


# --- PreconditionFailed ---------------------------------------------------

class PreconditionFailedError(AppError):
    """A business rule rejected the request."""
    pass


class ProductInactiveError(PreconditionFailedError):
    """Raised when the product exists but is not sold anymore."""
    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} is not active")
        self.product_id = product_id


class ClientNotIdentifiedError(PreconditionFailedError):
    """Raised when the identification exists but is not in status identified."""
    def __init__(self, client_id: int, status: str):
        super().__init__(f"Client {client_id} is not identified (status: {status})")
        self.client_id = client_id
        self.status = status


class InsuranceSumOutOfRangeError(PreconditionFailedError):
    """Raised when the insurance sum is outside the product limits."""
    def __init__(self, amount, min_sum, max_sum):
        super().__init__(f"Insurance sum {amount} is outside of [{min_sum}, {max_sum}]")
        self.amount = amount
        self.min_sum = min_sum
        self.max_sum = max_sum


class InvalidShareError(PreconditionFailedError):
    """Raised when a single beneficiary share is outside [0, 100]."""
    def __init__(self, share: float):
        super().__init__(f"Beneficiary share {share} must be between 0 and 100")
        self.share = share


class ShareLimitExceededError(PreconditionFailedError):
    """Raised when beneficiary shares add up to more than 100%."""
    def __init__(self, total: float):
        super().__init__(f"Sum of beneficiary shares {total} exceeds 100")
        self.total = total


class AgeOutOfRangeError(PreconditionFailedError):
    """Raised when a person's age is outside the allowed bounds."""
    def __init__(self, age: int, min_age: int, max_age: int):
        super().__init__(f"Age {age} must be between {min_age} and {max_age}")
        self.age = age
        self.min_age = min_age
        self.max_age = max_age


class InvalidPersonDataError(PreconditionFailedError):
    """Raised when person data cannot be stored as given."""
    pass


class InvalidStatusTransitionError(PreconditionFailedError):
    """Raised when an identification status change is not allowed."""
    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move identification from '{current}' to '{target}'")
        self.current = current
        self.target = target


# --- Conflict -------------------------------------------------------------

class ConflictError(AppError):
    """The request collides with already stored state."""
    pass


class ReferenceAlreadyAttachedError(ConflictError):
    """Raised when an external reference id was already attached."""
    def __init__(self, reference_id: int):
        super().__init__(f"Reference {reference_id} is already attached to an identification")
        self.reference_id = reference_id


class IdentificationAlreadyExistsError(ConflictError):
    """Raised on a repeated identification request for a (client, provider) pair."""
    def __init__(self, client_id: int, provider: str):
        super().__init__(f"Identification for client {client_id} with provider '{provider}' already exists")
        self.client_id = client_id
        self.provider = provider


# --- UpstreamFailure ------------------------------------------------------

class UpstreamFailureError(AppError):
    """A collaborator failed for reasons unrelated to business rules."""
    pass


class APIClientError(UpstreamFailureError):
    """Raised when an external API call fails."""
    pass


class StorageError(APIClientError):
    """Raised when the object store rejects or fails an operation."""
    pass


class DatabaseError(UpstreamFailureError):
    """Raised when a database operation fails."""
    pass


# --- Defects --------------------------------------------------------------

class UnexpectedIdentificationStatusError(AppError):
    """Raised when a stored identification status is not a known state."""
    def __init__(self, status):
        super().__init__(f"Unexpected identification status: {status!r}")
        self.status = status

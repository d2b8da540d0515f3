"""Business rule checks over data the workflow has already fetched.

Nothing here performs I/O. Each check raises its own error kind so callers
can tell "not found" from "not identified" and "invalid share" from
"limit exceeded".
"""

import math
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from insureflow.core.config import WorkflowSettings
from insureflow.core.exceptions import (
    AgeOutOfRangeError,
    ClientNotIdentifiedError,
    IdentificationNotFoundError,
    InsuranceSumOutOfRangeError,
    InvalidPersonDataError,
    InvalidShareError,
    ProductInactiveError,
    ProductNotFoundError,
    ShareLimitExceededError,
)
from insureflow.database.models import Identification, Product
from insureflow.schemas.workflows import BeneficiaryData
from insureflow.services.workflow.identification_state import is_identified

MAX_SHARE = 100.0


def age_on(birth_date: date, today: date) -> int:
    """Full years between ``birth_date`` and ``today``."""
    had_birthday = (today.month, today.day) >= (birth_date.month, birth_date.day)
    return today.year - birth_date.year - (0 if had_birthday else 1)


def ensure_product_active(product: Optional[Product], product_id: int) -> Product:
    if product is None:
        raise ProductNotFoundError(product_id)
    if not product.is_active:
        raise ProductInactiveError(product_id)
    return product


def ensure_identified(
    identification: Optional[Identification],
    client_id: int,
    provider: str,
) -> Identification:
    """The client must have an identification in status ``identified``."""
    if identification is None:
        raise IdentificationNotFoundError(client_id, provider)
    if not is_identified(identification.status):
        raise ClientNotIdentifiedError(client_id, identification.status)
    return identification


def ensure_sum_within_limits(amount: Decimal, product: Product) -> Decimal:
    """Inclusive check of ``amount`` against the product's [min, max] range."""
    if not (product.min_sum <= amount <= product.max_sum):
        raise InsuranceSumOutOfRangeError(amount, product.min_sum, product.max_sum)
    return amount


def ensure_shares(beneficiaries: Sequence[BeneficiaryData], epsilon: float) -> float:
    """Validate beneficiary shares and return their total.

    Every share must lie in [0, 100]; the total may exceed 100 only by
    ``epsilon`` to absorb floating point accumulation.
    """
    for beneficiary in beneficiaries:
        if not (0.0 <= beneficiary.share <= MAX_SHARE):
            raise InvalidShareError(beneficiary.share)

    total = math.fsum(beneficiary.share for beneficiary in beneficiaries)
    if total > MAX_SHARE + epsilon:
        raise ShareLimitExceededError(total)
    return total


def ensure_age_allowed(birth_date: date, today: date, min_age: int, max_age: int) -> int:
    """Age must be in [min_age, max_age): inclusive lower, exclusive upper bound."""
    age = age_on(birth_date, today)
    if age < min_age or age >= max_age:
        raise AgeOutOfRangeError(age, min_age, max_age)
    return age


def ensure_person_type(person_type: str) -> str:
    if not person_type or not person_type.strip():
        raise InvalidPersonDataError("person_type is empty")
    return person_type


class ValidationPipeline:
    """Validation rules bound to the configured limits."""

    def __init__(self, config: WorkflowSettings):
        self.config = config

    def product(self, product: Optional[Product], product_id: int) -> Product:
        return ensure_product_active(product, product_id)

    def identification(
        self, identification: Optional[Identification], client_id: int, provider: str
    ) -> Identification:
        return ensure_identified(identification, client_id, provider)

    def insurance_sum(self, amount: Decimal, product: Product) -> Decimal:
        return ensure_sum_within_limits(amount, product)

    def shares(self, beneficiaries: Sequence[BeneficiaryData]) -> float:
        return ensure_shares(beneficiaries, self.config.share_epsilon)

    def age(self, birth_date: date, today: date) -> int:
        return ensure_age_allowed(
            birth_date, today, self.config.min_subject_age, self.config.max_subject_age
        )

    def person_type(self, person_type: str) -> str:
        return ensure_person_type(person_type)

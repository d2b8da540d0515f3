import pytest

from insureflow.api.error_handlers import status_for_error
from insureflow.core.exceptions import (
    AppError,
    ClientNotIdentifiedError,
    DatabaseError,
    IdentificationAlreadyExistsError,
    ProductNotFoundError,
    ReferenceAlreadyAttachedError,
    ShareLimitExceededError,
    StorageError,
    UnexpectedIdentificationStatusError,
)


@pytest.mark.parametrize(
    "error, expected",
    [
        (ProductNotFoundError(1), 404),
        (ClientNotIdentifiedError(1, "new"), 422),
        (ShareLimitExceededError(101), 422),
        (ReferenceAlreadyAttachedError(10), 409),
        (IdentificationAlreadyExistsError(1, "alfa"), 409),
        (StorageError("Upload failed"), 502),
        (DatabaseError("lost connection"), 502),
        (UnexpectedIdentificationStatusError("weird"), 500),
        (AppError("Service execution failed"), 500),
    ],
)
def test_status_for_error(error, expected):
    status_code, _ = status_for_error(error)
    assert status_code == expected

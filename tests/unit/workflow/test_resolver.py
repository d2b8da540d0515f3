from unittest.mock import AsyncMock, MagicMock

import pytest

from insureflow.core.exceptions import DatabaseError
from insureflow.services.workflow.resolver import IdempotentResourceResolver


@pytest.fixture
def repository():
    repository = MagicMock()
    repository.get_by_natural_key = AsyncMock()
    repository.insert_if_absent = AsyncMock()
    return repository


@pytest.mark.asyncio
async def test_existing_row_is_reused_without_insert(repository):
    repository.get_by_natural_key.return_value = 7

    resolver = IdempotentResourceResolver(repository, "requisites")
    assert await resolver.resolve("044525225", {"bank_name": "Other"}) == 7

    repository.insert_if_absent.assert_not_called()


@pytest.mark.asyncio
async def test_missing_row_is_created(repository):
    repository.get_by_natural_key.return_value = None
    repository.insert_if_absent.return_value = 11

    resolver = IdempotentResourceResolver(repository, "requisites")
    assert await resolver.resolve("044525225", {"bank_name": "Sber"}) == 11

    repository.insert_if_absent.assert_awaited_once_with("044525225", {"bank_name": "Sber"})


@pytest.mark.asyncio
async def test_lost_race_returns_winner(repository):
    repository.get_by_natural_key.side_effect = [None, 42]
    repository.insert_if_absent.return_value = None

    resolver = IdempotentResourceResolver(repository, "requisites")
    assert await resolver.resolve("044525225", {}) == 42
    assert repository.get_by_natural_key.await_count == 2


@pytest.mark.asyncio
async def test_conflict_without_winner_is_an_upstream_failure(repository):
    repository.get_by_natural_key.return_value = None
    repository.insert_if_absent.return_value = None

    resolver = IdempotentResourceResolver(repository, "requisites")
    with pytest.raises(DatabaseError):
        await resolver.resolve("044525225", {})

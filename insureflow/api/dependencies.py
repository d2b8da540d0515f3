"""Shared FastAPI dependencies."""

from functools import lru_cache

from insureflow.core.config import WorkflowSettings, settings
from insureflow.services.storage_service import BlobStore, StorageService


@lru_cache
def get_blob_store() -> BlobStore:
    """Object store used for client documents."""
    return StorageService()


def get_workflow_settings() -> WorkflowSettings:
    return settings.workflow

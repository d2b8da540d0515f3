"""Storage service for handling Supabase storage operations."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from insureflow.core.config import settings
from insureflow.core.exceptions import ConfigurationError, StorageError
from insureflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BlobStore(ABC):
    """Non-transactional object store holding document content."""

    @abstractmethod
    async def put(self, key: str, content: bytes, content_type: str) -> None:
        """Write ``content`` under ``key``.

        Raises:
            StorageError: If the object could not be written
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete the object under ``key``; deleting a missing key succeeds.

        Raises:
            StorageError: If the store failed to delete an existing object
        """


class StorageService(BlobStore):
    """Service for managing files in Supabase storage."""

    def __init__(
        self,
        bucket: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        self.url = settings.supabase_url
        self.service_role_key = settings.supabase_service_role_key
        self.bucket = bucket or settings.documents_bucket
        self.base_api_url = f"{self.url}/storage/v1"
        self.headers = {
            "Authorization": f"Bearer {self.service_role_key}",
            "apikey": self.service_role_key,
        }
        self._client = client

    def _object_url(self, key: str) -> str:
        return f"{self.base_api_url}/object/{self.bucket}/{key}"

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(method, url, timeout=settings.http_timeout, **kwargs)

        async with httpx.AsyncClient() as client:
            return await client.request(method, url, timeout=settings.http_timeout, **kwargs)

    async def put(self, key: str, content: bytes, content_type: str) -> None:
        """Upload a file to Supabase storage.

        Args:
            key: Target path within the bucket.
            content: File content.
            content_type: MIME type sent with the object.

        Raises:
            StorageError: If the upload fails.
        """
        await self.upload_file(content, key, content_type)

    async def upload_file(
        self,
        content: bytes,
        path: str,
        content_type: str = "application/octet-stream"
    ) -> Dict[str, Any]:
        """Upload raw bytes and return Supabase's response payload."""
        try:
            response = await self._request(
                "POST",
                self._object_url(path),
                headers={**self.headers, "Content-Type": content_type},
                content=content,
            )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error uploading file to Supabase: {str(e)}", exc_info=True)
            raise StorageError(f"Storage upload error: {str(e)}", original_error=e) from e

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to upload file to Supabase: {response.text}",
                extra={"bucket": self.bucket, "path": path, "status_code": response.status_code}
            )
            raise StorageError(f"Upload failed: {response.text}")

        return response.json()

    async def delete(self, key: str) -> None:
        """Delete a file from Supabase storage.

        A 404 means the object is already gone and is not an error.

        Raises:
            StorageError: If the delete fails.
        """
        try:
            response = await self._request("DELETE", self._object_url(key), headers=self.headers)
        except httpx.HTTPError as e:
            LOGGER.error(f"Error deleting file from Supabase: {str(e)}", exc_info=True)
            raise StorageError(f"Storage delete error: {str(e)}", original_error=e) from e

        if response.status_code == 404:
            LOGGER.info("Object already absent from storage", extra={"path": key})
            return

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to delete file from Supabase: {response.text}",
                extra={"bucket": self.bucket, "path": key, "status_code": response.status_code}
            )
            raise StorageError(f"Delete failed: {response.text}")

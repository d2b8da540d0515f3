"""Upload documents to the object store and link their metadata to owners.

Uploads cannot be rolled back by the database transaction, so every
successful upload is recorded in the invocation's ``CompensationLog`` as
part of the upload itself, before anyone else sees the result.
"""

import asyncio
import mimetypes
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from insureflow.core.exceptions import AppError, StorageError
from insureflow.models.artifacts import CompensationLog, UploadedArtifact
from insureflow.repositories.document_repository import DocumentRepository
from insureflow.schemas.workflows import DocumentUpload
from insureflow.services.storage_service import BlobStore
from insureflow.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Leading bytes of the formats clients usually send
_SIGNATURES = (
    (b"%PDF-", "application/pdf"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"II*\x00", "image/tiff"),
    (b"MM\x00*", "image/tiff"),
    (b"PK\x03\x04", "application/zip"),
)


def detect_content_type(name: str, content: bytes) -> str:
    """Sniff the MIME type from the content, falling back to the file name."""
    for signature, content_type in _SIGNATURES:
        if content.startswith(signature):
            return content_type

    guessed, _ = mimetypes.guess_type(name)
    return guessed or DEFAULT_CONTENT_TYPE


class OwnerKind(str, Enum):
    """Entities documents can be linked to."""
    CLIENT = "client"
    INSURED_PERSON = "insured_person"
    INSURANCE = "insurance"
    APPLICATION = "application"


@dataclass(frozen=True)
class DocumentOwner:
    kind: OwnerKind
    id: object

    @property
    def storage_prefix(self) -> str:
        return f"{self.kind.value}s/{self.id}"


class DocumentAttachmentCoordinator:
    """Uploads documents, records compensation and links committed metadata."""

    def __init__(
        self,
        documents: DocumentRepository,
        blob_store: BlobStore,
        concurrent: bool = True,
    ):
        self.documents = documents
        self.blob_store = blob_store
        self.concurrent = concurrent

    @staticmethod
    def new_storage_key(prefix: str, name: str) -> str:
        suffix = ""
        if "." in name:
            suffix = "." + name.rsplit(".", 1)[-1].lower()
        return f"{prefix}/{uuid.uuid4()}{suffix}"

    async def _upload_one(self, document: DocumentUpload, prefix: str, log: CompensationLog) -> UploadedArtifact:
        content = bytes(document.content)
        artifact = UploadedArtifact(
            storage_key=self.new_storage_key(prefix, document.name),
            name=document.name,
            content_type=document.content_type or detect_content_type(document.name, content),
            doc_type=document.doc_type,
        )

        try:
            await self.blob_store.put(artifact.storage_key, content, artifact.content_type)
        except asyncio.CancelledError:
            # The store may already hold the object; deleting a missing key is a no-op
            log.record(artifact)
            raise
        except AppError:
            raise
        except Exception as e:
            raise StorageError(f"Upload of '{document.name}' failed: {str(e)}", original_error=e) from e

        # No await between a successful put and the log append
        log.record(artifact)
        LOGGER.debug("Uploaded document", extra={"storage_key": artifact.storage_key})
        return artifact

    async def upload(
        self,
        documents: Sequence[DocumentUpload],
        log: CompensationLog,
        prefix: str = "uploads",
    ) -> List[UploadedArtifact]:
        """Upload ``documents`` and record each success in ``log``.

        Stops at the first failed upload and raises its error; artifacts
        uploaded before the failure stay in ``log`` for compensation.
        """
        if not documents:
            return []

        if not self.concurrent or len(documents) == 1:
            return [await self._upload_one(document, prefix, log) for document in documents]

        tasks = [
            asyncio.create_task(self._upload_one(document, prefix, log))
            for document in documents
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            # Let in-flight uploads settle so every completed one is logged
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def persist(self, artifacts: Sequence[UploadedArtifact]) -> List[int]:
        """Store metadata rows for uploaded artifacts in the active transaction."""
        return await self.documents.create_batch(artifacts)

    async def link(self, owner: DocumentOwner, document_ids: Iterable[int]) -> None:
        document_ids = list(document_ids)
        if owner.kind is OwnerKind.CLIENT:
            await self.documents.link_to_client(owner.id, document_ids)
        elif owner.kind is OwnerKind.INSURED_PERSON:
            await self.documents.link_to_person(owner.id, document_ids)
        elif owner.kind is OwnerKind.INSURANCE:
            await self.documents.link_to_insurance(owner.id, document_ids)
        elif owner.kind is OwnerKind.APPLICATION:
            await self.documents.link_to_application(owner.id, document_ids)
        else:
            raise ValueError(f"Unknown document owner kind: {owner.kind}")

    async def attach(
        self,
        owner: DocumentOwner,
        documents: Sequence[DocumentUpload],
        log: CompensationLog,
    ) -> List[int]:
        """Upload ``documents``, store their metadata and link them to ``owner``.

        Returns:
            IDs of the created document rows
        """
        artifacts = await self.upload(documents, log, prefix=owner.storage_prefix)
        document_ids = await self.persist(artifacts)
        await self.link(owner, document_ids)
        return document_ids

    async def prior_client_documents(self, client_id: Optional[int]) -> List[int]:
        """Documents the client already has on file; none is not an error."""
        if client_id is None:
            return []
        return await self.documents.get_client_document_ids(client_id)

    async def link_all(
        self,
        owner: DocumentOwner,
        uploaded_ids: Iterable[int],
        prior_ids: Iterable[int],
    ) -> int:
        """Link both newly uploaded and previously stored documents to ``owner``.

        Returns:
            Number of distinct documents linked
        """
        document_ids = list(dict.fromkeys([*prior_ids, *uploaded_ids]))
        await self.link(owner, document_ids)
        return len(document_ids)

"""Data models for documents written to the object store during a workflow."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator, List


@dataclass(frozen=True)
class UploadedArtifact:
    """A document written to the object store, or cancelled mid-upload.

    Attributes:
        storage_key: Key of the object in the store; all compensation needs
        name: Display name of the document
        content_type: Declared MIME type
        doc_type: Type tag of the owning document
    """

    storage_key: str
    name: str
    content_type: str
    doc_type: str


@dataclass(frozen=True)
class CompensationLogEntry:
    """Record that ``artifact`` must be deleted if the workflow fails."""

    artifact: UploadedArtifact
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class CompensationLog:
    """Append-only list of uploads made by one workflow invocation.

    One instance per invocation, passed by reference to everything that
    uploads, and discarded once the invocation has committed or compensated.
    """

    entries: List[CompensationLogEntry] = field(default_factory=list)
    _closed: bool = field(default=False, repr=False)

    def record(self, artifact: UploadedArtifact) -> CompensationLogEntry:
        if self._closed:
            raise RuntimeError("Compensation log is closed")
        entry = CompensationLogEntry(artifact=artifact)
        self.entries.append(entry)
        return entry

    def artifacts(self) -> List[UploadedArtifact]:
        return [entry.artifact for entry in self.entries]

    def discard(self) -> None:
        """Drop all entries; the uploads are now owned by committed rows."""
        self.entries.clear()
        self._closed = True

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CompensationLogEntry]:
        return iter(self.entries)

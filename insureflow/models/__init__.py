"""In-memory data models used while a workflow runs."""

from insureflow.models.artifacts import CompensationLog, CompensationLogEntry, UploadedArtifact

__all__ = ["CompensationLog", "CompensationLogEntry", "UploadedArtifact"]

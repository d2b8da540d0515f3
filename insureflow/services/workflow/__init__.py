"""Building blocks shared by the transactional workflows."""

from insureflow.services.workflow.attachments import (
    DocumentAttachmentCoordinator,
    DocumentOwner,
    OwnerKind,
)
from insureflow.services.workflow.executor import CompensationReport, WorkflowExecutor
from insureflow.services.workflow.identification_state import ReuseAction, decide_reuse
from insureflow.services.workflow.resolver import IdempotentResourceResolver
from insureflow.services.workflow.validation import ValidationPipeline

__all__ = [
    "CompensationReport",
    "DocumentAttachmentCoordinator",
    "DocumentOwner",
    "IdempotentResourceResolver",
    "OwnerKind",
    "ReuseAction",
    "ValidationPipeline",
    "WorkflowExecutor",
    "decide_reuse",
]

"""Run a workflow inside one database transaction with upload compensation."""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from insureflow.core.exceptions import DatabaseError
from insureflow.models.artifacts import CompensationLog, UploadedArtifact
from insureflow.services.storage_service import BlobStore
from insureflow.utils.logging import get_logger

LOGGER = get_logger(__name__)

T = TypeVar("T")

WorkflowSteps = Callable[[CompensationLog], Awaitable[T]]


@dataclass
class CompensationReport:
    """Outcome of compensating one failed invocation."""

    deleted: List[str] = field(default_factory=list)
    orphaned: List[str] = field(default_factory=list)


class WorkflowExecutor:
    """Executes workflow steps atomically and compensates uploads on failure.

    ``execute`` opens the transaction on ``session``; the session must not
    have an active transaction when it is called. Steps receive the
    invocation's own ``CompensationLog`` and must record every upload in it.

    On any failure (including cancellation of the caller) the transaction is
    rolled back and each logged artifact is deleted from the object store.
    Delete failures are logged and leave orphans for out-of-band cleanup;
    they never replace the original error.
    """

    def __init__(self, session: AsyncSession, blob_store: BlobStore):
        self.session = session
        self.blob_store = blob_store
        self.last_report: Optional[CompensationReport] = None

    async def execute(self, name: str, steps: WorkflowSteps) -> T:
        log = CompensationLog()
        self.last_report = None

        try:
            async with self.session.begin():
                result = await steps(log)
        except SQLAlchemyError as e:
            LOGGER.error(f"Workflow {name} failed in storage layer: {str(e)}", exc_info=True)
            await self._compensate_after_failure(name, log)
            raise DatabaseError(f"Workflow {name} failed: {str(e)}", original_error=e) from e
        except (Exception, asyncio.CancelledError) as e:
            LOGGER.warning(
                f"Workflow {name} aborted: {str(e) or type(e).__name__}",
                extra={"workflow": name, "error_type": type(e).__name__},
            )
            await self._compensate_after_failure(name, log)
            raise

        LOGGER.info(
            f"Workflow {name} committed",
            extra={"workflow": name, "uploads": len(log)},
        )
        log.discard()
        return result

    async def _compensate_after_failure(self, name: str, log: CompensationLog) -> None:
        artifacts = log.artifacts()
        log.close()
        if not artifacts:
            return

        # Shielded so a second cancellation cannot cut compensation short
        self.last_report = await asyncio.shield(self.compensate(name, artifacts))

    async def compensate(self, name: str, artifacts: List[UploadedArtifact]) -> CompensationReport:
        """Delete ``artifacts`` from the object store, newest first."""
        report = CompensationReport()

        for artifact in reversed(artifacts):
            try:
                await self.blob_store.delete(artifact.storage_key)
            except Exception:
                LOGGER.error(
                    f"Compensation of {name} left orphaned object {artifact.storage_key}",
                    exc_info=True,
                    extra={"workflow": name, "storage_key": artifact.storage_key},
                )
                report.orphaned.append(artifact.storage_key)
            else:
                report.deleted.append(artifact.storage_key)

        LOGGER.info(
            f"Compensated workflow {name}",
            extra={"deleted": len(report.deleted), "orphaned": len(report.orphaned)},
        )
        return report

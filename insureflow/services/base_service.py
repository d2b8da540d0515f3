from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from insureflow.core.config import WorkflowSettings, settings
from insureflow.core.exceptions import AppError
from insureflow.repositories.document_repository import DocumentRepository
from insureflow.services.storage_service import BlobStore, StorageService
from insureflow.services.workflow.attachments import DocumentAttachmentCoordinator
from insureflow.services.workflow.executor import WorkflowExecutor
from insureflow.services.workflow.validation import ValidationPipeline
from insureflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BaseService(ABC):
    """Base class for application services.

    Provides a standardized execution flow with validation and error handling.
    """

    def __init__(self):
        self.logger = LOGGER

    async def execute(self, *args, **kwargs) -> Any:
        """Execute the service logic.

        This template method handles:
        1. Input validation
        2. Core logic execution
        3. Standardized error handling

        Raises:
            AppError: If execution fails
        """
        try:
            self.validate(*args, **kwargs)

            return await self.run(*args, **kwargs)

        except AppError:
            raise

        except Exception as e:
            self.logger.error(
                f"Service execution failed: {str(e)}",
                exc_info=True,
                extra={"service": self.__class__.__name__}
            )
            raise AppError(f"Service execution failed: {str(e)}", original_error=e) from e

    def validate(self, *args, **kwargs):
        """Validate service input.

        Override this method to implement custom validation logic.

        Raises:
            PreconditionFailedError: If input breaks a business rule
        """
        pass

    @abstractmethod
    async def run(self, *args, **kwargs) -> Any:
        """Run the core service logic.

        Must be implemented by subclasses.
        """
        pass


class WorkflowService(BaseService):
    """Base for services whose operations run through ``WorkflowExecutor``.

    Wires the executor, the validation rules and the document coordinator
    around one session and one object store.
    """

    def __init__(
        self,
        session: AsyncSession,
        blob_store: Optional[BlobStore] = None,
        config: Optional[WorkflowSettings] = None,
        clock: Callable[[], date] = date.today,
    ):
        super().__init__()
        self.session = session
        self.blob_store = blob_store or StorageService()
        self.config = config or settings.workflow
        self.clock = clock
        self.executor = WorkflowExecutor(session, self.blob_store)
        self.validation = ValidationPipeline(self.config)
        self.attachments = DocumentAttachmentCoordinator(
            DocumentRepository(session),
            self.blob_store,
            concurrent=self.config.concurrent_uploads,
        )

    async def run(self, operation: str, **kwargs) -> Any:
        handler = getattr(self, f"_{operation}", None)
        if handler is None:
            raise AppError(f"Unknown operation: {operation}")
        return await self.executor.execute(
            operation, lambda log: handler(log=log, **kwargs)
        )

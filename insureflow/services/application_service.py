"""Application workflow: a client files an application against a policy."""

import uuid
from uuid import UUID

from insureflow.core.exceptions import (
    ApplicationTypeNotFoundError,
    IdentificationNotFoundError,
    InsuranceNotFoundError,
)
from insureflow.models.artifacts import CompensationLog
from insureflow.repositories.application_repository import ApplicationRepository
from insureflow.repositories.catalog_repository import ApplicationTypeRepository
from insureflow.repositories.identification_repository import IdentificationRepository
from insureflow.repositories.insurance_repository import InsuranceRepository
from insureflow.schemas.enums import ApplicationStatus
from insureflow.schemas.workflows import CreateApplicationRequest
from insureflow.services.base_service import WorkflowService
from insureflow.services.workflow.attachments import DocumentOwner, OwnerKind
from insureflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class ApplicationService(WorkflowService):
    """Service for applications filed against existing policies."""

    def __init__(self, session, blob_store=None, config=None, **kwargs):
        super().__init__(session, blob_store=blob_store, config=config, **kwargs)
        self.insurances = InsuranceRepository(session)
        self.identifications = IdentificationRepository(session)
        self.application_types = ApplicationTypeRepository(session)
        self.applications = ApplicationRepository(session)

    async def create_application(self, request: CreateApplicationRequest) -> UUID:
        """Create an application with its documents.

        Raises:
            InsuranceNotFoundError: The policy does not exist
            IdentificationNotFoundError: The policy belongs to another client
            ApplicationTypeNotFoundError: Unknown application type code
        """
        return await self.execute("create_application", request=request)

    async def _create_application(self, log: CompensationLog, request: CreateApplicationRequest) -> UUID:
        insurance = await self.insurances.get_by_id(request.insurance_id)
        if insurance is None:
            raise InsuranceNotFoundError(request.insurance_id)

        identification = await self.identifications.get_by_id(insurance.identification_id)
        if identification is None or identification.external_client_id != request.client_id:
            raise IdentificationNotFoundError(request.client_id)

        application_type = await self.application_types.get_by_code(request.application_type)
        if application_type is None:
            raise ApplicationTypeNotFoundError(request.application_type)

        owner = DocumentOwner(OwnerKind.APPLICATION, uuid.uuid4())

        artifacts = await self.attachments.upload(request.documents, log, prefix=owner.storage_prefix)
        uploaded_ids = await self.attachments.persist(artifacts)

        application = await self.applications.create(
            id=owner.id,
            insurance_id=insurance.id,
            application_type_id=application_type.id,
            client_id=request.client_id,
            status=ApplicationStatus.NEW.value,
        )

        prior_ids = await self.attachments.prior_client_documents(identification.client_id)
        linked = await self.attachments.link_all(owner, uploaded_ids=uploaded_ids, prior_ids=prior_ids)

        if self.config.link_uploads_to_client and uploaded_ids:
            await self.attachments.link(
                DocumentOwner(OwnerKind.CLIENT, identification.client_id), uploaded_ids
            )

        LOGGER.info(
            f"Created application {application.id}",
            extra={"insurance_id": str(insurance.id), "documents": linked},
        )
        return application.id

"""Client identification workflows.

Registration stores the client's personal data, passport and document scans
and opens an identification in status ``new``. Attaching a reference (a new
policy) reuses the existing identification or starts a new one depending on
its stored status.
"""

from typing import Union

from insureflow.core.exceptions import (
    IdentificationAlreadyExistsError,
    NotFoundError,
    ProviderNotFoundError,
    UnexpectedIdentificationStatusError,
)
from insureflow.database.models import Identification, Provider
from insureflow.models.artifacts import CompensationLog
from insureflow.repositories.catalog_repository import ProviderRepository
from insureflow.repositories.identification_repository import IdentificationRepository
from insureflow.repositories.outbox_repository import OutboxRepository
from insureflow.repositories.person_repository import ClientRepository
from insureflow.schemas.enums import IdentificationStatus, OutboxEventKind
from insureflow.schemas.workflows import (
    AttachReferenceRequest,
    IdentificationResponse,
    PersonData,
    RegisterIdentificationRequest,
)
from insureflow.services.base_service import WorkflowService
from insureflow.services.workflow.attachments import DocumentOwner, OwnerKind
from insureflow.services.workflow.identification_state import (
    ReuseAction,
    decide_reuse,
    ensure_transition,
)
from insureflow.utils.logging import get_logger

LOGGER = get_logger(__name__)


class IdentificationService(WorkflowService):
    """Service for identification registration and reference attachment."""

    def __init__(self, session, blob_store=None, config=None, **kwargs):
        super().__init__(session, blob_store=blob_store, config=config, **kwargs)
        self.providers = ProviderRepository(session)
        self.clients = ClientRepository(session)
        self.identifications = IdentificationRepository(session)
        self.outbox = OutboxRepository(session)

    async def register_identification(self, request: RegisterIdentificationRequest) -> IdentificationResponse:
        """Start the identification of a client with a provider.

        Raises:
            IdentificationAlreadyExistsError: The pair already has an identification
        """
        return await self.execute("register_identification", request=request)

    async def attach_reference(self, request: AttachReferenceRequest) -> IdentificationResponse:
        """Attach an external reference to the client's identification.

        Raises:
            ReferenceAlreadyAttachedError: The reference id was used before
            UnexpectedIdentificationStatusError: The stored status is unknown
        """
        return await self.execute("attach_reference", request=request)

    async def update_status(
        self, identification_id: int, status: Union[str, IdentificationStatus]
    ) -> IdentificationResponse:
        """Move an identification to ``status`` (provider callback)."""
        return await self.execute(
            "update_status", identification_id=identification_id, status=status
        )

    async def _register_identification(
        self, log: CompensationLog, request: RegisterIdentificationRequest
    ) -> IdentificationResponse:
        self.validation.age(request.person.birth_date, self.clock())
        provider = await self._get_provider(request.provider)

        existing = await self.identifications.get_by_client_and_provider(request.client_id, provider.id)
        if existing is not None:
            raise IdentificationAlreadyExistsError(request.client_id, provider.code)

        identification = await self._start_identification(
            log, request.client_id, provider, request.person
        )
        return self._response(identification, created=True)

    async def _attach_reference(
        self, log: CompensationLog, request: AttachReferenceRequest
    ) -> IdentificationResponse:
        self.validation.age(request.person.birth_date, self.clock())
        provider = await self._get_provider(request.provider)

        existing = await self.identifications.get_by_client_and_provider(request.client_id, provider.id)
        if existing is None:
            identification = await self._start_identification(
                log, request.client_id, provider, request.person
            )
            await self.identifications.attach_reference(identification.id, request.reference_id)
            return self._response(identification, created=True)

        action = decide_reuse(existing.status)
        LOGGER.info(
            f"Identification {existing.id} in status {existing.status}: {action.value}",
            extra={"reference_id": request.reference_id},
        )

        if action is ReuseAction.ATTACH:
            # Client data is not collected again while identification is pending
            await self.identifications.attach_reference(existing.id, request.reference_id)
            return self._response(existing, created=False)

        if action is ReuseAction.ATTACH_AND_NOTIFY:
            await self.identifications.attach_reference(existing.id, request.reference_id)
            event = await self.outbox.insert(request.reference_id, OutboxEventKind.REFERENCE_IDENTIFIED)
            return self._response(existing, created=False, outbox_event_id=event.id)

        if action is ReuseAction.START_NEW:
            identification = await self._start_identification(
                log, request.client_id, provider, request.person
            )
            await self.identifications.attach_reference(identification.id, request.reference_id)
            return self._response(identification, created=True)

        raise UnexpectedIdentificationStatusError(existing.status)

    async def _update_status(
        self,
        log: CompensationLog,
        identification_id: int,
        status: Union[str, IdentificationStatus],
    ) -> IdentificationResponse:
        identification = await self.identifications.get_by_id(identification_id)
        if identification is None:
            raise NotFoundError(f"Identification {identification_id} not found")

        target = ensure_transition(identification.status, status)
        identification = await self.identifications.update_status(identification_id, target)
        return self._response(identification, created=False)

    async def _get_provider(self, code: str) -> Provider:
        provider = await self.providers.get_by_code(code)
        if provider is None:
            raise ProviderNotFoundError(code)
        return provider

    async def _start_identification(
        self,
        log: CompensationLog,
        external_client_id: int,
        provider: Provider,
        person: PersonData,
    ) -> Identification:
        """Store client data and documents, then open a ``new`` identification."""
        self.validation.person_type(person.person_type)

        client = await self.clients.create_with_passport(external_client_id, person)
        await self.attachments.attach(
            DocumentOwner(OwnerKind.CLIENT, client.id), person.documents, log
        )

        return await self.identifications.create_identification(
            client_id=client.id,
            external_client_id=external_client_id,
            provider_id=provider.id,
            status=IdentificationStatus.NEW,
        )

    @staticmethod
    def _response(
        identification: Identification, created: bool, outbox_event_id: int = None
    ) -> IdentificationResponse:
        return IdentificationResponse(
            identification_id=identification.id,
            status=identification.status,
            created=created,
            outbox_event_id=outbox_event_id,
        )

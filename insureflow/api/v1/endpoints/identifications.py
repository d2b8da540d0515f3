from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from insureflow.api.dependencies import get_blob_store, get_workflow_settings
from insureflow.core.config import WorkflowSettings
from insureflow.core.database import get_async_session as get_session
from insureflow.schemas.responses import ApiResponse
from insureflow.schemas.workflows import (
    AttachReferenceRequest,
    RegisterIdentificationRequest,
    UpdateIdentificationStatusRequest,
)
from insureflow.services.identification_service import IdentificationService
from insureflow.services.storage_service import BlobStore
from insureflow.utils.responses import create_api_response

router = APIRouter()


async def get_identification_service(
    db_session: Annotated[AsyncSession, Depends(get_session)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
    config: Annotated[WorkflowSettings, Depends(get_workflow_settings)],
) -> IdentificationService:
    return IdentificationService(db_session, blob_store=blob_store, config=config)


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a client identification",
    operation_id="register_identification",
)
async def register_identification(
    request: Request,
    body: RegisterIdentificationRequest,
    identification_service: Annotated[IdentificationService, Depends(get_identification_service)],
) -> ApiResponse:
    """Store client data and start identification with a provider."""
    result = await identification_service.register_identification(body)

    return create_api_response(
        data=result,
        message="Identification registered",
        request=request
    )


@router.post(
    "/references",
    response_model=ApiResponse,
    summary="Attach a reference to the client's identification",
    operation_id="attach_identification_reference",
)
async def attach_reference(
    request: Request,
    body: AttachReferenceRequest,
    identification_service: Annotated[IdentificationService, Depends(get_identification_service)],
) -> ApiResponse:
    """Reuse the current identification or start a new one, depending on its status."""
    result = await identification_service.attach_reference(body)

    return create_api_response(
        data=result,
        message="Reference attached",
        request=request
    )


@router.patch(
    "/{identification_id}/status",
    response_model=ApiResponse,
    summary="Update identification status",
    operation_id="update_identification_status",
)
async def update_identification_status(
    request: Request,
    identification_id: int,
    body: UpdateIdentificationStatusRequest,
    identification_service: Annotated[IdentificationService, Depends(get_identification_service)],
) -> ApiResponse:
    result = await identification_service.update_status(identification_id, body.status)

    return create_api_response(
        data=result,
        message="Identification status updated",
        request=request
    )

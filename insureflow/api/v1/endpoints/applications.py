from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from insureflow.api.dependencies import get_blob_store, get_workflow_settings
from insureflow.core.config import WorkflowSettings
from insureflow.core.database import get_async_session as get_session
from insureflow.schemas.responses import ApiResponse
from insureflow.schemas.workflows import CreateApplicationRequest, CreatedResponse
from insureflow.services.application_service import ApplicationService
from insureflow.services.storage_service import BlobStore
from insureflow.utils.responses import create_api_response

router = APIRouter()


async def get_application_service(
    db_session: Annotated[AsyncSession, Depends(get_session)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
    config: Annotated[WorkflowSettings, Depends(get_workflow_settings)],
) -> ApplicationService:
    return ApplicationService(db_session, blob_store=blob_store, config=config)


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="File an application against a policy",
    operation_id="create_application",
)
async def create_application(
    request: Request,
    body: CreateApplicationRequest,
    application_service: Annotated[ApplicationService, Depends(get_application_service)],
) -> ApiResponse:
    application_id = await application_service.create_application(body)

    return create_api_response(
        data=CreatedResponse(id=application_id),
        message="Application created",
        request=request
    )

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from insureflow.api.dependencies import get_blob_store, get_workflow_settings
from insureflow.core.config import WorkflowSettings
from insureflow.core.database import get_async_session as get_session
from insureflow.schemas.responses import ApiResponse
from insureflow.schemas.workflows import CreatedResponse, CreateInsuranceRequest
from insureflow.services.insurance_service import InsuranceService
from insureflow.services.storage_service import BlobStore
from insureflow.utils.logging import get_logger
from insureflow.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_insurance_service(
    db_session: Annotated[AsyncSession, Depends(get_session)],
    blob_store: Annotated[BlobStore, Depends(get_blob_store)],
    config: Annotated[WorkflowSettings, Depends(get_workflow_settings)],
) -> InsuranceService:
    return InsuranceService(db_session, blob_store=blob_store, config=config)


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an insurance policy",
    operation_id="create_insurance",
)
async def create_insurance(
    request: Request,
    body: CreateInsuranceRequest,
    insurance_service: Annotated[InsuranceService, Depends(get_insurance_service)],
) -> ApiResponse:
    """Create a policy for an identified client."""
    insurance_id = await insurance_service.create_insurance(body)

    return create_api_response(
        data=CreatedResponse(id=insurance_id),
        message="Insurance created",
        request=request
    )


@router.get(
    "/{insurance_id}",
    response_model=ApiResponse,
    summary="Get insurance details",
    operation_id="get_insurance",
)
async def get_insurance(
    request: Request,
    insurance_id: UUID,
    insurance_service: Annotated[InsuranceService, Depends(get_insurance_service)],
) -> ApiResponse:
    insurance = await insurance_service.get_insurance(insurance_id)

    return create_api_response(
        data=insurance,
        message="Insurance retrieved successfully",
        request=request
    )

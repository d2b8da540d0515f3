from fastapi import APIRouter

from insureflow.api.v1.endpoints import applications, identifications, insurances

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(insurances.router, prefix="/insurances", tags=["Insurances"])
api_router.include_router(identifications.router, prefix="/identifications", tags=["Identifications"])
api_router.include_router(applications.router, prefix="/applications", tags=["Applications"])

__all__ = ["api_router"]

"""API v1 router aggregator."""

from fastapi import APIRouter

from folio.api.v1 import content, images, metadata

api_router = APIRouter()

api_router.include_router(metadata.router, prefix="/metadata", tags=["Metadata"])
api_router.include_router(content.router, prefix="/content", tags=["Content"])
api_router.include_router(images.router, prefix="/images", tags=["Images"])

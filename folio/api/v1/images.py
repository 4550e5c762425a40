"""Image resolution API endpoints."""

from fastapi import APIRouter

from folio.api.v1.dependencies import Resolver
from folio.schemas.api import ImageResolveRequest, ImageResolveResponse
from folio.schemas.images import coerce_focal_point

router = APIRouter()


@router.post(
    "/resolve",
    response_model=ImageResolveResponse,
    summary="Resolve an image reference",
    description=(
        "Derive the delivery URL for an image reference. Explicit `options` take "
        "priority over the named `preset`. Unmanaged URLs are returned unchanged."
    ),
)
async def resolve_image(payload: ImageResolveRequest, resolver: Resolver) -> ImageResolveResponse:
    """Resolve one image reference; a reference without a location yields `image: null`."""
    focus = coerce_focal_point(payload.focus)
    image = resolver.resolve(payload.image, payload.options or payload.preset, focus)
    if image is None:
        return ImageResolveResponse()

    srcset = None
    if payload.include_srcset:
        srcset = resolver.build_srcset(payload.image, preset=payload.preset, focus=focus)
    return ImageResolveResponse(
        image=image,
        srcset=srcset,
        placeholder=resolver.blur_placeholder(payload.image),
    )

"""Page metadata API endpoints."""

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse

from folio.api.v1.dependencies import Synthesizer
from folio.config import settings
from folio.schemas.metadata import PageMetadata, RouteDescriptor
from folio.services.head_renderer import render_head_tags
from folio.services.metadata_synthesizer import MetadataSynthesizer

router = APIRouter()

PATH_QUERY = Query(..., min_length=1, description="Site route, e.g. /news/opening-night")


async def _synthesize_for_request(
    request: Request,
    synthesizer: MetadataSynthesizer,
    path: str,
) -> PageMetadata:
    query_params: dict[str, str | list[str]] = {}
    for key in request.query_params:
        if key == "path":
            continue
        values = request.query_params.getlist(key)
        query_params[key] = values[0] if len(values) == 1 else values

    # `path` may carry its own query string (`/portfolio?filter=scenic`)
    try:
        embedded = RouteDescriptor.from_url(path)
    except ValueError:
        return await synthesizer.synthesize(path)
    return await synthesizer.synthesize(
        RouteDescriptor(
            path=embedded.path,
            query_params={**embedded.query_params, **query_params},
        )
    )


@router.get(
    "",
    response_model=PageMetadata,
    summary="Resolve page metadata",
    description=(
        "Return head metadata and JSON-LD for a site route. Always 200; "
        "`state` is `not_found` when the caller should render a 404 page."
    ),
)
async def get_page_metadata(
    request: Request,
    synthesizer: Synthesizer,
    path: str = PATH_QUERY,
) -> PageMetadata:
    """Resolve metadata for a route; extra query parameters are passed through."""
    return await _synthesize_for_request(request, synthesizer, path)


@router.get(
    "/head",
    response_class=HTMLResponse,
    summary="Render head tags",
    description="Return the `<head>` markup (title, social tags, JSON-LD) for a site route.",
)
async def get_page_head(
    request: Request,
    synthesizer: Synthesizer,
    path: str = PATH_QUERY,
) -> HTMLResponse:
    metadata = await _synthesize_for_request(request, synthesizer, path)
    return HTMLResponse(
        render_head_tags(metadata, settings.site_name, twitter_handle=settings.twitter_handle),
        status_code=404 if metadata.is_not_found else 200,
    )

"""Beacon query and information endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from variant_beacon.domain.variants.query import CoordinateMode
from variant_beacon.transport.http.deps import AppSettings, Beacon, Config, QueryParams
from variant_beacon.transport.http.documents import (
    XML_MEDIA_TYPE,
    render_beacon_info,
    render_beacon_response,
)
from variant_beacon.transport.http.schemas import BeaconInfo, BeaconResponse

router = APIRouter(tags=["beacon"])

_XML_CONTENT = {"content": {XML_MEDIA_TYPE: {}}}


def _wants_json(request: Request) -> bool:
    accept = request.headers.get("accept", "").lower()
    return "application/json" in accept and "xml" not in accept


@router.api_route(
    "/query",
    methods=["GET", "POST"],
    response_model=BeaconResponse,
    responses={200: _XML_CONTENT},
)
async def query_variant(
    request: Request,
    params: QueryParams,
    beacon: Beacon,
) -> Response:
    """Does the allele exist at the coordinate on the chromosome?

    Responds with a ``BEACONResponse`` XML document, or JSON when the client
    asks for ``application/json``.
    """
    exists = await run_in_threadpool(
        beacon.exists,
        params.to_query(),
        authorization=request.headers.get("Authorization"),
    )
    result = BeaconResponse(exists=exists)
    if _wants_json(request):
        return JSONResponse(result.model_dump())
    return Response(render_beacon_response(result), media_type=XML_MEDIA_TYPE)


@router.get("/", include_in_schema=False)
@router.get("/about", response_model=BeaconInfo, responses={200: _XML_CONTENT})
async def about(request: Request, settings: AppSettings, config: Config) -> Response:
    """Beacon information document."""
    info = BeaconInfo(
        id=settings.beacon_id,
        name=settings.beacon_name,
        api_version=settings.beacon_api_version,
        organization=settings.beacon_organization,
        description=settings.beacon_description,
        project_id=config.project_id,
        table_id=config.table_id,
        coordinate_modes=[
            mode.value for mode in CoordinateMode if mode is not CoordinateMode.ABSENT
        ],
    )
    if _wants_json(request):
        return JSONResponse(info.model_dump(by_alias=True))
    return Response(render_beacon_info(info), media_type=XML_MEDIA_TYPE)

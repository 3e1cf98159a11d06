"""Dependency injection for HTTP routes."""

import json
from typing import Annotated

import pydantic
from fastapi import Depends, Request

from variant_beacon.integrations.bigquery.executor import Executor
from variant_beacon.integrations.bigquery.sessions import (
    SessionProvider,
    session_provider_for,
)
from variant_beacon.platform.config import (
    BeaconConfig,
    Settings,
    get_beacon_config,
    get_settings,
)
from variant_beacon.platform.errors import InputParseError
from variant_beacon.platform.types import JSONArray
from variant_beacon.services.beacon import BeaconService
from variant_beacon.transport.http.schemas import QueryRequest

# Type aliases for dependencies
AppSettings = Annotated[Settings, Depends(get_settings)]
Config = Annotated[BeaconConfig, Depends(get_beacon_config)]


def get_session_provider(config: Config) -> SessionProvider:
    """Get the session strategy for the configured auth mode."""
    return session_provider_for(config)


Sessions = Annotated[SessionProvider, Depends(get_session_provider)]


def get_beacon_service(config: Config, sessions: Sessions) -> BeaconService:
    """Get a request-scoped beacon service."""
    return BeaconService(config, Executor(config, sessions))


Beacon = Annotated[BeaconService, Depends(get_beacon_service)]


_FORM_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})


async def _read_body(request: Request) -> dict[str, object]:
    content_type = request.headers.get("content-type", "")
    if content_type.split(";", 1)[0].strip().lower() in _FORM_TYPES:
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    body = await request.body()
    if not body.strip():
        return {}
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise InputParseError("request body is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise InputParseError("request body must be a JSON object")
    return payload


async def get_query_request(request: Request) -> QueryRequest:
    """Parse beacon query parameters.

    GET reads the query string. POST also reads a form or JSON object body,
    whose fields take precedence over the query string. An empty body is
    treated as no parameters, leaving required-field checks to validation.
    """
    payload: dict[str, object] = dict(request.query_params)
    if request.method == "POST":
        payload.update(await _read_body(request))

    try:
        return QueryRequest.model_validate(payload)
    except pydantic.ValidationError as exc:
        errors: JSONArray = [
            {
                "path": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
                "code": err["type"],
            }
            for err in exc.errors()
        ]
        fields = ", ".join(str(e["path"]) for e in errors if isinstance(e, dict))
        raise InputParseError(f"parsing {fields}", errors=errors) from exc


QueryParams = Annotated[QueryRequest, Depends(get_query_request)]

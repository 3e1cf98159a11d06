import json

from starlette.exceptions import HTTPException
from starlette.requests import Request

from variant_beacon.platform.errors import (
    BackendConnectionError,
    MissingFieldError,
    ResultDecodeError,
    app_error_handler,
    http_exception_handler,
)


def _request(path: str = "/query") -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": path,
            "raw_path": path.encode(),
            "headers": [],
            "query_string": b"",
            "server": ("testserver", 80),
            "scheme": "http",
            "client": ("127.0.0.1", 12345),
        }
    )


async def test_decode_error_is_problem_detail() -> None:
    resp = await app_error_handler(
        _request(), ResultDecodeError("reading query result", "expected 1 row, got 0")
    )
    assert resp.status_code == 502
    assert resp.media_type == "application/problem+json"
    body = json.loads(bytes(resp.body).decode("utf-8"))
    assert body["code"] == "RESULT_DECODE_ERROR"
    assert body["detail"] == "reading query result: expected 1 row, got 0"
    assert body["status"] == 502


async def test_unmapped_http_status_is_internal_error() -> None:
    resp = await http_exception_handler(
        _request(), HTTPException(status_code=500, detail="Server Error")
    )
    assert resp.status_code == 500
    body = json.loads(bytes(resp.body).decode("utf-8"))
    assert body["code"] == "INTERNAL_ERROR"


async def test_missing_field_lists_the_field() -> None:
    resp = await app_error_handler(_request(), MissingFieldError("allele"))
    assert resp.status_code == 400
    body = json.loads(bytes(resp.body).decode("utf-8"))
    assert body["code"] == "MISSING_FIELD"
    assert body["type"] == "/errors/MISSING_FIELD"
    assert body["errors"] == [{"path": "allele", "message": "value is required"}]


async def test_backend_error_carries_context() -> None:
    exc = BackendConnectionError("creating bigquery client", "no credentials")
    resp = await app_error_handler(_request(), exc)
    assert resp.status_code == 503
    body = json.loads(bytes(resp.body).decode("utf-8"))
    assert body["code"] == "BACKEND_CONNECTION_ERROR"
    assert body["detail"] == "creating bigquery client: no credentials"
    assert "errors" not in body


async def test_method_not_allowed_is_problem_detail() -> None:
    resp = await http_exception_handler(
        _request("/about"), HTTPException(status_code=405, detail="Method Not Allowed")
    )
    assert resp.status_code == 405
    body = json.loads(bytes(resp.body).decode("utf-8"))
    assert body["code"] == "METHOD_NOT_ALLOWED"

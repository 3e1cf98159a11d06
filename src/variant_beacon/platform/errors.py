"""Typed error model with problem+json responses."""

from enum import StrEnum

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from variant_beacon.platform.types import JSONArray


class ErrorCode(StrEnum):
    """Application error codes."""

    # General
    INTERNAL_ERROR = "INTERNAL_ERROR"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_CONFIG = "INVALID_CONFIG"

    # Request input
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_COORDINATE_SPEC = "INVALID_COORDINATE_SPEC"

    # BigQuery
    BACKEND_CONNECTION_ERROR = "BACKEND_CONNECTION_ERROR"
    QUERY_ERROR = "QUERY_ERROR"
    RESULT_DECODE_ERROR = "RESULT_DECODE_ERROR"


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details response."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str | None = None
    instance: str | None = None
    code: ErrorCode
    errors: JSONArray | None = None


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: ErrorCode,
        title: str,
        status: int = 400,
        detail: str | None = None,
        errors: JSONArray | None = None,
    ) -> None:
        self.code = code
        self.title = title
        self.status = status
        self.detail = detail
        self.errors = errors
        super().__init__(f"{title}: {detail}" if detail else title)

    @property
    def is_client_error(self) -> bool:
        """Whether the caller, not the server, is at fault."""
        return 400 <= self.status < 500


class UnauthorizedError(AppError):
    """Unauthorized error."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.UNAUTHORIZED,
        title: str = "Unauthorized",
        detail: str | None = None,
    ) -> None:
        super().__init__(code=code, title=title, status=401, detail=detail)


class InvalidConfigError(AppError):
    """Server configuration is missing or malformed."""

    def __init__(self, context: str, cause: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_CONFIG,
            title="Invalid server configuration",
            status=412,
            detail=f"{context}: {cause}",
        )


# ============================================================================
# Request input
# ============================================================================


class InputError(AppError):
    """Caller input is structurally invalid; never retried."""

    def __init__(
        self,
        code: ErrorCode,
        title: str,
        detail: str | None = None,
        errors: JSONArray | None = None,
    ) -> None:
        super().__init__(
            code=code, title=title, status=400, detail=detail, errors=errors
        )


class InputParseError(InputError):
    """A request field could not be parsed."""

    def __init__(self, detail: str, errors: JSONArray | None = None) -> None:
        super().__init__(
            code=ErrorCode.INVALID_INPUT,
            title="Invalid input",
            detail=detail,
            errors=errors,
        )


class MissingFieldError(InputError):
    """A required query field is empty."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(
            code=ErrorCode.MISSING_FIELD,
            title="Missing field",
            detail=f"missing {field}",
            errors=[{"path": field, "message": "value is required"}],
        )


class InvalidCoordinateSpecError(InputError):
    """Coordinate fields do not form exactly one valid mode."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_COORDINATE_SPEC,
            title="Invalid coordinate specification",
            detail=detail,
        )


# ============================================================================
# Data access
# ============================================================================


class DataAccessError(AppError):
    """Backend interaction failed.

    ``context`` names the step that failed (e.g. ``"querying database"``) so the
    boundary layer can log and classify without parsing messages.
    """

    def __init__(
        self,
        code: ErrorCode,
        title: str,
        context: str,
        cause: object,
        status: int = 502,
    ) -> None:
        self.context = context
        super().__init__(
            code=code, title=title, status=status, detail=f"{context}: {cause}"
        )


class BackendConnectionError(DataAccessError):
    """The BigQuery session could not be established or reached."""

    def __init__(self, context: str, cause: object) -> None:
        super().__init__(
            code=ErrorCode.BACKEND_CONNECTION_ERROR,
            title="Data store unavailable",
            context=context,
            cause=cause,
            status=503,
        )


class QueryError(DataAccessError):
    """The backend rejected or could not execute the query."""

    def __init__(self, context: str, cause: object) -> None:
        super().__init__(
            code=ErrorCode.QUERY_ERROR,
            title="Query failed",
            context=context,
            cause=cause,
        )


class ResultDecodeError(DataAccessError):
    """The query result did not have the expected single-row count shape."""

    def __init__(self, context: str, cause: object) -> None:
        super().__init__(
            code=ErrorCode.RESULT_DECODE_ERROR,
            title="Unexpected query result",
            context=context,
            cause=cause,
        )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle AppError exceptions."""
    problem = ProblemDetail(
        type=f"/errors/{exc.code.value}",
        title=exc.title,
        status=exc.status,
        detail=exc.detail,
        instance=str(request.url),
        code=exc.code,
        errors=exc.errors,
    )
    return JSONResponse(
        status_code=exc.status,
        content=problem.model_dump(exclude_none=True),
        media_type="application/problem+json",
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTPException raised by routes or by Starlette routing."""
    code = ErrorCode.INTERNAL_ERROR
    if exc.status_code == 404:
        code = ErrorCode.NOT_FOUND
    elif exc.status_code == 405:
        code = ErrorCode.METHOD_NOT_ALLOWED
    elif exc.status_code == 401:
        code = ErrorCode.UNAUTHORIZED

    problem = ProblemDetail(
        type=f"/errors/{code.value}",
        title=str(exc.detail),
        status=exc.status_code,
        instance=str(request.url),
        code=code,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=problem.model_dump(exclude_none=True),
        media_type="application/problem+json",
        headers=exc.headers,
    )

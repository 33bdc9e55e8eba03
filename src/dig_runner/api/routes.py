"""API routes for the dig runner service."""

from dataclasses import dataclass, field
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from dig_runner.api.models import ErrorResponse, QueryResponse, RecordTypesResponse
from dig_runner.core.config import Settings, get_settings
from dig_runner.core.runner import QueryRunner
from dig_runner.dns.validation import VALID_RECORD_TYPES
from dig_runner.utils.decorators import sentry_exception_catcher
from dig_runner.utils.exceptions import (
    DigRunnerError,
    InvalidArgument,
    QueryTimeout,
    Unavailable,
    capture_exception,
    is_expected_query_error,
)

router = APIRouter()


@dataclass
class RouteDependencies:
    """Dependencies for route handlers."""

    settings: Settings = field(default_factory=get_settings)
    runner: Optional[QueryRunner] = None

    def __post_init__(self):
        if self.runner is None:
            self.runner = QueryRunner(settings=self.settings)


# Global dependencies instance (can be overridden for testing)
_dependencies: Optional[RouteDependencies] = None


def get_dependencies() -> RouteDependencies:
    """Get the current route dependencies."""
    global _dependencies  # pylint: disable=global-statement
    if _dependencies is None:
        _dependencies = RouteDependencies()
    return _dependencies


def set_dependencies(deps: RouteDependencies) -> None:
    """Set custom dependencies (useful for testing)."""
    global _dependencies  # pylint: disable=global-statement
    _dependencies = deps


def reset_dependencies() -> None:
    """Reset dependencies to default (useful for testing)."""
    global _dependencies  # pylint: disable=global-statement
    _dependencies = None


def status_for_error(error: DigRunnerError) -> int:
    """Map a query error to an HTTP status code."""
    if isinstance(error, InvalidArgument):
        return 400
    if isinstance(error, Unavailable):
        return 503
    if isinstance(error, QueryTimeout):
        return 504
    return 502


ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


@router.get("/dig", response_model=QueryResponse, responses=ERROR_RESPONSES)
@sentry_exception_catcher
def dig(
    domain: str,
    record_type: str = Query(..., alias="type"),
    server: Optional[str] = None,
    timeout: Optional[int] = None,
    deps: RouteDependencies = Depends(get_dependencies),
):
    """Run dig for a domain and record type."""
    settings = deps.settings

    if server is None:
        server = settings.default_server
    if timeout is None:
        timeout = settings.default_timeout

    outcome = deps.runner.query(domain, record_type, server, timeout)

    if not outcome.is_ok:
        error = outcome.error

        if not is_expected_query_error(error):
            capture_exception(
                error,
                {"domain": domain, "record_type": record_type, "server": server},
                level="warning",
            )

        return JSONResponse(
            status_code=status_for_error(error), content={"detail": str(error)}
        )

    return QueryResponse.model_validate(outcome.value.model_dump())


@router.get("/record-types", response_model=RecordTypesResponse)
async def record_types():
    """List the record types the dig endpoint accepts."""
    return RecordTypesResponse(result=sorted(VALID_RECORD_TYPES))

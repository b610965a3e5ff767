"""Shared helpers for API route modules."""

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from mc_relay.core.errors import NotReadyError, RelayError, ValidationError


def status_for_error(error: RelayError) -> int:
    """Map a typed relay error onto an HTTP status code."""
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, NotReadyError):
        return 503
    return 500


def raise_for_error(error: RelayError) -> None:
    """Raise the HTTPException matching ``error``."""
    raise HTTPException(status_code=status_for_error(error), detail=error.detail)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400, like missing fields."""
    return JSONResponse(status_code=400, content={"detail": "Malformed request body"})

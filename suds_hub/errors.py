"""
Domain errors raised by the SUDS Hub services.
Each one is surfaced to the client as a JSON error; none are retried.
"""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class SudsHubError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateError(SudsHubError):
    """Name collision on add or rename."""
    status_code = 409


class NotFoundError(SudsHubError):
    """Operation on a missing key."""
    status_code = 404


class ValidationInputError(SudsHubError):
    """Required field missing or blank, or a value outside its allowed set."""
    status_code = 422


class ServiceError(SudsHubError):
    """Document store or text completion failure."""
    status_code = 502

    def __init__(self, message: str, http_status: Optional[int] = None):
        super().__init__(message)
        self.http_status = http_status


def register_exception_handlers(app: FastAPI) -> None:
    async def _handle(request: Request, exc: SudsHubError):
        body = {"detail": exc.message, "error": type(exc).__name__}
        if isinstance(exc, ServiceError) and exc.http_status is not None:
            body["upstream_status"] = exc.http_status
        return JSONResponse(status_code=exc.status_code, content=body)

    app.add_exception_handler(SudsHubError, _handle)

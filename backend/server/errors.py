"""Planner error taxonomy + FastAPI handlers."""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PlannerError(Exception):
    status_code = 500
    detail = "Internal error"

    def __init__(self, detail: str = None):
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class NotConfiguredError(PlannerError):
    """Identity, store or AI boundary is unavailable. Not retried."""
    status_code = 503
    detail = "Service is not configured"


class NotFoundError(PlannerError):
    status_code = 404
    detail = "Not found"


class TransientIOError(PlannerError):
    """Store or network call failed or timed out. Safe to retry."""
    status_code = 503
    detail = "Temporary storage failure. Please try again."


class DraftValidationError(PlannerError):
    status_code = 422
    detail = "Invalid draft"


class BusyError(PlannerError):
    """The same mutating action is already in flight."""
    status_code = 409
    detail = "This action is already in progress"


async def _planner_error_handler(request: Request, exc: PlannerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": type(exc).__name__},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PlannerError, _planner_error_handler)

"""
Error types for ChainBreaker and the handlers that render them.

Every error response is the same envelope: {code, message, details?}.
`code` is stable and machine-readable; `message` is for humans.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class ChainsException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class HabitNotFoundError(ChainsException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "HABIT_NOT_FOUND"

    def __init__(self, habit_id: int):
        super().__init__(
            message=f"Habit {habit_id} does not exist.",
            details={"habit_id": habit_id},
        )


class InvalidDayKeyError(ChainsException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_DAY_KEY"

    def __init__(self, value: Any):
        super().__init__(
            message=f"{value!r} is not a valid day key (expected YYYY-MM-DD).",
            details={"value": str(value)},
        )


class InvalidWindowError(ChainsException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_WINDOW"

    def __init__(self, window: int, max_window: int):
        super().__init__(
            message=f"Calendar window must be between 1 and {max_window} days. Received {window}.",
            details={"window": window, "max_window": max_window},
        )


class FutureDayError(ChainsException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "FUTURE_DAY"

    def __init__(self, day: str, today: str):
        super().__init__(
            message=f"Cannot log {day}: it is after today ({today}).",
            details={"day": day, "today": today},
        )


class WeightEntryNotFoundError(ChainsException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "WEIGHT_NOT_FOUND"

    def __init__(self):
        super().__init__(message="No weight entries have been logged yet.")


class PersistenceError(ChainsException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "PERSISTENCE_ERROR"

    def __init__(self, operation: str):
        super().__init__(
            message=f"Could not persist changes for '{operation}'.",
            details={"operation": operation},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def chains_exception_handler(request: Request, exc: ChainsException) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


def _field_path(loc) -> str:
    # "body" is FastAPI's prefix for payload fields; clients only need the field.
    return ".".join(str(part) for part in loc if part != "body")


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """422 with one entry per rejected field."""
    errors = [
        {"field": _field_path(err["loc"]), "message": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": f"{len(errors)} field(s) failed validation.",
            "details": {"errors": errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    fallback = ChainsException("Unexpected server error.")
    return JSONResponse(status_code=fallback.http_status, content=fallback.to_dict())

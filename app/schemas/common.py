"""
Shared schema primitives used across the API.
"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Standard error envelope returned for all 4xx/5xx responses."""
    model_config = ConfigDict(from_attributes=True)

    code: str
    message: str
    details: Optional[dict[str, Any]] = None


HABIT_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Habit does not exist (HABIT_NOT_FOUND)."}}
VALIDATION_FAILED = {422: {"model": ErrorResponse, "description": "Invalid input (VALIDATION_ERROR)."}}

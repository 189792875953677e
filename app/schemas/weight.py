"""
Weight log schemas.

PUT /weight          → WeightUpsertRequest → WeightUpsertResponse
GET /weight          → WeightListResponse
GET /weight/latest   → WeightEntryResponse
GET /weight/history  → list[WeightDayResponse]
GET /weight/trend    → WeightTrendResponse
"""
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WeightUpsertRequest(BaseModel):
    weight: Decimal = Field(
        gt=0,
        lt=1000,
        max_digits=6,
        decimal_places=2,
        description="Body weight in kilograms.",
        examples=[72.4],
    )
    day: Optional[date] = Field(
        default=None,
        description="ISO date of the measurement. Defaults to today (local).",
        examples=["2026-02-20"],
    )


class WeightEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    day: str
    weight: float


class WeightUpsertResponse(WeightEntryResponse):
    created: bool = Field(description="False when an existing entry for the day was overwritten.")


class WeightListResponse(BaseModel):
    total: int
    items: list[WeightEntryResponse]


class WeightDayResponse(BaseModel):
    day: str
    weekday: str
    has_entry: bool
    is_today: bool


class WeightTrendResponse(BaseModel):
    since: str
    until: str
    points: list[WeightEntryResponse] = Field(description="Oldest first.")
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    change: Optional[float] = Field(default=None, description="Last minus first weight in the window.")

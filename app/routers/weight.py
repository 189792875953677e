"""
Weight router.

PUT /weight           log today's (or a given day's) weight; upsert by day
GET /weight           all entries (paginated, newest first)
GET /weight/latest    most recent entry
GET /weight/history   last 7 days, flagging days with an entry
GET /weight/trend     recent entries for charting
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.clock import get_today
from app.core.errors import WeightEntryNotFoundError
from app.db.base import get_db
from app.models.weight_entry import WeightEntry
from app.schemas.common import ErrorResponse, VALIDATION_FAILED
from app.schemas.weight import (
    WeightDayResponse,
    WeightEntryResponse,
    WeightListResponse,
    WeightTrendResponse,
    WeightUpsertRequest,
    WeightUpsertResponse,
)
from app.services import day_keys
from app.services import weight as weight_service

router = APIRouter(prefix="/weight", tags=["weight"])


def _entry_to_response(entry: WeightEntry) -> WeightEntryResponse:
    return WeightEntryResponse(id=entry.id, day=entry.day, weight=float(entry.weight))


def _opt_float(v) -> Optional[float]:
    return float(v) if v is not None else None


@router.put(
    "",
    response_model=WeightUpsertResponse,
    summary="Log weight for a day (overwrites that day's entry)",
    responses=VALIDATION_FAILED,
)
def upsert_weight(
    payload: WeightUpsertRequest,
    db: Session = Depends(get_db),
    today: str = Depends(get_today),
):
    day = day_keys.normalize(payload.day) if payload.day else today
    entry, created = weight_service.upsert_weight(db, payload.weight, day, today)
    return WeightUpsertResponse(
        id=entry.id, day=entry.day, weight=float(entry.weight), created=created
    )


@router.get("", response_model=WeightListResponse, summary="List weight entries (newest first)")
def list_weights(
    limit: int = Query(default=50, ge=1, le=366, description="Page size."),
    offset: int = Query(default=0, ge=0, description="Skip N items."),
    db: Session = Depends(get_db),
):
    total, items = weight_service.list_weights(db, limit=limit, offset=offset)
    return WeightListResponse(total=total, items=[_entry_to_response(e) for e in items])


@router.get(
    "/latest",
    response_model=WeightEntryResponse,
    summary="Most recent weight entry",
    responses={404: {"model": ErrorResponse, "description": "Nothing logged yet (WEIGHT_NOT_FOUND)."}},
)
def latest_weight(db: Session = Depends(get_db)):
    entry = weight_service.latest_weight(db)
    if entry is None:
        raise WeightEntryNotFoundError()
    return _entry_to_response(entry)


@router.get(
    "/history",
    response_model=list[WeightDayResponse],
    summary="Last 7 days, oldest first",
)
def weekly_history(db: Session = Depends(get_db), today: str = Depends(get_today)):
    return [
        WeightDayResponse(day=d.day, weekday=d.weekday, has_entry=d.has_entry, is_today=d.is_today)
        for d in weight_service.weekly_history(db, today)
    ]


@router.get("/trend", response_model=WeightTrendResponse, summary="Recent entries for charting")
def weight_trend(
    days: Optional[int] = Query(default=None, ge=1, le=366, description="Lookback. Defaults to 14."),
    db: Session = Depends(get_db),
    today: str = Depends(get_today),
):
    result = weight_service.trend(db, today, days)
    return WeightTrendResponse(
        since=result.since,
        until=result.until,
        points=[_entry_to_response(p) for p in result.points],
        minimum=_opt_float(result.minimum),
        maximum=_opt_float(result.maximum),
        change=_opt_float(result.change),
    )

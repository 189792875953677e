import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text

from app.db.base import Base, SessionLocal, engine, get_db
from app import models  # noqa: F401  registers tables on Base.metadata
from app.core.config import settings
from app.routers import habits as habits_router
from app.routers import weight as weight_router
from app.services import day_keys
from app.services.habits import reconcile_streaks
from app.core.errors import (
    ChainsException,
    chains_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DATABASE_URL.startswith("sqlite"):
        # Local single-file store: create tables on first run. Server
        # databases are migrated with Alembic.
        Base.metadata.create_all(bind=engine)

    # Streaks are re-derived from the wall clock once per process start,
    # before any request reads habit state. A failure here aborts startup.
    db = SessionLocal()
    try:
        result = reconcile_streaks(db, day_keys.today())
        logger.info(
            "Startup reconciliation on %s: %d habit(s), %d reset",
            result.reference_day, result.evaluated, len(result.reset_ids),
        )
    finally:
        db.close()
    yield


app = FastAPI(
    title="ChainBreaker API",
    description=(
        "**Habit chains and daily weight log**\n\n"
        "Tracks consecutive-day streaks per habit, resets broken chains, "
        "and reconstructs day-by-day calendars from the check-in log.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(ChainsException, chains_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(habits_router.router)
app.include_router(weight_router.router)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when both the API and the database
    are reachable. Returns HTTP 503 if the DB is down.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except Exception:
        logger.exception("Health check could not reach the database")
        db_status = "unreachable"

    if db_status != "ok":
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": db_status},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV, "today": day_keys.today()}

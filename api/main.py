"""Daily Pulse — FastAPI read API and manual trigger."""
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from common.dates import truncate_to_day
from common.errors import PulseError
from common.logger import get_logger, set_level
from common.models import CheckResult
from config.settings import PulseSettings
from pipeline.daily_check import DailyPulseOrchestrator, build_orchestrator
from scoring.aggregator import load_metrics
from storage.database import PulseStore

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = PulseSettings.from_env()
    set_level(settings.log_level)
    store = PulseStore.from_url(settings.database_url)
    await store.init_db()
    app.state.store = store
    app.state.orchestrator = build_orchestrator(settings, store)
    yield
    await store.dispose()


app = FastAPI(title="Daily Pulse API", version="0.1.0", lifespan=lifespan)

app.add_middleware(CORSMiddleware,
    allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


def _store(request: Request) -> PulseStore:
    return request.app.state.store


def _orchestrator(request: Request) -> DailyPulseOrchestrator:
    return request.app.state.orchestrator


class TriggerRequest(BaseModel):
    date: Optional[str] = None


# ── API routes (on a shared router, mounted at both "/" and "/api") ───────────

router = APIRouter()

@router.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

@router.get("/pulse/history")
async def get_history(request: Request, start: Optional[date] = None, end: Optional[date] = None):
    """Date/status/score for every pulse in [start, end]."""
    records = await _store(request).load_range(start, end)
    return [{"date": r.date, "status": r.status, "score": r.score} for r in records]

@router.get("/pulse/metrics")
async def get_metrics(request: Request):
    metrics = await load_metrics(_store(request))
    return {name: m.model_dump() for name, m in metrics.items()}

@router.get("/pulse/last-7-days")
async def get_last_7_days(request: Request):
    records = await _store(request).load_since(7)
    return [r.model_dump() for r in records]

@router.get("/pulse/details/{day}")
async def get_details(request: Request, day: date):
    record = await _store(request).find_by_date(day)
    if record is None:
        raise HTTPException(404, "Pulse not found")
    return {**record.model_dump(), "band": record.band}

@router.post("/pulse/trigger-check", response_model=CheckResult, response_model_exclude_none=True)
async def trigger_check(request: Request, body: Optional[TriggerRequest] = None):
    """Run the daily check now (defaults to today, UTC)."""
    try:
        day = truncate_to_day(body.date if body else None)
    except ValueError:
        raise HTTPException(400, f"Invalid date: {body.date!r}")
    try:
        return await _orchestrator(request).run_daily_check(day)
    except PulseError as e:
        logger.error(f"Manual pulse check failed: {e}")
        raise HTTPException(500, f"Pulse check failed: {e}")

# Mount routes at root (for nginx) and at /api (for direct browser access)
app.include_router(router)
app.include_router(router, prefix="/api")

"""
History aggregation over stored pulses.

For a trailing window:
  steady        number of Good days
  distressed    number of Bad days
  percentage    share of Good days, rounded to a whole percent (0 if empty)
  average_score mean score to one decimal, over days that have a score
"""
from datetime import date
from typing import Optional

import pandas as pd
from pydantic import BaseModel

from common.models import PulseRecord, PulseStatus, score_band
from storage.database import PulseStore

WINDOWS = {"last7": 7, "last30": 30}


class PulseMetrics(BaseModel):
    steady: int = 0
    distressed: int = 0
    percentage: int = 0
    average_score: float = 0.0
    band: Optional[str] = None


def summarize(records: list[PulseRecord]) -> PulseMetrics:
    if not records:
        return PulseMetrics()
    df = pd.DataFrame({
        "status": [r.status.value for r in records],
        "score": [r.score for r in records],
    })
    steady = int((df["status"] == PulseStatus.GOOD.value).sum())
    distressed = int((df["status"] == PulseStatus.BAD.value).sum())
    percentage = int(steady * 100 / len(df) + 0.5)  # half-up
    scores = df["score"].dropna().astype(float)
    average = round(float(scores.mean()), 1) if not scores.empty else 0.0
    return PulseMetrics(
        steady=steady,
        distressed=distressed,
        percentage=percentage,
        average_score=average,
        band=score_band(average) if not scores.empty else None,
    )


async def load_metrics(store: PulseStore, today: Optional[date] = None) -> dict[str, PulseMetrics]:
    """Metrics for every trailing window in WINDOWS."""
    return {
        name: summarize(await store.load_since(days, today=today))
        for name, days in WINDOWS.items()
    }

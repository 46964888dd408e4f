"""Mock pulse history for local dashboards.

Seeding never overwrites: days that already hold a real pulse are skipped.
"""
from datetime import date, timedelta
from typing import Optional

import numpy as np

from common.dates import utc_today
from common.logger import get_logger
from common.models import Headline, HeadlineSource, PulseStatus
from storage.database import PulseStore

logger = get_logger("seed")

_SOURCES = [
    HeadlineSource(name="Reuters", url="https://reuters.com"),
    HeadlineSource(name="AP News", url="https://apnews.com"),
    HeadlineSource(name="BBC", url="https://bbc.com"),
    HeadlineSource(name="Al Jazeera", url="https://aljazeera.com"),
]
_TITLES = [
    "Global leaders meet to discuss climate commitments",
    "Researchers report progress on vaccine trial",
    "Markets react to central bank decision",
    "Aid groups scale up response after flooding",
]


def mock_fields(day: date, rng: np.random.Generator) -> dict:
    score = round(float(rng.uniform(0, 10)), 1)
    status = PulseStatus.GOOD if score >= 5.0 else PulseStatus.BAD
    n = int(rng.integers(3, 5))
    headlines = [
        Headline(
            title=_TITLES[j % len(_TITLES)],
            description=f"Mock coverage for {day.isoformat()}.",
            url=_SOURCES[j % len(_SOURCES)].url,
            source=_SOURCES[j % len(_SOURCES)],
        )
        for j in range(n)
    ]
    return {
        "status": status,
        "score": score,
        "headlines": headlines,
        "rationale": f"Mock rationale: {day.isoformat()} rated {status.value} ({score}).",
        "market_index": round(float(rng.uniform(4000, 5000)), 2),
    }


async def seed_mock_history(store: PulseStore, days: int = 60,
                            today: Optional[date] = None, seed: int = 42) -> int:
    """Insert mock pulses for the ``days`` days ending today. Returns rows inserted."""
    anchor = today or utc_today()
    rng = np.random.default_rng(seed)
    inserted = 0
    for offset in range(days - 1, -1, -1):
        day = anchor - timedelta(days=offset)
        if await store.insert_if_absent(day, mock_fields(day, rng)):
            inserted += 1
    logger.info(f"Seeded {inserted}/{days} mock days ending {anchor.isoformat()}")
    return inserted

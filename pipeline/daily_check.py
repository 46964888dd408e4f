"""Daily pulse orchestrator.

Flow per calendar day:
  1. Truncate the requested moment to its UTC day (the storage key).
  2. Stored already → backfill a missing market value, return the stored
     verdict. The classifier is never called again for that day.
  3. Otherwise → headlines and market value concurrently, classify, upsert.

News and classifier failures propagate and nothing is written. Market
failures only leave ``market_index`` empty; a later run retries just that.
"""
import asyncio
from datetime import date
from typing import Optional, Protocol

from common.dates import DayLike, truncate_to_day
from common.logger import get_logger, new_request_id
from common.models import ENTRY_EXISTS_MESSAGE, CheckResult, Headline, Verdict
from storage.database import PulseStore

logger = get_logger("daily_check")


class HeadlineSource(Protocol):
    def fetch_headlines(self, day: date) -> list[Headline]: ...


class MarketSource(Protocol):
    def fetch_index_value(self, day: date) -> Optional[float]: ...


class Classifier(Protocol):
    def classify(self, headlines: list[Headline]) -> Verdict: ...


class DailyPulseOrchestrator:
    """Coordinates adapters and store; the adapters are blocking and run in threads."""

    def __init__(self, news: HeadlineSource, market: MarketSource,
                 classifier: Classifier, store: PulseStore):
        self.news = news
        self.market = market
        self.classifier = classifier
        self.store = store

    async def run_daily_check(self, day: DayLike = None) -> CheckResult:
        new_request_id()
        key = truncate_to_day(day)

        existing = await self.store.find_by_date(key)
        if existing is not None:
            logger.info(f"Pulse entry exists for {key.isoformat()}.")
            if existing.market_index is None:
                await self._backfill_market(key)
            return CheckResult(
                status=existing.status, score=existing.score, message=ENTRY_EXISTS_MESSAGE
            )

        logger.info(f"Running Daily Pulse Check for {key.isoformat()}...")
        headlines, market_index = await asyncio.gather(
            asyncio.to_thread(self.news.fetch_headlines, key),
            self._fetch_market(key),
        )
        logger.info(f"Extracted {len(headlines)} headlines")

        verdict = await asyncio.to_thread(self.classifier.classify, headlines)
        await self.store.upsert(key, {
            "status": verdict.status,
            "score": verdict.score,
            "headlines": headlines,
            "rationale": verdict.rationale,
            "market_index": market_index,
        })
        logger.info(f"Pulse Check Complete: {verdict.status.value} ({verdict.score})")
        return CheckResult(status=verdict.status, score=verdict.score)

    async def _fetch_market(self, key: date) -> Optional[float]:
        try:
            return await asyncio.to_thread(self.market.fetch_index_value, key)
        except Exception as e:
            logger.warning(f"Market value unavailable for {key.isoformat()}: {e}")
            return None

    async def _backfill_market(self, key: date) -> None:
        value = await self._fetch_market(key)
        if value is None:
            return
        await self.store.update_fields(key, {"market_index": value})
        logger.info(f"Backfilled market index for {key.isoformat()}: {value}")


def build_orchestrator(settings, store: Optional[PulseStore] = None) -> DailyPulseOrchestrator:
    """Wire the production adapters from one settings object."""
    from ingest.alpha_vantage import AlphaVantageIngestor
    from ingest.news import NewsSourceAdapter
    from scoring.sentiment import PulseClassifier

    return DailyPulseOrchestrator(
        news=NewsSourceAdapter(settings),
        market=AlphaVantageIngestor(settings),
        classifier=PulseClassifier(settings),
        store=store or PulseStore.from_url(settings.database_url),
    )

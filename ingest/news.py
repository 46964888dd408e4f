"""Headline ingestors.

Which provider answers depends on recency:
  - today (UTC)  → NewsAPI /v2/top-headlines (no date filter)
  - any other day → GNews /api/v4/search bounded to that UTC day

Both are normalized to ``Headline`` so the classifier and the store never see
provider-specific shapes.
"""
from datetime import date
from typing import Optional

import requests

from common.dates import day_bounds, utc_today
from common.errors import ConfigurationError, UpstreamError
from common.models import Headline, HeadlineSource
from config.settings import PulseSettings
from ingest.base import BaseIngestor

MAX_HEADLINES = 20
HISTORICAL_QUERY = "world OR news OR humanity OR progress"


def normalize_article(article: dict) -> Headline:
    source = article.get("source") or {}
    if isinstance(source, str):
        source = {"name": source}
    return Headline(
        title=article.get("title") or "",
        description=article.get("description") or "",
        url=article.get("url") or "",
        source=HeadlineSource(name=source.get("name") or "", url=source.get("url") or None),
    )


def _articles(payload, provider: str) -> list[Headline]:
    if not isinstance(payload, dict):
        raise UpstreamError(f"{provider} returned a non-object body")
    if payload.get("status") == "error" or payload.get("errors"):
        detail = payload.get("message") or payload.get("errors")
        raise UpstreamError(f"{provider} returned an error payload: {detail}")
    return [normalize_article(a) for a in payload.get("articles") or []]


class NewsApiIngestor(BaseIngestor):
    """NewsAPI top headlines — recency ranked, current day only."""
    BASE_URL = "https://newsapi.org/v2/top-headlines"

    def __init__(self, api_key: Optional[str], session: Optional[requests.Session] = None):
        super().__init__(session)
        self.api_key = api_key

    def fetch(self, day: date) -> list[Headline]:
        if not self.api_key:
            raise ConfigurationError("NEWS_API_KEY is not defined")
        params = {"language": "en", "pageSize": MAX_HEADLINES,
                  "category": "general", "apiKey": self.api_key}
        self.logger.info(f"Fetching top headlines for {day.isoformat()}")
        return _articles(self.get_json(self.BASE_URL, params), "NewsAPI")


class GNewsIngestor(BaseIngestor):
    """GNews search restricted to a single UTC day, ranked by relevance."""
    BASE_URL = "https://gnews.io/api/v4/search"

    def __init__(self, api_key: Optional[str], session: Optional[requests.Session] = None):
        super().__init__(session)
        self.api_key = api_key

    def fetch(self, day: date) -> list[Headline]:
        if not self.api_key:
            raise ConfigurationError("GNEWS_API_KEY is not defined")
        start, end = day_bounds(day)
        params = {"q": HISTORICAL_QUERY, "token": self.api_key,
                  "from": start, "to": end, "lang": "en",
                  "max": MAX_HEADLINES, "sortby": "relevance"}
        self.logger.info(f"Fetching historical headlines for {day.isoformat()}")
        return _articles(self.get_json(self.BASE_URL, params), "GNews")


class NewsSourceAdapter:
    """Routes a day to the right headline provider."""

    def __init__(self, settings: PulseSettings, session: Optional[requests.Session] = None):
        self.today_source = NewsApiIngestor(settings.news_api_key, session)
        self.history_source = GNewsIngestor(settings.historical_news_api_key, session)

    def fetch_headlines(self, day: date) -> list[Headline]:
        source = self.today_source if day == utc_today() else self.history_source
        headlines = source.fetch(day)
        source.logger.info(f"Got {len(headlines)} headlines for {day.isoformat()}")
        return headlines

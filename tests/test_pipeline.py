"""Tests for the daily pulse orchestrator.

Adapters are doubles; the store is a real SQLite file so uniqueness and
partial updates are exercised end to end.
"""
import asyncio
from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest

from common.dates import truncate_to_day, utc_today
from common.errors import ConfigurationError, UpstreamError
from common.models import ENTRY_EXISTS_MESSAGE, Headline, PulseStatus, Verdict
from pipeline.daily_check import DailyPulseOrchestrator, build_orchestrator

DAY = date(2024, 5, 1)
HEADLINES = [Headline(title=f"Headline {i}", description="...") for i in range(20)]


def make_orchestrator(store, verdicts=None, market_value=4321.0):
    news = MagicMock()
    news.fetch_headlines.return_value = HEADLINES
    market = MagicMock()
    if isinstance(market_value, Exception):
        market.fetch_index_value.side_effect = market_value
    else:
        market.fetch_index_value.return_value = market_value
    classifier = MagicMock()
    classifier.classify.side_effect = verdicts or [
        Verdict(status=PulseStatus.GOOD, score=7.2, rationale="Progress."),
        Verdict(status=PulseStatus.BAD, score=1.0, rationale="Would differ on retry."),
    ]
    return DailyPulseOrchestrator(news, market, classifier, store), news, market, classifier


class TestTruncateToDay:
    def test_aware_datetime_converted_to_utc(self):
        # 23:30 in UTC-05:00 is already the next UTC day
        from datetime import timedelta
        tz = timezone(timedelta(hours=-5))
        assert truncate_to_day(datetime(2024, 5, 1, 23, 30, tzinfo=tz)) == date(2024, 5, 2)

    def test_strings(self):
        assert truncate_to_day("2024-05-01") == DAY
        assert truncate_to_day("2024-05-01T15:42:00Z") == DAY

    def test_none_is_today(self):
        assert truncate_to_day(None) == utc_today()

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            truncate_to_day("yesterday")


class TestLogLevel:
    def test_configured_level_reaches_existing_and_new_loggers(self):
        import logging

        from common import logger as log_module

        existing = log_module.get_logger("daily_check")
        previous = logging.getLevelName(existing.level)
        try:
            log_module.set_level("debug")
            assert existing.level == logging.DEBUG
            assert log_module.get_logger("log-level-fresh").level == logging.DEBUG
        finally:
            log_module.set_level(previous)
        assert existing.level == logging.getLevelName(previous)


@pytest.mark.asyncio
class TestDailyPulseOrchestrator:
    async def test_first_run_computes_and_stores(self, store):
        orch, news, market, classifier = make_orchestrator(store)
        result = await orch.run_daily_check(DAY)

        assert result.status == PulseStatus.GOOD
        assert result.score == 7.2
        assert result.message is None
        news.fetch_headlines.assert_called_once_with(DAY)
        market.fetch_index_value.assert_called_once_with(DAY)
        classifier.classify.assert_called_once_with(HEADLINES)

        record = await store.find_by_date(DAY)
        assert record.rationale == "Progress."
        assert record.market_index == 4321.0
        assert [h.title for h in record.headlines] == [h.title for h in HEADLINES]
        assert await store.count(DAY) == 1

    async def test_second_run_is_cache_hit(self, store):
        orch, _, _, classifier = make_orchestrator(store)
        first = await orch.run_daily_check(DAY)
        second = await orch.run_daily_check(DAY)

        assert second.message == ENTRY_EXISTS_MESSAGE
        assert second.already_existed and not first.already_existed
        assert (second.status, second.score) == (first.status, first.score)
        assert classifier.classify.call_count == 1
        record = await store.find_by_date(DAY)
        assert record.rationale == "Progress."
        assert await store.count(DAY) == 1

    async def test_time_of_day_maps_to_same_key(self, store):
        orch, news, _, classifier = make_orchestrator(store)
        await orch.run_daily_check(datetime(2024, 5, 1, 15, 42, tzinfo=timezone.utc))
        result = await orch.run_daily_check(datetime(2024, 5, 1, 0, 0, tzinfo=timezone.utc))

        assert result.message == ENTRY_EXISTS_MESSAGE
        news.fetch_headlines.assert_called_once_with(DAY)
        assert classifier.classify.call_count == 1
        assert await store.count() == 1

    async def test_default_date_is_today(self, store):
        orch, news, _, _ = make_orchestrator(store)
        await orch.run_daily_check()
        news.fetch_headlines.assert_called_once_with(utc_today())
        assert await store.find_by_date(utc_today()) is not None

    async def test_market_failure_degrades_then_backfills(self, store):
        orch, _, market, classifier = make_orchestrator(store, market_value=RuntimeError("down"))
        result = await orch.run_daily_check(DAY)
        assert result.status == PulseStatus.GOOD
        assert (await store.find_by_date(DAY)).market_index is None

        market.fetch_index_value.side_effect = None
        market.fetch_index_value.return_value = 5100.25
        again = await orch.run_daily_check(DAY)

        assert again.message == ENTRY_EXISTS_MESSAGE
        record = await store.find_by_date(DAY)
        assert record.market_index == 5100.25
        assert record.status == PulseStatus.GOOD
        assert record.score == 7.2
        assert record.rationale == "Progress."
        assert classifier.classify.call_count == 1

    async def test_absent_market_value_stays_absent(self, store):
        orch, _, market, _ = make_orchestrator(store, market_value=None)
        await orch.run_daily_check(DAY)
        await orch.run_daily_check(DAY)
        assert market.fetch_index_value.call_count == 2
        assert (await store.find_by_date(DAY)).market_index is None

    async def test_no_market_refetch_when_present(self, store):
        orch, _, market, _ = make_orchestrator(store)
        await orch.run_daily_check(DAY)
        await orch.run_daily_check(DAY)
        assert market.fetch_index_value.call_count == 1

    async def test_news_failure_writes_nothing(self, store):
        orch, news, _, classifier = make_orchestrator(store)
        news.fetch_headlines.side_effect = UpstreamError("GNews: HTTP 503")
        with pytest.raises(UpstreamError):
            await orch.run_daily_check(DAY)
        classifier.classify.assert_not_called()
        assert await store.count() == 0

    async def test_missing_news_key_writes_nothing(self, store):
        orch, news, _, _ = make_orchestrator(store)
        news.fetch_headlines.side_effect = ConfigurationError("GNEWS_API_KEY is not defined")
        with pytest.raises(ConfigurationError):
            await orch.run_daily_check(DAY)
        assert await store.count() == 0

    async def test_classifier_failure_writes_nothing(self, store):
        orch, _, _, _ = make_orchestrator(store, verdicts=[UpstreamError("Gemini down")])
        with pytest.raises(UpstreamError):
            await orch.run_daily_check(DAY)
        assert await store.count() == 0

    async def test_concurrent_runs_same_day_one_record(self, store):
        orch, _, _, _ = make_orchestrator(store)
        results = await asyncio.gather(orch.run_daily_check(DAY), orch.run_daily_check(DAY))
        assert await store.count(DAY) == 1
        assert all(r.status in (PulseStatus.GOOD, PulseStatus.BAD) for r in results)

    async def test_different_days_independent(self, store):
        orch, _, _, _ = make_orchestrator(store, verdicts=[
            Verdict(status=PulseStatus.GOOD, score=6.0, rationale="a"),
            Verdict(status=PulseStatus.BAD, score=3.5, rationale="b"),
        ])
        await asyncio.gather(orch.run_daily_check(DAY), orch.run_daily_check(date(2024, 5, 2)))
        assert await store.count() == 2


class TestBuildOrchestrator:
    def test_wires_adapters_from_settings(self, settings):
        orch = build_orchestrator(settings)
        assert orch.news.today_source.api_key == "news-key"
        assert orch.news.history_source.api_key == "gnews-key"
        assert orch.market.api_key == "av-key"
        assert orch.classifier.api_key == "gemini-key"
        assert orch.store.dialect == "sqlite"

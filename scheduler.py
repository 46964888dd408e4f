#!/usr/bin/env python3
"""
Standalone daily trigger — run one pulse check for today (UTC) and exit.
Run: python scheduler.py
Or add to cron (23:50 UTC): 50 23 * * * cd /srv/daily-pulse && ./venv/bin/python scheduler.py
"""
import asyncio
import sys

from common.errors import PulseError
from common.logger import get_logger, set_level
from config.settings import PulseSettings
from pipeline.daily_check import build_orchestrator

logger = get_logger("scheduler")


async def run_once() -> int:
    settings = PulseSettings.from_env()
    set_level(settings.log_level)
    orchestrator = build_orchestrator(settings)
    await orchestrator.store.init_db()
    try:
        result = await orchestrator.run_daily_check()
    except PulseError as e:
        logger.error(f"❌ Scheduled Pulse-Check failed: {e}")
        return 1
    finally:
        await orchestrator.store.dispose()
    logger.info(f"✅ Scheduled Pulse-Check done: {result.status.value} ({result.score})"
                + (f" — {result.message}" if result.message else ""))
    return 0


def main() -> int:
    return asyncio.run(run_once())


if __name__ == "__main__":
    sys.exit(main())

"""
Daily Pulse — manual entry point.

  python run.py check [--date YYYY-MM-DD]   run (or re-run) the check for a day
  python run.py history [--days N]          print the stored trailing window
  python run.py seed [--days N]             fill empty days with mock pulses
"""
import argparse
import asyncio
import sys

from common.errors import PulseError
from common.logger import get_logger, set_level
from common.models import score_band
from config.settings import PulseSettings
from pipeline.daily_check import build_orchestrator
from scoring.aggregator import summarize
from storage.database import PulseStore
from storage.seed import seed_mock_history

logger = get_logger("run")


async def cmd_check(settings: PulseSettings, store: PulseStore, args) -> int:
    orchestrator = build_orchestrator(settings, store)
    try:
        result = await orchestrator.run_daily_check(args.date)
    except PulseError as e:
        print(f"ERROR: pulse check failed: {e}", file=sys.stderr)
        return 1
    note = f"  ({result.message})" if result.message else ""
    print(f"{result.status.value}  {result.score}{note}")
    return 0


async def cmd_history(settings: PulseSettings, store: PulseStore, args) -> int:
    records = await store.load_since(args.days)
    print("\n" + "=" * 60)
    print(f"  Daily Pulse — last {args.days} days")
    print("=" * 60)
    for r in records:
        score = f"{r.score:>5.1f}" if r.score is not None else "    -"
        market = f"{r.market_index:>10.2f}" if r.market_index is not None else "         -"
        print(f"{r.date.isoformat()}  {r.status.value:<5} {score}  {market}  {score_band(r.score) or ''}")
    m = summarize(records)
    print("-" * 60)
    print(f"  Good: {m.steady} | Bad: {m.distressed} | {m.percentage}% good | avg {m.average_score}")
    print("=" * 60 + "\n")
    return 0


async def cmd_seed(settings: PulseSettings, store: PulseStore, args) -> int:
    inserted = await seed_mock_history(store, days=args.days)
    print(f"Seeded {inserted} mock days")
    return 0


COMMANDS = {"check": cmd_check, "history": cmd_history, "seed": cmd_seed}


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Daily humanity pulse")
    sub = parser.add_subparsers(dest="command", required=True)
    check = sub.add_parser("check", help="run the daily check")
    check.add_argument("--date", default=None, help="YYYY-MM-DD (default: today, UTC)")
    history = sub.add_parser("history", help="show stored pulses")
    history.add_argument("--days", type=int, default=30)
    seed = sub.add_parser("seed", help="insert mock pulses for empty days")
    seed.add_argument("--days", type=int, default=60)
    return parser.parse_args(argv)


async def amain(argv=None) -> int:
    args = parse_args(argv)
    settings = PulseSettings.from_env()
    set_level(settings.log_level)
    store = PulseStore.from_url(settings.database_url)
    await store.init_db()
    try:
        return await COMMANDS[args.command](settings, store, args)
    finally:
        await store.dispose()


if __name__ == "__main__":
    sys.exit(asyncio.run(amain()))

"""Pulse record store.

Backend is selected from the DATABASE_URL setting:
  - postgres:// or postgresql://...  → PostgreSQL via SQLAlchemy async + asyncpg
  - sqlite+aiosqlite:///path          → SQLite file (default: data/pulse.db)

Uniqueness per calendar date is enforced by the ``uq_pulses_date`` constraint;
writes go through the dialect's native ``INSERT ... ON CONFLICT (date)`` so two
concurrent checks for the same day can never produce two rows.
"""
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import func, select, update
from sqlalchemy.pool import NullPool
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from common.dates import DayLike, optional_day, truncate_to_day, utc_today
from common.logger import get_logger
from common.models import Headline, PulseRecord
from storage.models import Base, PulseDB

logger = get_logger("database")

# Columns a caller may write; ``date`` is the key and the rest is store-managed.
WRITABLE_FIELDS = {"status", "score", "headlines", "rationale", "market_index"}


def normalize_url(raw_url: str) -> str:
    """Map plain Postgres URLs onto the asyncpg driver."""
    url = raw_url.strip()
    if url.startswith("postgres://"):
        return "postgresql+asyncpg://" + url[len("postgres://"):]
    if url.startswith("postgresql://") and "+asyncpg" not in url:
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def create_engine_for(raw_url: str) -> AsyncEngine:
    url = normalize_url(raw_url)
    if url.startswith("postgresql"):
        engine = create_async_engine(
            url, echo=False, pool_pre_ping=True, pool_size=5, max_overflow=10
        )
        logger.info(f"[PG] Backend: {url.split('@')[-1]}")
        return engine
    if url.startswith("sqlite"):
        db_path = url.split(":///", 1)[-1]
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"[SQLITE] Backend: {db_path or ':memory:'}")
        return create_async_engine(url, echo=False, poolclass=NullPool)
    raise ValueError(f"Unsupported DATABASE_URL scheme: {url.split(':', 1)[0]}")


def _to_float(val) -> Optional[float]:
    return float(val) if val is not None else None


def _row_to_record(row: PulseDB) -> PulseRecord:
    return PulseRecord(
        date=row.date,
        status=row.status,
        score=_to_float(row.score),
        headlines=row.headlines or [],
        rationale=row.rationale or "",
        market_index=_to_float(row.market_index),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _serialize(fields: dict[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - WRITABLE_FIELDS
    if unknown:
        raise ValueError(f"Not writable pulse fields: {sorted(unknown)}")
    values = dict(fields)
    if "headlines" in values:
        values["headlines"] = [
            h.model_dump() if isinstance(h, Headline) else dict(h)
            for h in values["headlines"] or []
        ]
    if "status" in values and hasattr(values["status"], "value"):
        values["status"] = values["status"].value
    return values


class PulseStore:
    """Async persistence for :class:`PulseRecord` keyed by calendar date."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, database_url: str) -> "PulseStore":
        return cls(create_engine_for(database_url))

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def _insert(self):
        if self.dialect == "postgresql":
            return pg_insert(PulseDB)
        if self.dialect == "sqlite":
            return sqlite_insert(PulseDB)
        raise ValueError(f"No upsert support for dialect {self.dialect!r}")

    async def init_db(self) -> None:
        """Create all tables (idempotent). Prefer Alembic for production migrations."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Tables ensured")

    async def dispose(self) -> None:
        await self.engine.dispose()

    # ── reads ────────────────────────────────────────────────────────────────

    async def _get(self, session: AsyncSession, key: date) -> Optional[PulseRecord]:
        row = (
            await session.execute(select(PulseDB).where(PulseDB.date == key))
        ).scalar_one_or_none()
        return _row_to_record(row) if row is not None else None

    async def find_by_date(self, day: DayLike) -> Optional[PulseRecord]:
        async with self._sessions() as session:
            return await self._get(session, truncate_to_day(day))

    async def load_range(self, start: DayLike = None, end: DayLike = None) -> list[PulseRecord]:
        """Records with start <= date <= end (either bound optional), oldest first."""
        stmt = select(PulseDB).order_by(PulseDB.date)
        start_day, end_day = optional_day(start), optional_day(end)
        if start_day is not None:
            stmt = stmt.where(PulseDB.date >= start_day)
        if end_day is not None:
            stmt = stmt.where(PulseDB.date <= end_day)
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_row_to_record(r) for r in rows]

    async def load_since(self, days: int, today: DayLike = None) -> list[PulseRecord]:
        """Trailing window: every record dated on or after ``today - days``."""
        anchor = truncate_to_day(today) if today is not None else utc_today()
        return await self.load_range(start=anchor - timedelta(days=days))

    async def count(self, day: DayLike = None) -> int:
        stmt = select(func.count()).select_from(PulseDB)
        if day is not None:
            stmt = stmt.where(PulseDB.date == truncate_to_day(day))
        async with self._sessions() as session:
            return int((await session.execute(stmt)).scalar_one())

    # ── writes ───────────────────────────────────────────────────────────────

    async def upsert(self, day: DayLike, fields: dict[str, Any]) -> PulseRecord:
        """Insert or update the record for ``day`` atomically (last writer wins)."""
        key = truncate_to_day(day)
        values = _serialize(fields)
        stmt = (
            self._insert()
            .values(date=key, **values)
            .on_conflict_do_update(
                index_elements=["date"],
                set_={**values, "updated_at": func.now()},
            )
        )
        async with self._sessions() as session:
            async with session.begin():
                await session.execute(stmt)
                record = await self._get(session, key)
        logger.info(f"Upserted pulse for {key.isoformat()}")
        return record

    async def insert_if_absent(self, day: DayLike, fields: dict[str, Any]) -> bool:
        """Insert only when no record exists for ``day``. Returns True if inserted."""
        key = truncate_to_day(day)
        stmt = (
            self._insert()
            .values(date=key, **_serialize(fields))
            .on_conflict_do_nothing(index_elements=["date"])
        )
        async with self._sessions() as session:
            async with session.begin():
                result = await session.execute(stmt)
        return bool(result.rowcount)

    async def update_fields(self, day: DayLike, partial: dict[str, Any]) -> Optional[PulseRecord]:
        """Update only the given columns of an existing record.

        Returns the refreshed record, or None when nothing is stored for ``day``.
        """
        key = truncate_to_day(day)
        values = _serialize(partial)
        if not values:
            return await self.find_by_date(key)
        async with self._sessions() as session:
            async with session.begin():
                result = await session.execute(
                    update(PulseDB).where(PulseDB.date == key).values(**values)
                )
                if not result.rowcount:
                    return None
                record = await self._get(session, key)
        logger.info(f"Updated {', '.join(sorted(values))} for {key.isoformat()}")
        return record

"""SQLAlchemy ORM models — one pulse row per calendar date."""
from sqlalchemy import (
    JSON, TEXT, TIMESTAMP, BigInteger, CheckConstraint, Column, Date, Float,
    Index, Integer, String, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    pass


class PulseDB(Base):
    __tablename__ = "pulses"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False)
    status = Column(
        String(10),
        CheckConstraint("status IN ('Good', 'Bad')", name="ck_pulses_status"),
        nullable=False,
    )
    score = Column(
        Float,
        CheckConstraint("score >= 0 AND score <= 10", name="ck_pulses_score"),
    )
    headlines = Column(JSON, nullable=False, default=lambda: [])
    rationale = Column(TEXT)
    market_index = Column(Float)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("date", name="uq_pulses_date"),
        Index("idx_pulses_status", "status"),
    )

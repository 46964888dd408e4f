"""Core Pydantic models for the daily pulse."""
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PulseStatus(str, Enum):
    GOOD = "Good"
    BAD = "Bad"


# (lower bound, label) — highest band first
SCORE_BANDS = [
    (8.0, "Peak humanity"),
    (6.0, "Steady progress"),
    (4.0, "Mixed/Neutral"),
    (2.0, "Major setbacks"),
    (0.0, "Chaos/Catastrophe"),
]


def score_band(score: Optional[float]) -> Optional[str]:
    if score is None:
        return None
    for floor, label in SCORE_BANDS:
        if score >= floor:
            return label
    return SCORE_BANDS[-1][1]


class HeadlineSource(BaseModel):
    name: str = ""
    url: Optional[str] = None


class Headline(BaseModel):
    title: str = ""
    description: str = ""
    url: str = ""
    source: HeadlineSource = Field(default_factory=HeadlineSource)


class Verdict(BaseModel):
    status: PulseStatus
    score: float = Field(ge=0.0, le=10.0)
    rationale: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _capitalize_status(cls, v):
        if isinstance(v, str):
            return v.strip().capitalize()
        return v


class PulseRecord(BaseModel):
    date: date
    status: PulseStatus
    score: Optional[float] = None
    headlines: list[Headline] = []
    rationale: str = ""
    market_index: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def band(self) -> Optional[str]:
        return score_band(self.score)


class CheckResult(BaseModel):
    status: PulseStatus
    score: Optional[float] = None
    message: Optional[str] = None

    @property
    def already_existed(self) -> bool:
        return self.message == ENTRY_EXISTS_MESSAGE


ENTRY_EXISTS_MESSAGE = "Entry already exists"

"""Configuration loader."""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

PROJECT_ROOT = Path(__file__).parent.parent

load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_DATABASE_URL = f"sqlite+aiosqlite:///{PROJECT_ROOT / 'data' / 'pulse.db'}"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def _env(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


class PulseSettings(BaseModel):
    """Credentials and knobs for the pulse pipeline.

    Each adapter reads only the fields it needs:
      - news adapter:       news_api_key, historical_news_api_key
      - classifier:         model_api_key, model_name
      - market adapter:     market_data_api_key, market_symbol, market_precision
    """
    news_api_key: Optional[str] = None
    historical_news_api_key: Optional[str] = None
    model_api_key: Optional[str] = None
    market_data_api_key: Optional[str] = None

    model_name: str = "gemini-flash-lite-latest"
    market_symbol: str = "SPY"      # S&P 500 proxy; index symbols are not on the free tier
    market_precision: int = 2

    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "PulseSettings":
        return cls(
            news_api_key=_env("NEWS_API_KEY"),
            historical_news_api_key=_env("GNEWS_API_KEY"),
            model_api_key=_env("GEMINI_API_KEY"),
            market_data_api_key=_env("ALPHA_VANTAGE_API_KEY"),
            model_name=_env("GEMINI_MODEL") or "gemini-flash-lite-latest",
            market_symbol=_env("MARKET_SYMBOL") or "SPY",
            market_precision=int(_env("MARKET_PRECISION") or 2),
            database_url=_env("DATABASE_URL") or DEFAULT_DATABASE_URL,
            log_level=LOG_LEVEL,
        )

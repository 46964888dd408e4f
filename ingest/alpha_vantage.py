"""Alpha Vantage daily closes for the market-index proxy.

Best-effort by contract: every failure is logged and reported as ``None`` so a
flaky or unconfigured market feed never blocks a pulse.
"""
from datetime import date, timedelta
from typing import Optional

import pandas as pd
import requests

from common.dates import utc_today
from config.settings import PulseSettings
from ingest.base import BaseIngestor

# compact responses carry the latest ~100 trading days
COMPACT_WINDOW = timedelta(days=100)


class AlphaVantageIngestor(BaseIngestor):
    BASE_URL = "https://www.alphavantage.co/query"
    TIMEOUT = 10

    def __init__(self, settings: PulseSettings, session: Optional[requests.Session] = None):
        super().__init__(session)
        self.api_key = settings.market_data_api_key
        self.symbol = settings.market_symbol
        self.precision = settings.market_precision

    def fetch(self, day: date) -> pd.Series:
        """Daily closing prices indexed by date, oldest first.

        Raises UpstreamError on transport failures and ValueError when the
        payload has no series (rate-limit notes, bad symbol, bad key).
        """
        outputsize = "compact" if utc_today() - day <= COMPACT_WINDOW else "full"
        params = {"function": "TIME_SERIES_DAILY", "symbol": self.symbol,
                  "outputsize": outputsize, "apikey": self.api_key}
        payload = self.get_json(self.BASE_URL, params)
        data = payload.get("Time Series (Daily)", {})
        if not data:
            note = payload.get("Note") or payload.get("Information") or payload.get("Error Message")
            raise ValueError(note or "No data")
        closes = {pd.Timestamp(d).date(): float(vals["4. close"]) for d, vals in data.items()}
        return pd.Series(closes).sort_index()

    def fetch_index_value(self, day: date) -> Optional[float]:
        """Closing value on ``day``, else on the latest earlier trading day, else None."""
        if not self.api_key:
            self.logger.info("ALPHA_VANTAGE_API_KEY not set, skipping market value")
            return None
        try:
            closes = self.fetch(day)
        except Exception as e:
            self.logger.warning(f"Alpha Vantage {self.symbol} failed: {e}")
            return None
        return self.pick_close(closes, day)

    def pick_close(self, closes: pd.Series, day: date) -> Optional[float]:
        if closes.empty:
            return None
        if day in closes.index:
            return round(float(closes[day]), self.precision)
        prior = closes[[d <= day for d in closes.index]]
        if prior.empty:
            self.logger.warning(f"No {self.symbol} close on or before {day.isoformat()}")
            return None
        used = prior.index[-1]
        self.logger.info(
            f"No {self.symbol} close for {day.isoformat()}, using {used.isoformat()}"
        )
        return round(float(prior.iloc[-1]), self.precision)

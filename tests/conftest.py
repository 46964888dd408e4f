"""Pytest configuration."""
import sys
from pathlib import Path

# Ensure project root is importable regardless of where pytest is invoked
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from config.settings import PulseSettings  # noqa: E402
from storage.database import PulseStore  # noqa: E402


@pytest.fixture
def settings(tmp_path: Path) -> PulseSettings:
    return PulseSettings(
        news_api_key="news-key",
        historical_news_api_key="gnews-key",
        model_api_key="gemini-key",
        market_data_api_key="av-key",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'pulse.db'}",
    )


@pytest_asyncio.fixture
async def store(settings: PulseSettings):
    s = PulseStore.from_url(settings.database_url)
    await s.init_db()
    yield s
    await s.dispose()


def fake_response(payload=None, status_code: int = 200, text: str = "") -> MagicMock:
    """Stand-in for ``requests.Response``."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def http_session() -> MagicMock:
    """A ``requests.Session`` double; set ``.get.return_value`` per test."""
    return MagicMock()

"""Base ingestor abstract class."""
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Optional

import requests

from common.errors import UpstreamError
from common.logger import get_logger


class BaseIngestor(ABC):
    TIMEOUT = 15

    def __init__(self, session: Optional[requests.Session] = None):
        self.logger = get_logger(self.__class__.__name__)
        self.session = session or requests.Session()

    @abstractmethod
    def fetch(self, day: date) -> Any:
        """Fetch this source's data for one UTC calendar day."""
        pass

    def get_json(self, url: str, params: dict) -> dict:
        """GET ``url`` and decode the JSON body; every failure becomes UpstreamError.

        Messages never echo the request URL, which carries the API key.
        """
        name = self.__class__.__name__
        try:
            resp = self.session.get(url, params=params, timeout=self.TIMEOUT)
        except requests.RequestException as e:
            raise UpstreamError(f"{name}: transport error ({type(e).__name__})") from e
        if resp.status_code >= 400:
            raise UpstreamError(f"{name}: HTTP {resp.status_code}: {resp.text[:200]}")
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(f"{name}: invalid JSON body") from e

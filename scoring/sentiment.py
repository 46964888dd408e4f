"""
Sentiment classifier for the day's headlines.

Sends every headline in one prompt to Gemini and reads back a Good/Bad
verdict with a 0-10 score. The model is free to answer in prose; see
``BaseClassifier.parse_verdict`` for how the verdict is recovered.

Score bands given to the model:
  0.0-1.9   Chaos/Catastrophe
  2.0-3.9   Major setbacks
  4.0-5.9   Mixed/Neutral
  6.0-7.9   Steady progress
  8.0-10.0  Peak humanity
"""
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from common.errors import ConfigurationError, UpstreamError
from common.models import Headline, Verdict
from config.settings import PulseSettings
from scoring.base import BaseClassifier, build_prompt

INSTRUCTIONS = """You are a Global Analyst evaluating the net impact of the day's events on human well-being.
Analyze the provided headlines and determine if the day was "Good" or "Bad" for humanity.
Also provide a numerical score from 0.0 to 10.0, where:
0-1.9: Chaos/Catastrophe
2-3.9: Major setbacks
4-5.9: Mixed/Neutral
6-7.9: Steady progress
8-10.0: Peak humanity (Scientific breakthroughs, global peace, etc.)
Provide the result in a structured JSON format: { "status": "Good" | "Bad", "score": number, "rationale": "Detailed explanation" }."""


class PulseClassifier(BaseClassifier):
    """Gemini-backed classifier.

    Args:
        settings: only ``model_api_key`` and ``model_name`` are read.
        client: pre-built ``genai.Client``; created lazily from the key otherwise.
    """

    def __init__(self, settings: PulseSettings, client: Optional[genai.Client] = None):
        super().__init__()
        self.api_key = settings.model_api_key
        self.model_name = settings.model_name
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def classify(self, headlines: list[Headline]) -> Verdict:
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY is not defined")
        prompt = build_prompt(headlines)
        try:
            response = self._get_client().models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(system_instruction=INSTRUCTIONS),
            )
        except (genai_errors.APIError, httpx.HTTPError) as e:
            raise UpstreamError(f"Gemini call failed: {e}") from e
        verdict = self.parse_verdict(response.text or "")
        self.logger.info(f"Verdict: {verdict.status.value} ({verdict.score})")
        return verdict

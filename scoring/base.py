"""Base classifier: prompt building and verdict parsing shared by all models."""
import json
import re
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import ValidationError

from common.logger import get_logger
from common.models import Headline, PulseStatus, Verdict

# Greedy: spans from the first "{" to the last "}" of the whole response.
# Known to merge unrelated bracketed text; kept as-is for stable behavior.
JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

FALLBACK_SCORES = {PulseStatus.GOOD: 7.0, PulseStatus.BAD: 3.0}


def build_prompt(headlines: list[Headline]) -> str:
    lines = "\n".join(
        f"{i}. {h.title}: {h.description}" for i, h in enumerate(headlines, start=1)
    )
    return f"Analyze these 20 headlines from today:\n{lines}"


class BaseClassifier(ABC):
    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    @abstractmethod
    def classify(self, headlines: list[Headline]) -> Verdict:
        """Rate the day from its headlines."""
        pass

    def parse_verdict(self, text: str) -> Verdict:
        """Extract a verdict from free model text.

        Never raises. An object with a usable status keeps that status and
        its rationale; a missing or out-of-range score becomes the status
        default. Without such an object the day is "Good" iff the text
        mentions "good", with a fixed score, and the raw text becomes the
        rationale.
        """
        match = JSON_BLOCK.search(text)
        if match:
            try:
                data = json.loads(match.group(0))
            except ValueError as e:
                self.logger.warning(f"Unusable JSON in model response: {e}")
            else:
                verdict = self._verdict_from(data)
                if verdict is not None:
                    return verdict
        else:
            self.logger.warning("No JSON object in model response, using keyword fallback")
        status = PulseStatus.GOOD if "good" in text.lower() else PulseStatus.BAD
        return Verdict(status=status, score=FALLBACK_SCORES[status], rationale=text)

    def _verdict_from(self, data: dict) -> Optional[Verdict]:
        try:
            return Verdict.model_validate(data)
        except ValidationError as e:
            self.logger.warning(f"Model verdict failed validation: {e}")
        raw_status = data.get("status")
        try:
            status = PulseStatus(str(raw_status).strip().capitalize())
        except ValueError:
            return None
        rationale = data.get("rationale")
        return Verdict(
            status=status,
            score=FALLBACK_SCORES[status],
            rationale=rationale if isinstance(rationale, str) else "",
        )

"""
GPTZero adapter — dedicated detector API with a native three-way breakdown.

`documents[0].class_probabilities` ({ai, mixed, human}, 0-1) becomes the
breakdown; older API versions only return `completely_generated_prob`, in
which case the breakdown is synthesized from the probability.
"""

from typing import Optional

from app.detection.adapters.base import ModelAdapter, ModelVerdict
from app.detection.classifier import confidence_from_score
from app.detection.errors import AdapterAuthFailure, AdapterMalformedResponse
from app.schemas.detection import Breakdown, Confidence

CONFIDENCE_CATEGORIES: dict[str, Confidence] = {
    "low": "low",
    "medium": "moderate",
    "high": "high",
}


class GPTZeroAdapter(ModelAdapter):
    log_tag = "[GPTZERO]"

    async def _score(self, text: str) -> ModelVerdict:
        if not self.config.api_key:
            raise AdapterAuthFailure("GPTZERO_API_KEY not configured")

        data = await self._post_json(
            f"{self.config.base_url.rstrip('/')}/predict/text",
            headers={"x-api-key": self.config.api_key},
            payload={"document": text, "version": self.config.api_version},
        )

        try:
            document = data["documents"][0]
            probability = float(document["completely_generated_prob"]) * 100
        except (KeyError, IndexError, TypeError, ValueError):
            raise AdapterMalformedResponse("GPTZero response has no document score")

        return ModelVerdict(
            ai_probability=probability,
            confidence=self._confidence(document),
            breakdown=self._breakdown(document),
            reasoning=document.get("result_message"),
        )

    @staticmethod
    def _breakdown(document: dict) -> Optional[Breakdown]:
        classes = document.get("class_probabilities")
        if not classes:
            return None
        try:
            return Breakdown(
                ai_generated=float(classes["ai"]) * 100,
                mixed=float(classes.get("mixed", 0.0)) * 100,
                human=float(classes["human"]) * 100,
            )
        except (KeyError, TypeError, ValueError):
            raise AdapterMalformedResponse("GPTZero class_probabilities are incomplete")

    @staticmethod
    def _confidence(document: dict) -> Confidence:
        category = CONFIDENCE_CATEGORIES.get(str(document.get("confidence_category", "")).lower())
        if category:
            return category
        try:
            average = float(document.get("average_generated_prob", 0.0))
        except (TypeError, ValueError):
            raise AdapterMalformedResponse("GPTZero average_generated_prob is not a number")
        return confidence_from_score(average * 100)

"""
Model adapter contract.

An adapter turns text into exactly one `DetectionOpinion`. Subclasses only
implement `_score`, which talks to the provider and returns a `ModelVerdict`
or raises an `AdapterError`. `detect` wraps that call with the deadline,
breakdown validation, and the conversion of every per-model failure into a
`succeeded=False` opinion, so nothing provider-specific reaches the aggregator.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, NamedTuple, Optional

import aiohttp
from pydantic import BaseModel, ConfigDict, ValidationError

from app.detection import breakdown as breakdown_math
from app.detection.errors import (
    AdapterAuthFailure,
    AdapterError,
    AdapterMalformedResponse,
    AdapterRateLimited,
    AdapterTimeout,
    InvalidInput,
)
from app.integrations import http_client as http_module
from app.schemas.detection import Breakdown, Confidence, DetectionOpinion

logger = logging.getLogger(__name__)


class AdapterConfig(BaseModel):
    """Immutable per-model configuration, built once at startup."""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str
    weight: float
    model: str = ""
    api_key: str = ""
    base_url: str = ""
    api_version: str = ""
    timeout_sec: float = 30.0
    breakdown_tolerance: float = 1.0
    temperature: float = 0.2
    max_tokens: int = 1024
    max_retries: int = 2


class ModelVerdict(NamedTuple):
    ai_probability: float
    confidence: Confidence
    breakdown: Optional[Breakdown] = None   # None → synthesized from ai_probability
    reasoning: Optional[str] = None


def error_for_status(status: int, body: str = "") -> AdapterError:
    """Translate a provider HTTP status into the adapter error taxonomy."""
    detail = f"HTTP {status}" + (f": {body[:200]}" if body else "")
    if status in (401, 403):
        return AdapterAuthFailure(detail)
    if status == 429:
        return AdapterRateLimited(detail)
    if status in (408, 504):
        return AdapterTimeout(detail)
    return AdapterError(detail)


class ModelAdapter(ABC):
    log_tag = "[ADAPTER]"
    simulated = False

    def __init__(self, config: AdapterConfig):
        self.config = config

    @property
    def model_id(self) -> str:
        return self.config.model_id

    @property
    def weight(self) -> float:
        return self.config.weight

    @abstractmethod
    async def _score(self, text: str) -> ModelVerdict:
        """Query the provider and coerce its reply into a ModelVerdict."""

    async def detect(self, text: str) -> DetectionOpinion:
        try:
            if not text or not text.strip():
                raise InvalidInput("text is empty")
            verdict = await asyncio.wait_for(self._score(text), timeout=self.config.timeout_sec)
            return self._opinion(verdict)
        except asyncio.TimeoutError:
            return self._failed(AdapterTimeout(f"no response within {self.config.timeout_sec:g}s"))
        except AdapterError as e:
            return self._failed(e)
        except ValidationError as e:
            return self._failed(AdapterMalformedResponse(f"unexpected response shape: {e.error_count()} errors"))
        except aiohttp.ClientError as e:
            return self._failed(AdapterError(f"connection error: {e}"))

    def _opinion(self, verdict: ModelVerdict) -> DetectionOpinion:
        p = verdict.ai_probability
        if not 0.0 <= p <= 100.0:
            raise InvalidInput(f"ai_probability {p} outside [0, 100]")

        if verdict.breakdown is None:
            split = breakdown_math.synthesize(p)
        else:
            split = breakdown_math.validate(verdict.breakdown, self.config.breakdown_tolerance)

        logger.info(
            f"{self.log_tag} {self.model_id}: ai_probability={p:.1f}, "
            f"confidence={verdict.confidence}, simulated={self.simulated}"
        )
        return DetectionOpinion(
            model_id=self.model_id,
            weight=self.weight,
            succeeded=True,
            ai_probability=p,
            breakdown=split,
            confidence=verdict.confidence,
            reasoning=verdict.reasoning,
            simulated=self.simulated,
        )

    def _failed(self, error: AdapterError) -> DetectionOpinion:
        logger.warning(f"{self.log_tag} {self.model_id} failed ({error.kind}): {error.message}")
        return DetectionOpinion(
            model_id=self.model_id,
            weight=self.weight,
            succeeded=False,
            simulated=self.simulated,
            error=error.message,
            error_kind=error.kind,
        )

    async def _post_json(self, url: str, headers: dict, payload: dict) -> Any:
        """POST a JSON body through the shared session and return the decoded reply."""
        async with http_module.request_session() as session:
            async with session.post(url, json=payload, headers=headers) as response:
                if not 200 <= response.status < 300:
                    body = await response.text()
                    raise error_for_status(response.status, body)
                try:
                    return await response.json(content_type=None)
                except (json.JSONDecodeError, aiohttp.ContentTypeError) as e:
                    raise AdapterMalformedResponse(f"response is not JSON: {e}")

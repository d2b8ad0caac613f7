"""
Gemini adapter — structured JSON output through the google-genai async client.
"""

from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import ValidationError

from app.detection.adapters.base import AdapterConfig, ModelAdapter, ModelVerdict, error_for_status
from app.detection.classifier import confidence_from_score
from app.detection.errors import AdapterAuthFailure, AdapterError, AdapterMalformedResponse, AdapterTimeout
from app.detection.prompts import SYSTEM_PROMPT, build_user_message
from app.integrations.gemini.client import create_client
from app.schemas.detection import LLMVerdict


class GeminiAdapter(ModelAdapter):
    log_tag = "[GEMINI]"

    def __init__(self, config: AdapterConfig, client: Optional[genai.Client] = None):
        super().__init__(config)
        if client is None and config.api_key:
            client = create_client(config.api_key, config.timeout_sec, config.max_retries)
        self._client = client

    async def _score(self, text: str) -> ModelVerdict:
        if self._client is None:
            raise AdapterAuthFailure("GEMINI_API_KEY not configured")

        config = types.GenerateContentConfig(
            system_instruction=SYSTEM_PROMPT,
            temperature=self.config.temperature,
            response_mime_type="application/json",
            response_schema=LLMVerdict,
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=self.config.model,
                contents=build_user_message(text),
                config=config,
            )
        except genai_errors.APIError as e:
            raise error_for_status(e.code or 0, e.message or "")
        except httpx.TimeoutException as e:
            raise AdapterTimeout(f"Gemini transport timeout: {e!r}")
        except httpx.HTTPError as e:
            raise AdapterError(f"connection error: {e}")

        parsed = response.parsed
        if not isinstance(parsed, LLMVerdict):
            # SDK leaves .parsed empty when the JSON does not fit the schema
            if not response.text:
                raise AdapterMalformedResponse("Gemini returned an empty response")
            try:
                parsed = LLMVerdict.model_validate_json(response.text)
            except ValidationError as e:
                raise AdapterMalformedResponse(f"Gemini response does not match schema: {e.error_count()} errors")

        return ModelVerdict(
            ai_probability=parsed.ai_probability,
            confidence=confidence_from_score(parsed.confidence),
            breakdown=parsed.breakdown,
            reasoning=parsed.reasoning,
        )

"""
Claude adapter — Anthropic Messages API with a forced `tool_use` block.
"""

from app.detection.adapters.base import ModelAdapter, ModelVerdict
from app.detection.classifier import confidence_from_score
from app.detection.errors import AdapterAuthFailure, AdapterMalformedResponse
from app.detection.prompts import (
    SYSTEM_PROMPT,
    TOOL_DESCRIPTION,
    TOOL_NAME,
    TOOL_PARAMETERS,
    build_user_message,
)
from app.schemas.detection import LLMVerdict


class ClaudeAdapter(ModelAdapter):
    log_tag = "[CLAUDE]"

    async def _score(self, text: str) -> ModelVerdict:
        if not self.config.api_key:
            raise AdapterAuthFailure("ANTHROPIC_API_KEY not configured")

        data = await self._post_json(
            f"{self.config.base_url.rstrip('/')}/messages",
            headers={
                "x-api-key": self.config.api_key,
                "anthropic-version": self.config.api_version,
            },
            payload={
                "model": self.config.model,
                "max_tokens": self.config.max_tokens,
                "system": SYSTEM_PROMPT,
                "messages": [{"role": "user", "content": build_user_message(text)}],
                "tools": [
                    {
                        "name": TOOL_NAME,
                        "description": TOOL_DESCRIPTION,
                        "input_schema": TOOL_PARAMETERS,
                    }
                ],
                "tool_choice": {"type": "tool", "name": TOOL_NAME},
            },
        )

        blocks = data.get("content") if isinstance(data, dict) else None
        tool_input = next(
            (
                b.get("input")
                for b in blocks or []
                if isinstance(b, dict) and b.get("type") == "tool_use" and b.get("name") == TOOL_NAME
            ),
            None,
        )
        if tool_input is None:
            raise AdapterMalformedResponse("Claude did not return a tool_use block")

        verdict = LLMVerdict.model_validate(tool_input)
        return ModelVerdict(
            ai_probability=verdict.ai_probability,
            confidence=confidence_from_score(verdict.confidence),
            breakdown=verdict.breakdown,
            reasoning=verdict.reasoning,
        )

"""
GPT adapter — OpenAI-compatible /chat/completions with a forced tool call.

Works against api.openai.com or any gateway speaking the same protocol
(set OPENAI_BASE_URL).
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

DETECTION_TOOL = {
    "type": "function",
    "function": {
        "name": TOOL_NAME,
        "description": TOOL_DESCRIPTION,
        "parameters": TOOL_PARAMETERS,
    },
}


class GPTAdapter(ModelAdapter):
    log_tag = "[GPT]"

    async def _score(self, text: str) -> ModelVerdict:
        if not self.config.api_key:
            raise AdapterAuthFailure("OPENAI_API_KEY not configured")

        data = await self._post_json(
            f"{self.config.base_url.rstrip('/')}/chat/completions",
            headers={"Authorization": f"Bearer {self.config.api_key}"},
            payload={
                "model": self.config.model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_message(text)},
                ],
                "tools": [DETECTION_TOOL],
                "tool_choice": {"type": "function", "function": {"name": TOOL_NAME}},
            },
        )

        try:
            tool_call = data["choices"][0]["message"]["tool_calls"][0]
            arguments = tool_call["function"]["arguments"]
        except (KeyError, IndexError, TypeError):
            raise AdapterMalformedResponse("GPT did not return a tool call")

        verdict = LLMVerdict.model_validate_json(arguments)
        return ModelVerdict(
            ai_probability=verdict.ai_probability,
            confidence=confidence_from_score(verdict.confidence),
            breakdown=verdict.breakdown,
            reasoning=verdict.reasoning,
        )

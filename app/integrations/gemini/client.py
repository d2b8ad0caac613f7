"""
Gemini API client factory.

Unlike the HTTP adapters, Gemini is reached through the `google-genai` SDK.
`create_client` builds one SDK client per API key with the retry policy
from settings; the Gemini adapter owns the instance it is given.
"""

import logging

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = [408, 500, 502, 503, 504]


def create_client(api_key: str, timeout_sec: float, max_retries: int) -> genai.Client:
    """
    Build a Gemini client. The SDK retries transient 5xx/408 responses itself;
    429 is left out so rate limiting surfaces to the consensus as a failed model.
    """
    client = genai.Client(
        api_key=api_key,
        http_options=types.HttpOptions(
            timeout=int(timeout_sec * 1000),
            retry_options=types.HttpRetryOptions(
                attempts=max_retries + 1,
                http_status_codes=RETRYABLE_STATUS_CODES,
            ),
        ),
    )
    logger.info("[STARTUP] Gemini client initialized")
    return client

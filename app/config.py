"""
Central application configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden at runtime via an environment variable of the
same name (case-insensitive), e.g.:

    GEMINI_WEIGHT=0.5 GPT_WEIGHT=0.3 CLAUDE_WEIGHT=0.2 uvicorn app.main:app
    export OFFLINE_FALLBACK=true                   # local dev without keys

A `.env` file at the project root is loaded automatically.

Business logic never reads these values directly: `app.detection.factory`
turns them into frozen per-adapter configs once, at startup.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,   # GEMINI_API_KEY == gemini_api_key
        extra="ignore",         # silently drop unknown env vars
    )

    log_level: str = Field("INFO", description="Root logging level")

    # ------------------------------------------------------------------ #
    # Ensemble weights (must sum to 1.0 across enabled models)            #
    # ------------------------------------------------------------------ #
    gemini_weight: float = Field(0.40, ge=0.0, le=1.0, description="Gemini share of the consensus")
    gpt_weight: float = Field(0.35, ge=0.0, le=1.0, description="GPT share of the consensus")
    claude_weight: float = Field(0.25, ge=0.0, le=1.0, description="Claude share of the consensus")
    gptzero_weight: float = Field(
        0.0, ge=0.0, le=1.0, description="GPTZero share; 0 leaves the detector out of the ensemble"
    )
    weight_sum_tolerance: float = Field(
        1e-6, description="Allowed drift of the weight total from 1.0"
    )

    # ------------------------------------------------------------------ #
    # Gemini                                                              #
    # ------------------------------------------------------------------ #
    gemini_api_key: str = Field("", description="Google AI Studio key")
    gemini_model: str = Field("gemini-2.5-flash", description="Gemini model name")
    gemini_temperature: float = Field(0.2, description="Sampling temperature for Gemini")
    gemini_max_retries: int = Field(2, description="SDK retry attempts on transient errors")

    # ------------------------------------------------------------------ #
    # GPT (OpenAI-compatible chat completions)                            #
    # ------------------------------------------------------------------ #
    openai_api_key: str = Field("", description="Bearer token for the chat completions endpoint")
    openai_base_url: str = Field("https://api.openai.com/v1", description="OpenAI-compatible base URL")
    gpt_model: str = Field("gpt-5-mini-2025-08-07", description="GPT model name")

    # ------------------------------------------------------------------ #
    # Claude (Anthropic messages)                                         #
    # ------------------------------------------------------------------ #
    anthropic_api_key: str = Field("", description="Anthropic API key")
    anthropic_base_url: str = Field("https://api.anthropic.com/v1", description="Anthropic base URL")
    anthropic_version: str = Field("2023-06-01", description="anthropic-version header")
    claude_model: str = Field("claude-sonnet-4-20250514", description="Claude model name")
    claude_max_tokens: int = Field(1024, description="max_tokens for the tool-use reply")

    # ------------------------------------------------------------------ #
    # GPTZero                                                             #
    # ------------------------------------------------------------------ #
    gptzero_api_key: str = Field("", description="GPTZero API key")
    gptzero_base_url: str = Field("https://api.gptzero.me/v2", description="GPTZero base URL")
    gptzero_version: str = Field("2024-01-09", description="GPTZero model version")

    # ------------------------------------------------------------------ #
    # Adapter behaviour                                                   #
    # ------------------------------------------------------------------ #
    adapter_timeout_sec: float = Field(
        30.0, gt=0, description="Per-model deadline; a slow model resolves as failed"
    )
    breakdown_tolerance: float = Field(
        1.0, ge=0, description="Allowed drift of a model's breakdown total from 100"
    )
    offline_fallback: bool = Field(
        False, description="Substitute the deterministic offline scorer for models without a key"
    )
    http_timeout_sec: int = Field(
        45, description="Shared aiohttp session total timeout (seconds)"
    )
    http_pool_per_host: int = Field(
        20, description="Concurrent connections per provider host in the shared pool"
    )

    # ------------------------------------------------------------------ #
    # Classification                                                      #
    # ------------------------------------------------------------------ #
    risk_high_threshold: int = Field(70, description="Score above this → High AI Risk")
    risk_medium_threshold: int = Field(30, description="Score above this → Medium Risk")
    confidence_high_min: float = Field(70.0, description="Numeric model confidence ≥ this → high")
    confidence_moderate_min: float = Field(40.0, description="Numeric model confidence ≥ this → moderate")

    # ------------------------------------------------------------------ #
    # Word limits                                                         #
    # ------------------------------------------------------------------ #
    max_words_anonymous: int = Field(500, description="Word ceiling without an Authorization header")
    max_words_authenticated: int = Field(2500, description="Word ceiling for signed-in callers")

    # ------------------------------------------------------------------ #
    # Rate Limiting                                                       #
    # ------------------------------------------------------------------ #
    rate_limit_request_window_sec: int = Field(
        60, description="Sliding window for per-caller request rate (seconds)"
    )
    rate_limit_max_requests: int = Field(
        10, description="Max detections allowed within the rate-limit window"
    )
    rate_limit_memory_limit: int = Field(
        1000, description="Max keys before in-memory rate-limit map is pruned"
    )

    # ------------------------------------------------------------------ #
    # Redis                                                               #
    # ------------------------------------------------------------------ #
    upstash_redis_host: str = Field("", description="Upstash REST URL")
    upstash_redis_password: str = Field("", description="Upstash REST token")


# Single shared instance — import this everywhere.
settings = Settings()

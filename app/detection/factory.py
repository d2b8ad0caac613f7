"""
Builds the consensus engine from `Settings` — called once during startup.

Models with a zero weight are left out of the ensemble. When
`offline_fallback` is on, a model without an API key is replaced by the
offline heuristic scorer under the same id and weight; otherwise it stays
live and fails each request with an auth error, which the consensus absorbs.
"""

import logging

from app.config import Settings
from app.detection.adapters.base import AdapterConfig, ModelAdapter
from app.detection.adapters.claude import ClaudeAdapter
from app.detection.adapters.gemini import GeminiAdapter
from app.detection.adapters.gpt import GPTAdapter
from app.detection.adapters.gptzero import GPTZeroAdapter
from app.detection.adapters.offline import OfflineHeuristicAdapter
from app.detection.aggregator import ConsensusEngine

logger = logging.getLogger(__name__)


def _configs(s: Settings) -> list[tuple[type[ModelAdapter], AdapterConfig]]:
    common = {
        "timeout_sec": s.adapter_timeout_sec,
        "breakdown_tolerance": s.breakdown_tolerance,
    }
    return [
        (GeminiAdapter, AdapterConfig(
            model_id="gemini", weight=s.gemini_weight, model=s.gemini_model,
            api_key=s.gemini_api_key, temperature=s.gemini_temperature,
            max_retries=s.gemini_max_retries, **common,
        )),
        (GPTAdapter, AdapterConfig(
            model_id="gpt", weight=s.gpt_weight, model=s.gpt_model,
            api_key=s.openai_api_key, base_url=s.openai_base_url, **common,
        )),
        (ClaudeAdapter, AdapterConfig(
            model_id="claude", weight=s.claude_weight, model=s.claude_model,
            api_key=s.anthropic_api_key, base_url=s.anthropic_base_url,
            api_version=s.anthropic_version, max_tokens=s.claude_max_tokens, **common,
        )),
        (GPTZeroAdapter, AdapterConfig(
            model_id="gptzero", weight=s.gptzero_weight,
            api_key=s.gptzero_api_key, base_url=s.gptzero_base_url,
            api_version=s.gptzero_version, **common,
        )),
    ]


def build_adapters(s: Settings) -> list[ModelAdapter]:
    adapters: list[ModelAdapter] = []
    for adapter_cls, config in _configs(s):
        if config.weight <= 0:
            continue
        if not config.api_key and s.offline_fallback:
            logger.warning(f"[STARTUP] No API key for {config.model_id}; using offline heuristic scorer")
            adapters.append(OfflineHeuristicAdapter(config))
        else:
            adapters.append(adapter_cls(config))
    return adapters


def build_engine(s: Settings) -> ConsensusEngine:
    engine = ConsensusEngine(build_adapters(s), weight_tolerance=s.weight_sum_tolerance)
    logger.info(
        "[STARTUP] Consensus engine ready: "
        + ", ".join(f"{a.model_id}={a.weight:.2f}{' (offline)' if a.simulated else ''}" for a in engine.adapters)
    )
    return engine

"""
Flavr - Generation client, model routing and response repair.
"""

from flavr.llm.client import GenerativeBackend, OpenAIBackend, complete_within
from flavr.llm.model_router import fallback_config, get_model, select_tier
from flavr.llm.repair import ParseOutcome, parse_json_object, parse_recipe

__all__ = [
    "GenerativeBackend",
    "OpenAIBackend",
    "ParseOutcome",
    "complete_within",
    "fallback_config",
    "get_model",
    "parse_json_object",
    "parse_recipe",
    "select_tier",
]

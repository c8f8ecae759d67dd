"""
Flavr - Model Router.

Maps capability tiers onto concrete OpenAI models and token budgets, and
picks a tier for full generation from a request's complexity.

Capability tiers:
- economy: Template fills, short bounded output → gpt-4o-mini
- standard: Everyday full generation → gpt-4o-mini
- advanced: Multi-step, fusion or heavily constrained requests → gpt-4o
- conservative: Fallback after a timeout or unusable response → gpt-4o, low temperature
"""

from typing import Literal, TypedDict

from flavr.models import GenerationRequest
from flavr.normalize import normalize_name

CapabilityTier = Literal["economy", "standard", "advanced", "conservative"]


class ModelConfig(TypedDict, total=False):
    """Configuration for model calls."""

    model: str
    temperature: float
    max_tokens: int


MODEL_CONFIGS: dict[str, ModelConfig] = {
    "economy": {
        "model": "gpt-4o-mini",
        "temperature": 0.7,
        "max_tokens": 1200,  # Template prompts are short and bounded
    },
    "standard": {
        "model": "gpt-4o-mini",
        "temperature": 0.7,
        "max_tokens": 1500,
    },
    "advanced": {
        "model": "gpt-4o",
        "temperature": 0.7,
        "max_tokens": 2400,
    },
    "conservative": {
        "model": "gpt-4o",
        "temperature": 0.3,  # Favour well-formed JSON over creativity
        "max_tokens": 3000,
    },
}

DEFAULT_CONFIG: ModelConfig = MODEL_CONFIGS["standard"]

# Intent cues that suggest a demanding recipe
COMPLEXITY_SIGNALS: tuple[str, ...] = (
    "multi-step",
    "multi step",
    "fusion",
    "layered",
    "from scratch",
    "slow-cooked",
    "slow cooked",
    "braise",
    "restaurant",
    "showstopper",
    "tasting menu",
    "dinner party",
    "elaborate",
    "authentic",
)

COMPLEXITY_THRESHOLD = 3

# Extra tokens the fallback gets on top of the primary budget
FALLBACK_TOKEN_HEADROOM = 600


def get_model(tier: CapabilityTier | str) -> str:
    """Get the OpenAI model name for a capability tier."""
    return MODEL_CONFIGS.get(tier, DEFAULT_CONFIG)["model"]


def get_model_config(tier: CapabilityTier | str) -> ModelConfig:
    """Get a copy of the full configuration for a capability tier."""
    return MODEL_CONFIGS.get(tier, DEFAULT_CONFIG).copy()


def complexity_score(request: GenerationRequest) -> int:
    """
    Score how demanding a request is.

    Each signal keyword in the intent counts double; every dietary
    constraint and must-use ingredient adds one.
    """
    intent = normalize_name(request.intent)
    signal_hits = sum(1 for signal in COMPLEXITY_SIGNALS if signal in intent)
    return 2 * signal_hits + len(request.dietary_needs) + len(request.must_use)


def select_tier(request: GenerationRequest) -> tuple[CapabilityTier, int]:
    """
    Choose the backend tier and output-token budget for full generation.

    Returns:
        (tier, max_tokens)
    """
    tier: CapabilityTier = (
        "advanced" if complexity_score(request) >= COMPLEXITY_THRESHOLD else "standard"
    )
    return tier, MODEL_CONFIGS[tier]["max_tokens"]


def fallback_config(primary_budget: int) -> tuple[CapabilityTier, int]:
    """
    Tier and token budget for the single retry after a failed primary call.

    The budget is always strictly larger than the primary's.
    """
    budget = max(MODEL_CONFIGS["conservative"]["max_tokens"], primary_budget + FALLBACK_TOKEN_HEADROOM)
    return "conservative", budget

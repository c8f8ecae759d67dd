"""
Flavr - Cost analytics.

Passive counters: which tier served each request and what it saved
against a full generation. Nothing here influences routing.
"""

import logging
from copy import deepcopy

from flavr.models import MetricsRecord

logger = logging.getLogger(__name__)

# Per 1M tokens (OpenAI list prices, estimates only)
MODEL_COSTS = {
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4o": {"input": 2.50, "output": 10.00},
    "gpt-4.1-mini": {"input": 0.40, "output": 1.60},
    "gpt-4.1": {"input": 2.00, "output": 8.00},
}

# Rough chars-per-token ratio for English prompts
CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Estimate a token count from character length."""
    return max(1, len(text) // CHARS_PER_TOKEN) if text else 0


def estimate_cost(
    model: str,
    input_tokens: int,
    output_tokens: int,
) -> float:
    """
    Estimate the cost of a generation call in USD.

    Unknown models are priced as gpt-4o-mini.
    """
    costs = MODEL_COSTS.get(model, MODEL_COSTS["gpt-4o-mini"])

    input_cost = (input_tokens / 1_000_000) * costs["input"]
    output_cost = (output_tokens / 1_000_000) * costs["output"]

    return input_cost + output_cost


def _empty_bucket() -> dict[str, float]:
    return {"count": 0, "savings": 0.0}


class CostAnalytics:
    """
    Accumulate per-tier and per-template counts and savings.

    One instance per process, injected into the orchestrator.

    Usage:
        analytics = CostAnalytics()
        analytics.record(metrics)
        analytics.snapshot()["by_tier"]["template"]
    """

    def __init__(self):
        self.by_tier: dict[str, dict[str, float]] = {}
        self.by_template: dict[str, dict[str, float]] = {}
        self.total_requests = 0
        self.failures = 0
        self.fingerprint_hits = 0
        self.fallbacks = 0
        self.total_cost = 0.0
        self.total_savings = 0.0

    def record(self, metrics: MetricsRecord) -> None:
        """Fold one request's metrics into the counters."""
        self.total_requests += 1
        self.total_cost += metrics.estimated_cost
        if metrics.fallback_used:
            self.fallbacks += 1

        if metrics.tier is None:
            self.failures += 1
            return

        if metrics.fingerprint_hit:
            self.fingerprint_hits += 1

        self.total_savings += metrics.estimated_savings
        tier = self.by_tier.setdefault(metrics.tier.value, _empty_bucket())
        tier["count"] += 1
        tier["savings"] += metrics.estimated_savings

        if metrics.template_name and not metrics.fingerprint_hit:
            template = self.by_template.setdefault(metrics.template_name, _empty_bucket())
            template["count"] += 1
            template["savings"] += metrics.estimated_savings

        logger.debug(
            f"Served via {metrics.tier.value}: savings ${metrics.estimated_savings:.4f}, "
            f"total savings ${self.total_savings:.4f}"
        )

    @property
    def average_savings_per_request(self) -> float:
        served = self.total_requests - self.failures
        return self.total_savings / served if served else 0.0

    def snapshot(self) -> dict:
        """Detached, read-only view of the counters."""
        return {
            "total_requests": self.total_requests,
            "failures": self.failures,
            "fingerprint_hits": self.fingerprint_hits,
            "fallbacks": self.fallbacks,
            "total_cost_usd": round(self.total_cost, 6),
            "total_savings_usd": round(self.total_savings, 6),
            "average_savings_usd": round(self.average_savings_per_request, 6),
            "by_tier": deepcopy(self.by_tier),
            "by_template": deepcopy(self.by_template),
        }

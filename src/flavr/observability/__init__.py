"""
Flavr - Observability Package.

Provides:
- Cost analytics per tier and template
- LangSmith tracing integration
"""

from flavr.observability.analytics import CostAnalytics, estimate_cost
from flavr.observability.langsmith import init_langsmith, trace_generation

__all__ = [
    "CostAnalytics",
    "estimate_cost",
    "init_langsmith",
    "trace_generation",
]

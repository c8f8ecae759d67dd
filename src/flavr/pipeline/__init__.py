"""
Flavr - Tiered resolution pipeline.
"""

from flavr.pipeline.fingerprint import CachedGeneration, FingerprintCache, fingerprint
from flavr.pipeline.orchestrator import GenerationOrchestrator, cache_query_for

__all__ = [
    "CachedGeneration",
    "FingerprintCache",
    "GenerationOrchestrator",
    "cache_query_for",
    "fingerprint",
]

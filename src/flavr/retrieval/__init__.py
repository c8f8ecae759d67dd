"""
Flavr - Cache-tier retrieval.
"""

from flavr.retrieval.affinity import CUISINE_FAMILIES, expand_cuisines
from flavr.retrieval.ladder import DEFAULT_LADDER, RelaxationStep
from flavr.retrieval.retriever import CachedRecipeRetriever, RetrievalResult
from flavr.retrieval.scaling import scale_ingredients, scale_recipe

__all__ = [
    "CUISINE_FAMILIES",
    "DEFAULT_LADDER",
    "CachedRecipeRetriever",
    "RelaxationStep",
    "RetrievalResult",
    "expand_cuisines",
    "scale_ingredients",
    "scale_recipe",
]

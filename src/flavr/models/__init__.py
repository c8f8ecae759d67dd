"""
Flavr - Data models.
"""

from flavr.models.recipe import (
    CacheQuery,
    GenerationRequest,
    GeneratedRecipe,
    GenerationResult,
    MetricsRecord,
    RecipeRecord,
    Tier,
    validate_recipe_payload,
)

__all__ = [
    "CacheQuery",
    "GenerationRequest",
    "GeneratedRecipe",
    "GenerationResult",
    "MetricsRecord",
    "RecipeRecord",
    "Tier",
    "validate_recipe_payload",
]

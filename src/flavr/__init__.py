"""
Flavr - Tiered recipe resolution.

Resolves a recipe request through progressively more expensive tiers:
- Cache: previously generated recipes from the shared store
- Template: cheap structural-template generation
- Generated: full generation against the external model
"""

__version__ = "1.0.0"

"""
Flavr - Template tier.
"""

from flavr.templates.catalog import RECIPE_TEMPLATES, KeywordGroup, RecipeTemplate
from flavr.templates.generator import TemplateGenerator
from flavr.templates.matcher import TemplateMatch, TemplateMatcher

__all__ = [
    "RECIPE_TEMPLATES",
    "KeywordGroup",
    "RecipeTemplate",
    "TemplateGenerator",
    "TemplateMatch",
    "TemplateMatcher",
]

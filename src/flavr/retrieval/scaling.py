"""
Flavr - Serving scaler.

Best-effort rewriting of ingredient quantities for a new serving count.
A number is treated as a quantity when it leads the ingredient line
("1 onion") or sits directly before a unit ("200g", "2 tbsp"). Ranges,
"a pinch" and other loose phrasing may be mis-scaled or left alone.
"""

import logging
import re

from flavr.models import RecipeRecord
from flavr.normalize import is_unit

logger = logging.getLogger(__name__)

# Fractions first so "1/2" is not read as "1"
_QUANTITY_RE = re.compile(r"(?<![\w./])(\d+/\d+|\d+(?:\.\d+)?)(?![\d/])(\s*)([A-Za-z]+\.?)?")


def parse_quantity(text: str) -> float | None:
    """Parse "2", "1.5" or "1/2" into a float; None for a zero denominator."""
    if "/" in text:
        numerator, denominator = text.split("/")
        if float(denominator) == 0:
            return None
        return float(numerator) / float(denominator)
    return float(text)


def format_quantity(value: float) -> str:
    """
    Round to at most two decimals and trim trailing zeros.

    Examples:
        format_quantity(300.0) -> "300"
        format_quantity(1.5) -> "1.5"
        format_quantity(0.3333) -> "0.33"
    """
    return f"{round(value, 2):.2f}".rstrip("0").rstrip(".")


def scale_ingredient(ingredient: str, factor: float) -> str:
    """Scale every quantity token in one ingredient line by `factor`."""
    lead_offset = len(ingredient) - len(ingredient.lstrip())

    def _replace(match: re.Match[str]) -> str:
        number, gap, word = match.group(1), match.group(2), match.group(3)
        leading = match.start() == lead_offset
        if not (leading or (word and is_unit(word))):
            return match.group(0)
        value = parse_quantity(number)
        if value is None:
            return match.group(0)
        return f"{format_quantity(value * factor)}{gap}{word or ''}"

    return _QUANTITY_RE.sub(_replace, ingredient)


def scale_ingredients(ingredients: list[str], from_servings: int, to_servings: int) -> list[str]:
    """
    Scale an ingredient list from one serving count to another.

    Example:
        scale_ingredients(["200g chicken breast", "1 onion"], 4, 6)
        -> ["300g chicken breast", "1.5 onion"]
    """
    if from_servings <= 0 or from_servings == to_servings:
        return list(ingredients)
    factor = to_servings / from_servings
    return [scale_ingredient(ingredient, factor) for ingredient in ingredients]


def scale_recipe(recipe: RecipeRecord, target_servings: int) -> RecipeRecord:
    """Return a copy of the recipe rewritten for `target_servings`."""
    if not recipe.servings or recipe.servings == target_servings:
        return recipe

    logger.info(f"Scaling recipe '{recipe.title}' from {recipe.servings} to {target_servings} servings")
    return recipe.model_copy(
        update={
            "servings": target_servings,
            "ingredients": scale_ingredients(recipe.ingredients, recipe.servings, target_servings),
        }
    )

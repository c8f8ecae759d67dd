"""
Flavr - Template generator.

Fills an accepted template with one cheap, bounded generation call. No
internal retry: any failure surfaces as TemplateGenerationError and the
orchestrator descends to full generation.
"""

import logging

from flavr.errors import TemplateGenerationError
from flavr.llm.client import GenerativeBackend, complete_within
from flavr.llm.model_router import MODEL_CONFIGS, get_model
from flavr.llm.repair import parse_recipe
from flavr.models import GeneratedRecipe
from flavr.observability.analytics import estimate_tokens
from flavr.templates.catalog import RecipeTemplate

logger = logging.getLogger(__name__)

TEMPLATE_TIER = "economy"

TEMPLATE_SYSTEM_PROMPT = (
    "You are a recipe generator using efficient templates. "
    "Generate cookbook-quality recipes quickly and concisely. Return JSON only."
)


def build_template_prompt(
    template: RecipeTemplate,
    intent: str,
    ingredients: list[str] | None,
    servings: int,
) -> str:
    """Short prompt that pins generation to the template's structure."""
    return f"""Using the {template.name} template pattern: {template.pattern_text}

User wants: {intent}
Available ingredients: {", ".join(ingredients) if ingredients else "flexible"}
Servings: {servings}

Generate a recipe following this exact structure:
- Base: {", ".join(template.base_ingredients)}
- Method: {template.cooking_method}
- Flavors: {", ".join(template.flavor_profile)}
- Serving: {template.serving_style}

Respond with a complete recipe as a single JSON object with keys: title, description,
cuisine, difficulty, cookTime (minutes), servings, ingredients (strings with
measurements), instructions (strings), tips."""


class TemplateGenerator:
    """Generate recipes from structural templates at the cheapest tier."""

    def __init__(
        self,
        backend: GenerativeBackend,
        *,
        timeout: float = 35.0,
        max_tokens: int = MODEL_CONFIGS[TEMPLATE_TIER]["max_tokens"],
    ) -> None:
        self.backend = backend
        self.timeout = timeout
        self.max_tokens = max_tokens

    async def generate(
        self,
        template: RecipeTemplate,
        intent: str,
        *,
        ingredients: list[str] | None = None,
        servings: int = 4,
    ) -> GeneratedRecipe:
        """
        Generate one recipe from `template`.

        Raises:
            TemplateGenerationError: On service error, timeout, or unusable output
        """
        logger.info(f"Generating recipe using {template.name} template")
        user_prompt = build_template_prompt(template, intent, ingredients, servings)

        try:
            text = await complete_within(
                self.backend,
                self.timeout,
                system_prompt=TEMPLATE_SYSTEM_PROMPT,
                user_prompt=user_prompt,
                tier=TEMPLATE_TIER,
                max_tokens=self.max_tokens,
            )
            recipe, outcome = parse_recipe(text)
        except Exception as e:
            raise TemplateGenerationError(f"{template.name} template generation failed: {e}") from e

        if recipe.servings is None:
            recipe = recipe.model_copy(update={"servings": servings})

        logger.info(f"Template recipe generated: {recipe.title}")
        return GeneratedRecipe(
            recipe=recipe,
            model=get_model(TEMPLATE_TIER),
            tier=TEMPLATE_TIER,
            repaired=outcome.repaired,
            input_tokens=estimate_tokens(TEMPLATE_SYSTEM_PROMPT + user_prompt),
            output_tokens=estimate_tokens(text),
        )

"""
Flavr - Full-generation prompts.
"""

from flavr.models import GenerationRequest

GENERATION_SYSTEM_PROMPT = """You are an experienced recipe developer writing for confident home cooks.
Create ONE original, cookbook-quality recipe for the user's request.
- Use supermarket-available ingredients with precise measurements.
- Respect must-use and avoid lists strictly; honour the time budget.
- Steps are short, imperative and test-kitchen clear.
- Return a single JSON object only. No prose, no markdown, no trailing commas."""

RECIPE_SCHEMA = """{
  "title": "string (4-10 words)",
  "description": "1-2 sentences",
  "cuisine": "string",
  "difficulty": "easy|medium|hard",
  "cookTime": minutes_as_number,
  "servings": number,
  "ingredients": ["measurement + ingredient"],
  "instructions": ["concise imperative step"],
  "tips": "string"
}"""


def _listed(values: list[str], empty: str) -> str:
    return ", ".join(values) if values else empty


def build_generation_prompt(request: GenerationRequest) -> str:
    """User instruction carrying every request constraint."""
    return f"""USER REQUEST (base the recipe on this): "{request.intent}"

USER CONTEXT:
- Servings: {request.servings}
- Time budget (mins): {request.time_budget or "flexible"}
- Dietary needs: {_listed(request.dietary_needs, "none")}
- Must-use ingredients: {_listed(request.must_use, "none")}
- Avoid ingredients: {_listed(request.avoid, "none")}
- Equipment available: {_listed(request.equipment, "standard kitchen")}
- Cuisine preference: {request.cuisine_preference or "flexible"}

Return ONLY this JSON schema:
{RECIPE_SCHEMA}"""

"""
Flavr - Recipe and request models.

RecipeRecord accepts both store rows (snake_case) and generated payloads
(camelCase, sometimes with structured ingredient/method entries) and
normalises them into one shape.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from flavr.errors import RecipeValidationError

REQUIRED_RECIPE_FIELDS = ("title", "ingredients", "instructions")


class Tier(str, Enum):
    """The source that served a recipe."""

    CACHE = "cache"
    TEMPLATE = "template"
    GENERATED = "generated"


def _format_qty(qty: Any) -> str:
    if isinstance(qty, float) and qty.is_integer():
        return str(int(qty))
    return str(qty)


def _ingredient_text(entry: Any) -> str:
    """Flatten one ingredient entry ("200g rice" or {"item", "qty", "unit", "notes"})."""
    if isinstance(entry, str):
        return entry.strip()
    if isinstance(entry, dict):
        parts = []
        qty = entry.get("qty", entry.get("quantity"))
        if qty not in (None, "", 0):
            parts.append(_format_qty(qty))
        unit = entry.get("unit")
        if unit and unit != "x":
            parts.append(str(unit))
        item = entry.get("item") or entry.get("name") or ""
        if item:
            parts.append(str(item))
        text = " ".join(parts)
        if entry.get("notes"):
            text = f"{text}, {entry['notes']}"
        return text.strip()
    return str(entry).strip()


class RecipeRecord(BaseModel):
    """
    A recipe, either persisted in the shared store or freshly generated.

    A record is cacheable only when title, ingredients and instructions
    are all non-empty (see is_complete).
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    title: str = ""
    description: str | None = None
    cuisine: str | None = None
    difficulty: str | None = None
    cook_time: int | None = Field(default=None, validation_alias=AliasChoices("cook_time", "cookTime"))
    servings: int | None = None
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    tips: str | None = None
    dietary: list[str] = Field(default_factory=list, validation_alias=AliasChoices("dietary", "dietary_tags"))
    image_url: str | None = Field(default=None, validation_alias=AliasChoices("image_url", "imageUrl", "image"))
    owner_id: str | None = Field(default=None, validation_alias=AliasChoices("owner_id", "user_id", "userId"))
    is_shared: bool = Field(default=False, validation_alias=AliasChoices("is_shared", "isShared"))
    share_id: str | None = Field(default=None, validation_alias=AliasChoices("share_id", "shareId"))
    created_at: datetime | None = Field(default=None, validation_alias=AliasChoices("created_at", "createdAt"))

    @field_validator("id", "owner_id", "share_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        return None if value is None else str(value)

    @field_validator("title", mode="before")
    @classmethod
    def _clean_title(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("cook_time", "servings", mode="before")
    @classmethod
    def _parse_count(cls, value: Any) -> Any:
        # "25 minutes", "4 people" or {"total_min": 40} from generated payloads
        if isinstance(value, dict):
            value = value.get("total_min") or value.get("cook_min")
        if isinstance(value, str):
            match = re.search(r"\d+", value)
            return int(match.group()) if match else None
        return value

    @field_validator("ingredients", mode="before")
    @classmethod
    def _flatten_ingredients(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            value = [value]
        flat: list[str] = []
        for entry in value:
            if isinstance(entry, dict) and "items" in entry:
                # Sectioned list: {"section": "Main", "items": [...]}
                flat.extend(_ingredient_text(item) for item in entry["items"] or [])
            else:
                flat.append(_ingredient_text(entry))
        return [text for text in flat if text]

    @field_validator("instructions", mode="before")
    @classmethod
    def _flatten_instructions(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            value = [value]
        steps = []
        for entry in value:
            if isinstance(entry, dict):
                entry = entry.get("instruction") or entry.get("text") or ""
            text = str(entry).strip()
            if text:
                steps.append(text)
        return steps

    @field_validator("tips", mode="before")
    @classmethod
    def _join_tips(cls, value: Any) -> Any:
        if isinstance(value, list):
            return " ".join(str(tip).strip() for tip in value if tip)
        return value

    @field_validator("dietary", mode="before")
    @classmethod
    def _lower_dietary(cls, value: Any) -> Any:
        if value is None:
            return []
        return [str(tag).lower().strip() for tag in value]

    def is_complete(self) -> bool:
        """Cacheability invariant: non-empty title, ingredients and instructions."""
        return bool(self.title) and bool(self.ingredients) and bool(self.instructions)


def validate_recipe_payload(data: dict[str, Any]) -> RecipeRecord:
    """
    Validate a generated payload against the recipe schema.

    Args:
        data: Parsed JSON object from the external service

    Returns:
        The validated RecipeRecord

    Raises:
        RecipeValidationError: listing every missing or invalid field
    """
    try:
        record = RecipeRecord.model_validate(data)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise RecipeValidationError(fields or ["<root>"]) from e

    missing = [name for name in REQUIRED_RECIPE_FIELDS if not getattr(record, name)]
    if missing:
        raise RecipeValidationError(missing)
    return record


def _normalise_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    return [str(v).lower().strip() for v in value if str(v).strip()]


class CacheQuery(BaseModel):
    """
    Filters for one store lookup.

    Ephemeral: built per request, relaxed step by step by the ladder.
    `servings` is the scaling target, never a filter.
    """

    cuisines: list[str] = Field(default_factory=list)
    difficulty: str | None = None
    max_cook_time: int | None = None
    dietary: list[str] = Field(default_factory=list)
    servings: int | None = None
    exclude_ids: list[str] = Field(default_factory=list)

    @field_validator("cuisines", "dietary", mode="before")
    @classmethod
    def _lower_tags(cls, value: Any) -> list[str]:
        return _normalise_tags(value)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _lower_difficulty(cls, value: Any) -> Any:
        return value.lower().strip() or None if isinstance(value, str) else value

    @field_validator("exclude_ids", mode="before")
    @classmethod
    def _stringify_exclusions(cls, value: Any) -> list[str]:
        return [str(v) for v in value or []]


class GenerationRequest(BaseModel):
    """A caller's recipe request, valid for one pipeline run."""

    model_config = ConfigDict(populate_by_name=True)

    intent: str = Field(min_length=1, validation_alias=AliasChoices("intent", "userIntent"))
    servings: int = Field(default=4, ge=1)
    time_budget: int | None = Field(default=None, validation_alias=AliasChoices("time_budget", "timeBudget"))
    dietary_needs: list[str] = Field(default_factory=list, validation_alias=AliasChoices("dietary_needs", "dietaryNeeds"))
    must_use: list[str] = Field(default_factory=list, validation_alias=AliasChoices("must_use", "mustUse"))
    avoid: list[str] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)
    cuisine_preference: str | None = Field(
        default=None, validation_alias=AliasChoices("cuisine_preference", "cuisinePreference")
    )
    difficulty: str | None = None
    exclude_ids: list[str] = Field(default_factory=list, validation_alias=AliasChoices("exclude_ids", "excludeIds"))
    entitlement: str = "free"
    caller_id: str | None = Field(default=None, validation_alias=AliasChoices("caller_id", "callerId", "userId"))
    session_id: str | None = Field(default=None, validation_alias=AliasChoices("session_id", "sessionId", "clientId"))

    @field_validator("caller_id", mode="before")
    @classmethod
    def _stringify_caller(cls, value: Any) -> Any:
        return None if value is None else str(value)


class GenerationResult(BaseModel):
    """What the pipeline hands back to the routing layer."""

    recipe: RecipeRecord
    source: Tier
    correlation_id: str
    fingerprint: str
    template_name: str | None = None
    model: str | None = None


class MetricsRecord(BaseModel):
    """One record per resolved request."""

    correlation_id: str
    tier: Tier | None = None  # None when the request failed
    fingerprint_hit: bool = False
    fallback_used: bool = False
    latency_ms: float = 0.0
    estimated_cost: float = 0.0
    estimated_savings: float = 0.0
    validation: Literal["valid", "repaired", "failed", "not_applicable"] = "not_applicable"
    template_name: str | None = None
    retrieval_step: str | None = None


class GeneratedRecipe(BaseModel):
    """A recipe produced by an external generation call, with its audit data."""

    recipe: RecipeRecord
    model: str
    tier: str
    repaired: bool = False
    input_tokens: int = 0
    output_tokens: int = 0

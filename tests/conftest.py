"""
Pytest configuration and fixtures for Flavr tests.
"""

import asyncio
import json
import os
from unittest.mock import MagicMock

import pytest

# Set test environment before importing flavr modules
os.environ["FLAVR_ENV"] = "development"
os.environ["LANGCHAIN_TRACING_V2"] = "false"
os.environ["FLAVR_LOG_PROMPTS"] = "0"
os.environ.setdefault("OPENAI_API_KEY", "test-key-not-real")

from flavr.errors import CacheLookupError
from flavr.models import CacheQuery, RecipeRecord


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class InMemoryRecipeStore:
    """
    RecipeStore over a plain list, applying the same filters as the
    Supabase store. Records every query it receives.
    """

    def __init__(self, records: list[RecipeRecord] | None = None, fail: bool = False):
        self.records = list(records or [])
        self.fail = fail
        self.queries: list[CacheQuery] = []
        self.created: list[RecipeRecord] = []

    async def query(self, query: CacheQuery, *, requester_id: str | None, limit: int) -> list[RecipeRecord]:
        self.queries.append(query)
        if self.fail:
            raise CacheLookupError("store unreachable")

        matches = []
        for record in sorted(self.records, key=lambda r: r.id or ""):
            if requester_id is not None and record.owner_id == requester_id:
                continue
            if query.cuisines and (record.cuisine or "").lower() not in query.cuisines:
                continue
            if query.difficulty and record.difficulty != query.difficulty:
                continue
            if query.max_cook_time and (record.cook_time or 0) > query.max_cook_time:
                continue
            if query.dietary and not set(query.dietary) <= set(record.dietary):
                continue
            if record.id in query.exclude_ids:
                continue
            matches.append(record)
        return matches[:limit]

    async def create(self, record: RecipeRecord) -> RecipeRecord:
        saved = record.model_copy(update={"id": f"new-{len(self.created) + 1}"})
        self.created.append(saved)
        self.records.append(saved)
        return saved


class ScriptedBackend:
    """
    GenerativeBackend that replays a queue of scripted outcomes.

    Each entry is a response string, an exception to raise, or a
    (delay_seconds, entry) tuple. Every call is recorded.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.calls: list[dict] = []

    async def complete(self, *, system_prompt: str, user_prompt: str, tier: str, max_tokens: int) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "tier": tier,
                "max_tokens": max_tokens,
            }
        )
        if not self.script:
            raise AssertionError("ScriptedBackend called more times than scripted")

        entry = self.script.pop(0)
        if isinstance(entry, tuple):
            delay, entry = entry
            await asyncio.sleep(delay)
        if isinstance(entry, BaseException):
            raise entry
        return entry


def recipe_payload(**overrides) -> dict:
    """A valid generated-recipe payload, camelCase as the model returns it."""
    payload = {
        "title": "Ginger Chicken Stir-Fry",
        "description": "Fast weeknight stir-fry.",
        "cuisine": "chinese",
        "difficulty": "easy",
        "cookTime": 20,
        "servings": 4,
        "ingredients": ["400g chicken thigh", "2 tbsp soy sauce", "1 red pepper"],
        "instructions": ["Slice the chicken.", "Stir-fry over high heat.", "Add sauce and serve."],
        "tips": "Prep everything before the wok goes on.",
    }
    payload.update(overrides)
    return payload


def recipe_json(**overrides) -> str:
    return json.dumps(recipe_payload(**overrides))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_recipe():
    """Factory for stored RecipeRecords."""

    def _make(id: str, **overrides) -> RecipeRecord:
        data = {
            "id": id,
            "title": f"Recipe {id}",
            "cuisine": "italian",
            "difficulty": "easy",
            "cook_time": 30,
            "servings": 4,
            "ingredients": ["200g pasta", "1 onion"],
            "instructions": ["Boil the pasta.", "Fry the onion."],
            "dietary": [],
            "owner_id": "someone-else",
        }
        data.update(overrides)
        return RecipeRecord.model_validate(data)

    return _make


@pytest.fixture
def memory_store():
    return InMemoryRecipeStore()


@pytest.fixture
def mock_supabase():
    """Mock Supabase client whose query builder chains back to itself."""
    mock_client = MagicMock()

    mock_table = MagicMock()
    for method in ("select", "insert", "eq", "neq", "gt", "lte", "in_", "is_", "contains", "order", "limit"):
        getattr(mock_table, method).return_value = mock_table
    mock_table.not_ = mock_table
    mock_table.execute.return_value = MagicMock(data=[], count=0)

    mock_client.table.return_value = mock_table

    return mock_client


@pytest.fixture
def mock_openai():
    """Mock AsyncOpenAI client for unit tests."""
    mock_client = MagicMock()

    mock_completion = MagicMock()
    mock_completion.choices = [MagicMock(message=MagicMock(content=recipe_json()), finish_reason="stop")]

    async def _create(**kwargs):
        return mock_completion

    mock_client.chat.completions.create = MagicMock(side_effect=_create)

    return mock_client

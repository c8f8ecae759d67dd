"""
Flavr - Supabase recipe store.

Low-level access to the shared `recipes` table. The Supabase client is
synchronous, so every execute() runs in a worker thread.
"""

import asyncio
import logging
from collections import Counter
from typing import Any

from pydantic import ValidationError
from supabase import Client, create_client

from flavr.config import settings
from flavr.errors import CacheLookupError
from flavr.models import CacheQuery, RecipeRecord

logger = logging.getLogger(__name__)

RECIPES_TABLE = "recipes"

# RecipeRecord field -> column name, where they differ
_COLUMN_NAMES = {"owner_id": "user_id"}

# Singleton client instance
_client: Client | None = None


def get_client() -> Client:
    """
    Get the Supabase client.

    Uses singleton pattern to reuse connection.
    """
    global _client

    if _client is None:
        _client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _client


def _complete_recipes(builder: Any) -> Any:
    """Restrict a select to records satisfying the completeness invariant."""
    return (
        builder.not_.is_("title", "null")
        .neq("title", "")
        .not_.is_("ingredients", "null")
        .not_.is_("instructions", "null")
        .gt("cook_time", 0)
        .gt("servings", 0)
    )


class SupabaseRecipeStore:
    """RecipeStore backed by a Supabase `recipes` table."""

    def __init__(self, client: Client | None = None, table: str = RECIPES_TABLE) -> None:
        self._client = client
        self.table = table

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_client()
        return self._client

    def build_query(self, query: CacheQuery, *, requester_id: str | None, limit: int) -> Any:
        """Translate a CacheQuery into a deterministic PostgREST select."""
        builder = _complete_recipes(self.client.table(self.table).select("*"))

        if requester_id is not None:
            # Never serve a caller their own recipes
            builder = builder.neq("user_id", requester_id)
        if query.cuisines:
            builder = builder.in_("cuisine", query.cuisines)
        if query.difficulty:
            builder = builder.eq("difficulty", query.difficulty)
        if query.max_cook_time:
            builder = builder.lte("cook_time", query.max_cook_time)
        if query.dietary:
            builder = builder.contains("dietary", query.dietary)
        if query.exclude_ids:
            builder = builder.not_.in_("id", query.exclude_ids)

        return builder.order("id").limit(limit)

    async def query(
        self,
        query: CacheQuery,
        *,
        requester_id: str | None,
        limit: int,
    ) -> list[RecipeRecord]:
        builder = self.build_query(query, requester_id=requester_id, limit=limit)
        logger.debug(f"Cache query: {query.model_dump()} limit={limit}")

        try:
            response = await asyncio.to_thread(builder.execute)
        except Exception as e:
            raise CacheLookupError(f"Recipe store query failed: {e}") from e

        records = []
        for row in response.data or []:
            try:
                records.append(RecipeRecord.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping malformed recipe row {row.get('id')}: {e}")
        return records

    async def create(self, record: RecipeRecord) -> RecipeRecord:
        data = record.model_dump(mode="json", exclude={"id", "created_at"}, exclude_none=True)
        row = {_COLUMN_NAMES.get(key, key): value for key, value in data.items()}

        builder = self.client.table(self.table).insert(row)
        response = await asyncio.to_thread(builder.execute)
        return RecipeRecord.model_validate(response.data[0])

    async def cache_statistics(self) -> dict:
        """
        Summarise the valid recipes available to the cache tier.

        Returns:
            Dict with total_recipes, cuisine_distribution,
            difficulty_distribution and average_cook_time
        """
        builder = _complete_recipes(
            self.client.table(self.table).select("cuisine, difficulty, cook_time")
        )
        try:
            response = await asyncio.to_thread(builder.execute)
        except Exception as e:
            raise CacheLookupError(f"Recipe store statistics failed: {e}") from e

        rows = response.data or []
        cook_times = [row["cook_time"] for row in rows if row.get("cook_time")]
        return {
            "total_recipes": len(rows),
            "cuisine_distribution": dict(
                Counter(row["cuisine"].lower() for row in rows if row.get("cuisine"))
            ),
            "difficulty_distribution": dict(
                Counter(row["difficulty"].lower() for row in rows if row.get("difficulty"))
            ),
            "average_cook_time": round(sum(cook_times) / len(cook_times)) if cook_times else 0,
        }

    async def has_enough_recipes(self, cuisine: str, difficulty: str, min_count: int = 3) -> bool:
        """Check whether a cuisine/difficulty pair has at least `min_count` valid recipes."""
        builder = (
            _complete_recipes(self.client.table(self.table).select("id", count="exact"))
            .eq("cuisine", cuisine.lower())
            .eq("difficulty", difficulty.lower())
        )
        try:
            response = await asyncio.to_thread(builder.execute)
        except Exception as e:
            logger.error(f"Failed to count cached recipes for {cuisine}/{difficulty}: {e}")
            return False
        return (response.count or 0) >= min_count

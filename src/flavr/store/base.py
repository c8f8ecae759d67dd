"""
Flavr - Recipe store interface.

The pipeline owns no schema: it reads and writes recipes only through
this protocol.
"""

from typing import Protocol

from flavr.models import CacheQuery, RecipeRecord


class RecipeStore(Protocol):
    """Persisted, shared recipe store."""

    async def query(
        self,
        query: CacheQuery,
        *,
        requester_id: str | None,
        limit: int,
    ) -> list[RecipeRecord]:
        """
        Return records matching every filter in `query`.

        Must exclude records owned by `requester_id` and ids in
        `query.exclude_ids`. Ordering must be deterministic.
        """
        ...

    async def create(self, record: RecipeRecord) -> RecipeRecord:
        """Persist a new record and return it with its assigned id."""
        ...

"""
Flavr - Cached recipe retriever.

Serves previously generated recipes from the shared store. If the exact
query finds nothing, the relaxation ladder broadens it one step at a time.
Steps run sequentially: each is only attempted once the previous one is
known to be empty.

Selection is deterministic (the store orders its results); variety comes
from a separate shuffle with an injectable random source.
"""

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass, field

from flavr.models import CacheQuery, RecipeRecord
from flavr.retrieval.ladder import DEFAULT_LADDER, EXACT, RelaxationStep
from flavr.retrieval.scaling import scale_recipe
from flavr.store.base import RecipeStore

logger = logging.getLogger(__name__)


@dataclass
class RetrievalResult:
    """Records served by the cache tier and the ladder step that found them."""

    step: str | None
    records: list[RecipeRecord] = field(default_factory=list)

    @property
    def hit(self) -> bool:
        return bool(self.records)


class CachedRecipeRetriever:
    """
    Query the shared store with progressive relaxation.

    Never returns the requester's own records, excluded ids, or records
    failing the completeness invariant. An empty result is a cache miss;
    this class never triggers generation itself.
    """

    def __init__(
        self,
        store: RecipeStore,
        *,
        ladder: Sequence[RelaxationStep] = DEFAULT_LADDER,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.ladder = tuple(ladder)
        self.rng = rng or random.Random()

    async def retrieve(
        self,
        query: CacheQuery,
        *,
        requester_id: str | None = None,
        limit: int = 5,
    ) -> list[RecipeRecord]:
        """Return up to `limit` usable records, or [] on a cache miss."""
        result = await self.resolve(query, requester_id=requester_id, limit=limit)
        return result.records

    async def resolve(
        self,
        query: CacheQuery,
        *,
        requester_id: str | None = None,
        limit: int = 5,
    ) -> RetrievalResult:
        """
        Run the exact query, then each ladder step, until one is non-empty.

        A step whose relaxed query repeats one already sent is skipped.

        Raises:
            CacheLookupError: If the store is unreachable
        """
        sent: list[CacheQuery] = []
        for step in (EXACT, *self.ladder):
            step_query = step(query)
            if step_query in sent:
                logger.debug(f"Cache step '{step.name}' repeats an earlier query; skipped")
                continue
            sent.append(step_query)
            rows = await self.store.query(step_query, requester_id=requester_id, limit=limit)
            records = self._usable(rows, query, requester_id)
            if records:
                logger.info(f"Cache hit at step '{step.name}': {len(records)} recipes")
                return RetrievalResult(step=step.name, records=self._finalise(records, query))
            logger.debug(f"Cache step '{step.name}' empty")

        logger.info("No cached recipes found after full relaxation")
        return RetrievalResult(step=None)

    @staticmethod
    def _usable(
        rows: list[RecipeRecord],
        query: CacheQuery,
        requester_id: str | None,
    ) -> list[RecipeRecord]:
        excluded = set(query.exclude_ids)
        return [
            record
            for record in rows
            if record.is_complete()
            and (requester_id is None or record.owner_id != requester_id)
            and record.id not in excluded
        ]

    def _finalise(self, records: list[RecipeRecord], query: CacheQuery) -> list[RecipeRecord]:
        records = list(records)
        self.rng.shuffle(records)
        if query.servings:
            records = [scale_recipe(record, query.servings) for record in records]
        return records

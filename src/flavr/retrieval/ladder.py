"""
Flavr - Query relaxation ladder.

Each RelaxationStep turns the caller's original CacheQuery into a broader
one. The retriever evaluates steps strictly in order and stops at the
first non-empty result, so any step can be tested or reordered on its own.

Steps always derive from the ORIGINAL query, not the previous step, which
is what lets step 3 reinstate the dietary filter dropped by steps 1-2.
"""

from collections.abc import Callable
from dataclasses import dataclass

from flavr.models import CacheQuery
from flavr.retrieval.affinity import expand_cuisines


@dataclass(frozen=True)
class RelaxationStep:
    """A named, pure query transformation."""

    name: str
    relax: Callable[[CacheQuery], CacheQuery]

    def __call__(self, query: CacheQuery) -> CacheQuery:
        return self.relax(query)


def _drop_dietary(query: CacheQuery) -> CacheQuery:
    return query.model_copy(update={"dietary": []})


def _cuisine_family(query: CacheQuery) -> CacheQuery:
    return query.model_copy(
        update={"cuisines": sorted(expand_cuisines(query.cuisines)), "dietary": []}
    )


def _drop_cuisine(query: CacheQuery) -> CacheQuery:
    # Dietary correctness outranks cuisine match
    return query.model_copy(update={"cuisines": []})


def _popular(query: CacheQuery) -> CacheQuery:
    return CacheQuery(
        max_cook_time=query.max_cook_time,
        servings=query.servings,
        exclude_ids=query.exclude_ids,
    )


def _any_valid(query: CacheQuery) -> CacheQuery:
    return CacheQuery(servings=query.servings, exclude_ids=query.exclude_ids)


EXACT = RelaxationStep("exact", lambda query: query)
DROP_DIETARY = RelaxationStep("drop_dietary", _drop_dietary)
CUISINE_FAMILY = RelaxationStep("cuisine_family", _cuisine_family)
DROP_CUISINE = RelaxationStep("drop_cuisine", _drop_cuisine)
POPULAR = RelaxationStep("popular", _popular)
ANY_VALID = RelaxationStep("any_valid", _any_valid)

DEFAULT_LADDER: tuple[RelaxationStep, ...] = (
    DROP_DIETARY,
    CUISINE_FAMILY,
    DROP_CUISINE,
    POPULAR,
    ANY_VALID,
)

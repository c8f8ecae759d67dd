"""
Tests for the cache tier: cuisine affinity, serving scaling, the
relaxation ladder and the retriever.
"""

import asyncio
import random

import pytest
from conftest import InMemoryRecipeStore

from flavr.errors import CacheLookupError
from flavr.models import CacheQuery
from flavr.retrieval import CachedRecipeRetriever
from flavr.retrieval.affinity import CUISINE_FAMILIES, expand_cuisines, family_of
from flavr.retrieval.ladder import (
    ANY_VALID,
    CUISINE_FAMILY,
    DEFAULT_LADDER,
    DROP_CUISINE,
    DROP_DIETARY,
    POPULAR,
)
from flavr.retrieval.scaling import format_quantity, scale_ingredient, scale_ingredients, scale_recipe


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


# =============================================================================
# Cuisine affinity
# =============================================================================


class TestCuisineAffinity:
    """Cuisine family expansion."""

    def test_families_partition_cuisines(self):
        seen = set()
        for members in CUISINE_FAMILIES.values():
            assert not (seen & members)
            seen |= members

    def test_expansion_contains_input(self):
        expanded = expand_cuisines({"japanese"})
        assert "japanese" in expanded
        assert {"chinese", "thai", "korean"} <= expanded

    def test_expansion_is_idempotent(self):
        once = expand_cuisines({"italian", "mexican"})
        assert expand_cuisines(once) == once

    def test_unmapped_cuisine_passes_through(self):
        assert expand_cuisines({"ethiopian"}) == frozenset({"ethiopian"})
        assert family_of("Ethiopian") is None

    def test_family_lookup_is_case_insensitive(self):
        assert family_of("  Thai ") == "asian"


# =============================================================================
# Scaling
# =============================================================================


class TestScaling:
    """Ingredient quantity rewriting."""

    def test_four_to_six_servings(self):
        scaled = scale_ingredients(["200g chicken breast", "1 onion"], 4, 6)
        assert scaled == ["300g chicken breast", "1.5 onion"]

    def test_scaling_there_and_back(self):
        original = ["200g chicken breast", "1 onion", "2 tbsp oil", "450 ml stock"]
        there = scale_ingredients(original, 3, 7)
        assert scale_ingredients(there, 7, 3) == original

    def test_spaced_unit_and_fraction(self):
        assert scale_ingredient("2 tbsp soy sauce", 0.5) == "1 tbsp soy sauce"
        assert scale_ingredient("1/2 cup rice", 2) == "1 cup rice"

    def test_number_not_followed_by_unit_is_kept(self):
        assert scale_ingredient("salt, cook for 5 minutes", 2) == "salt, cook for 5 minutes"

    def test_same_servings_is_noop(self):
        ingredients = ["200g chicken"]
        assert scale_ingredients(ingredients, 4, 4) == ingredients

    def test_format_quantity(self):
        assert format_quantity(300.0) == "300"
        assert format_quantity(1.5) == "1.5"
        assert format_quantity(1 / 3) == "0.33"

    def test_scale_recipe_updates_servings(self, make_recipe):
        recipe = make_recipe("r1", servings=2)
        scaled = scale_recipe(recipe, 4)

        assert scaled.servings == 4
        assert scaled.ingredients == ["400g pasta", "2 onion"]
        assert recipe.servings == 2  # original untouched

    def test_scale_recipe_without_servings_is_unchanged(self, make_recipe):
        recipe = make_recipe("r1", servings=None)
        assert scale_recipe(recipe, 6) is recipe


# =============================================================================
# Relaxation ladder
# =============================================================================


class TestRelaxationLadder:
    """Each step is a pure transformation of the original query."""

    @pytest.fixture
    def query(self):
        return CacheQuery(
            cuisines=["japanese"],
            difficulty="easy",
            max_cook_time=20,
            dietary=["vegan"],
            servings=2,
            exclude_ids=["x1"],
        )

    def test_ladder_order(self):
        names = [step.name for step in DEFAULT_LADDER]
        assert names == ["drop_dietary", "cuisine_family", "drop_cuisine", "popular", "any_valid"]

    def test_drop_dietary(self, query):
        relaxed = DROP_DIETARY(query)
        assert relaxed.dietary == []
        assert relaxed.cuisines == ["japanese"]
        assert relaxed.difficulty == "easy"

    def test_cuisine_family(self, query):
        relaxed = CUISINE_FAMILY(query)
        assert "japanese" in relaxed.cuisines
        assert "thai" in relaxed.cuisines
        assert relaxed.dietary == []

    def test_drop_cuisine_keeps_dietary(self, query):
        relaxed = DROP_CUISINE(query)
        assert relaxed.cuisines == []
        assert relaxed.dietary == ["vegan"]
        assert relaxed.max_cook_time == 20

    def test_popular_keeps_time_and_exclusions(self, query):
        relaxed = POPULAR(query)
        assert relaxed.max_cook_time == 20
        assert relaxed.exclude_ids == ["x1"]
        assert relaxed.difficulty is None
        assert relaxed.cuisines == []

    def test_any_valid_keeps_only_exclusions(self, query):
        relaxed = ANY_VALID(query)
        assert relaxed.exclude_ids == ["x1"]
        assert relaxed.max_cook_time is None
        assert relaxed.servings == 2

    def test_steps_do_not_mutate_original(self, query):
        for step in DEFAULT_LADDER:
            step(query)
        assert query.dietary == ["vegan"]
        assert query.cuisines == ["japanese"]


# =============================================================================
# Retriever
# =============================================================================


class TestCachedRecipeRetriever:
    """Progressive relaxation against a store."""

    def test_exact_hit(self, make_recipe):
        store = InMemoryRecipeStore([make_recipe("r1", cuisine="italian")])
        retriever = CachedRecipeRetriever(store)

        result = _run(retriever.resolve(CacheQuery(cuisines=["italian"]), requester_id="me"))

        assert result.hit
        assert result.step == "exact"
        assert len(store.queries) == 1

    def test_falls_through_to_any_valid(self, make_recipe):
        unrelated = make_recipe("r1", cuisine="italian", difficulty="hard", cook_time=90)
        store = InMemoryRecipeStore([unrelated])
        retriever = CachedRecipeRetriever(store)
        query = CacheQuery(cuisines=["japanese"], difficulty="easy", max_cook_time=20)

        result = _run(retriever.resolve(query))

        assert result.step == "any_valid"
        assert [r.id for r in result.records] == ["r1"]
        # drop_dietary repeats the exact query when there is no dietary filter
        assert len(store.queries) == len(DEFAULT_LADDER)

    def test_repeated_relaxations_are_not_resent(self):
        store = InMemoryRecipeStore()
        retriever = CachedRecipeRetriever(store)

        result = _run(retriever.resolve(CacheQuery(servings=2)))

        assert not result.hit
        assert len(store.queries) == 1

    def test_cuisine_family_step(self, make_recipe):
        store = InMemoryRecipeStore([make_recipe("r1", cuisine="thai", dietary=["vegan"])])
        retriever = CachedRecipeRetriever(store)

        result = _run(retriever.resolve(CacheQuery(cuisines=["japanese"], dietary=["vegan"])))

        assert result.step == "cuisine_family"

    def test_dietary_kept_when_dropping_cuisine(self, make_recipe):
        vegan = make_recipe("v1", cuisine="ethiopian", dietary=["vegan"])
        meaty = make_recipe("m1", cuisine="british")
        store = InMemoryRecipeStore([vegan, meaty])
        retriever = CachedRecipeRetriever(store)

        # Unmapped cuisine: the family step cannot help, and drop_dietary
        # finds nothing for "korean-fusion" either
        query = CacheQuery(cuisines=["korean-fusion"], dietary=["vegan"])
        result = _run(retriever.resolve(query))

        assert result.step == "drop_cuisine"
        assert [r.id for r in result.records] == ["v1"]

    def test_never_returns_own_recipes(self, make_recipe):
        store = InMemoryRecipeStore([make_recipe("mine", owner_id="me")])
        retriever = CachedRecipeRetriever(store)

        result = _run(retriever.resolve(CacheQuery(), requester_id="me"))

        assert not result.hit
        assert result.step is None

    def test_respects_exclusions_on_every_step(self, make_recipe):
        store = InMemoryRecipeStore([make_recipe("seen")])
        retriever = CachedRecipeRetriever(store)

        records = _run(retriever.retrieve(CacheQuery(cuisines=["thai"], exclude_ids=["seen"])))

        assert records == []

    def test_incomplete_records_are_never_served(self, make_recipe):
        store = InMemoryRecipeStore([make_recipe("broken", instructions=[])])
        retriever = CachedRecipeRetriever(store)

        assert _run(retriever.retrieve(CacheQuery())) == []

    def test_results_are_scaled(self, make_recipe):
        store = InMemoryRecipeStore([make_recipe("r1", servings=4)])
        retriever = CachedRecipeRetriever(store)

        records = _run(retriever.retrieve(CacheQuery(servings=6)))

        assert records[0].servings == 6
        assert records[0].ingredients == ["300g pasta", "1.5 onion"]

    def test_shuffle_uses_injected_random(self, make_recipe):
        records = [make_recipe(f"r{i}") for i in range(5)]
        first = CachedRecipeRetriever(InMemoryRecipeStore(records), rng=random.Random(7))
        second = CachedRecipeRetriever(InMemoryRecipeStore(records), rng=random.Random(7))

        ids_first = [r.id for r in _run(first.retrieve(CacheQuery()))]
        ids_second = [r.id for r in _run(second.retrieve(CacheQuery()))]

        assert ids_first == ids_second
        assert sorted(ids_first) == ["r0", "r1", "r2", "r3", "r4"]

    def test_store_failure_propagates(self):
        retriever = CachedRecipeRetriever(InMemoryRecipeStore(fail=True))

        with pytest.raises(CacheLookupError):
            _run(retriever.retrieve(CacheQuery()))

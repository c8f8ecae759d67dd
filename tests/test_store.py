"""
Tests for the Supabase recipe store.
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from flavr.errors import CacheLookupError
from flavr.models import CacheQuery, RecipeRecord
from flavr.store import SupabaseRecipeStore


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


class TestBuildQuery:
    """CacheQuery -> PostgREST filters."""

    def test_completeness_filters_always_applied(self, mock_supabase):
        store = SupabaseRecipeStore(mock_supabase)
        store.build_query(CacheQuery(), requester_id=None, limit=5)

        table = mock_supabase.table.return_value
        mock_supabase.table.assert_called_with("recipes")
        table.neq.assert_any_call("title", "")
        table.is_.assert_any_call("ingredients", "null")
        table.is_.assert_any_call("instructions", "null")
        table.gt.assert_any_call("cook_time", 0)
        table.order.assert_called_once_with("id")
        table.limit.assert_called_once_with(5)

    def test_all_filters(self, mock_supabase):
        store = SupabaseRecipeStore(mock_supabase)
        query = CacheQuery(
            cuisines=["thai"],
            difficulty="easy",
            max_cook_time=20,
            dietary=["vegan"],
            exclude_ids=["r1"],
        )

        store.build_query(query, requester_id="me", limit=3)

        table = mock_supabase.table.return_value
        table.neq.assert_any_call("user_id", "me")
        table.in_.assert_any_call("cuisine", ["thai"])
        table.eq.assert_called_once_with("difficulty", "easy")
        table.lte.assert_called_once_with("cook_time", 20)
        table.contains.assert_called_once_with("dietary", ["vegan"])
        table.in_.assert_any_call("id", ["r1"])

    def test_empty_filters_are_skipped(self, mock_supabase):
        store = SupabaseRecipeStore(mock_supabase)
        store.build_query(CacheQuery(), requester_id=None, limit=5)

        table = mock_supabase.table.return_value
        table.eq.assert_not_called()
        table.lte.assert_not_called()
        table.contains.assert_not_called()
        table.in_.assert_not_called()


class TestQuery:
    """Executing lookups."""

    def test_rows_become_records(self, mock_supabase):
        mock_supabase.table.return_value.execute.return_value = MagicMock(
            data=[
                {
                    "id": 1,
                    "title": "Pad Thai",
                    "cook_time": 20,
                    "servings": 2,
                    "ingredients": ["noodles"],
                    "instructions": ["cook"],
                    "user_id": "u9",
                }
            ]
        )
        store = SupabaseRecipeStore(mock_supabase)

        records = _run(store.query(CacheQuery(), requester_id="me", limit=5))

        assert len(records) == 1
        assert records[0].id == "1"
        assert records[0].owner_id == "u9"

    def test_malformed_rows_are_skipped(self, mock_supabase):
        mock_supabase.table.return_value.execute.return_value = MagicMock(
            data=[
                {"id": 1, "title": "Good", "ingredients": ["a"], "instructions": ["b"]},
                {"id": 2, "title": "Bad", "created_at": "not a date"},
            ]
        )
        store = SupabaseRecipeStore(mock_supabase)

        records = _run(store.query(CacheQuery(), requester_id=None, limit=5))

        assert [r.id for r in records] == ["1"]

    def test_store_error_becomes_cache_lookup_error(self, mock_supabase):
        mock_supabase.table.return_value.execute.side_effect = RuntimeError("connection refused")
        store = SupabaseRecipeStore(mock_supabase)

        with pytest.raises(CacheLookupError):
            _run(store.query(CacheQuery(), requester_id=None, limit=5))


class TestCreate:
    """Persisting generated recipes."""

    def test_owner_maps_to_user_id_column(self, mock_supabase):
        table = mock_supabase.table.return_value
        table.execute.return_value = MagicMock(data=[{"id": 10, "title": "New", "user_id": "u1"}])
        store = SupabaseRecipeStore(mock_supabase)

        saved = _run(store.create(RecipeRecord(title="New", owner_id="u1", ingredients=["a"], instructions=["b"])))

        row = table.insert.call_args.args[0]
        assert row["user_id"] == "u1"
        assert "owner_id" not in row
        assert "id" not in row
        assert saved.id == "10"


class TestStatistics:
    """Cache coverage reporting."""

    def test_cache_statistics(self, mock_supabase):
        mock_supabase.table.return_value.execute.return_value = MagicMock(
            data=[
                {"cuisine": "Thai", "difficulty": "easy", "cook_time": 20},
                {"cuisine": "thai", "difficulty": "medium", "cook_time": 40},
                {"cuisine": "Italian", "difficulty": "easy", "cook_time": None},
            ]
        )
        store = SupabaseRecipeStore(mock_supabase)

        stats = _run(store.cache_statistics())

        assert stats["total_recipes"] == 3
        assert stats["cuisine_distribution"] == {"thai": 2, "italian": 1}
        assert stats["difficulty_distribution"] == {"easy": 2, "medium": 1}
        assert stats["average_cook_time"] == 30

    def test_has_enough_recipes(self, mock_supabase):
        mock_supabase.table.return_value.execute.return_value = MagicMock(data=[], count=4)
        store = SupabaseRecipeStore(mock_supabase)

        assert _run(store.has_enough_recipes("Thai", "Easy"))
        assert not _run(store.has_enough_recipes("Thai", "Easy", min_count=5))

    def test_has_enough_recipes_on_error(self, mock_supabase):
        mock_supabase.table.return_value.execute.side_effect = RuntimeError("down")
        store = SupabaseRecipeStore(mock_supabase)

        assert not _run(store.has_enough_recipes("thai", "easy"))

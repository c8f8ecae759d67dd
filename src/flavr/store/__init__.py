"""
Flavr - Recipe store.
"""

from flavr.store.base import RecipeStore
from flavr.store.supabase import SupabaseRecipeStore

__all__ = [
    "RecipeStore",
    "SupabaseRecipeStore",
]

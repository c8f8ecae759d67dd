"""
Flavr - Request fingerprinting and the in-process generation cache.

The cache is a bounded map with FIFO eviction: at capacity the earliest
inserted fingerprint goes first, regardless of how recently it was read.
There is no locking; concurrent identical requests may both miss and both
generate, and the later put simply overwrites the entry in place.
Entries are copied on the way in and on the way out, so a caller editing
a served recipe never changes what later identical requests receive.
"""

import hashlib
import json
from dataclasses import dataclass, replace

from flavr.models import GenerationRequest, RecipeRecord
from flavr.normalize import normalize_name, normalize_tags


def fingerprint(request: GenerationRequest) -> str:
    """
    Deterministic cache key for a request.

    Built from the normalised intent, servings, time budget and the sorted
    dietary / must-use / avoid lists. Caller identity is not part of it.
    """
    payload = {
        "intent": normalize_name(request.intent),
        "servings": request.servings,
        "time_budget": request.time_budget,
        "dietary": normalize_tags(request.dietary_needs),
        "must_use": normalize_tags(request.must_use),
        "avoid": normalize_tags(request.avoid),
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


@dataclass(frozen=True)
class CachedGeneration:
    """A generated recipe held against its request fingerprint."""

    recipe: RecipeRecord
    model: str | None = None
    template_name: str | None = None

    def detached(self) -> "CachedGeneration":
        return replace(self, recipe=self.recipe.model_copy(deep=True))


class FingerprintCache:
    """Bounded fingerprint -> CachedGeneration map with FIFO eviction."""

    def __init__(self, max_size: int = 50) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._entries: dict[str, CachedGeneration] = {}

    def get(self, key: str) -> CachedGeneration | None:
        entry = self._entries.get(key)
        return entry.detached() if entry is not None else None

    def put(self, key: str, entry: CachedGeneration) -> None:
        if key not in self._entries and len(self._entries) >= self.max_size:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        self._entries[key] = entry.detached()

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

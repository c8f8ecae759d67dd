"""
Flavr - Cuisine affinity.

Maps cuisines onto broader families so a lookup for "japanese" can be
relaxed to the whole Asian family. The families partition the known
cuisines: each cuisine belongs to exactly one family, which keeps
expansion idempotent.
"""

from collections.abc import Iterable

from flavr.normalize import normalize_name

CUISINE_FAMILIES: dict[str, frozenset[str]] = {
    "asian": frozenset({
        "chinese",
        "japanese",
        "korean",
        "thai",
        "vietnamese",
        "malaysian",
        "indonesian",
        "filipino",
        "asian",
    }),
    "european": frozenset({
        "italian",
        "french",
        "spanish",
        "greek",
        "portuguese",
        "german",
        "mediterranean",
        "european",
    }),
    "comfort": frozenset({
        "british",
        "american",
        "irish",
        "southern",
        "comfort",
    }),
    "indian_middle_eastern": frozenset({
        "indian",
        "pakistani",
        "sri lankan",
        "lebanese",
        "turkish",
        "persian",
        "moroccan",
        "middle eastern",
    }),
    "latin": frozenset({
        "mexican",
        "caribbean",
        "brazilian",
        "peruvian",
        "latin american",
    }),
}

_FAMILY_OF: dict[str, str] = {
    cuisine: family for family, members in CUISINE_FAMILIES.items() for cuisine in members
}


def family_of(cuisine: str) -> str | None:
    """Get the family name for a cuisine, or None if it is unmapped."""
    return _FAMILY_OF.get(normalize_name(cuisine))


def expand_cuisines(cuisines: Iterable[str]) -> frozenset[str]:
    """
    Expand a cuisine set to every member of the families it touches.

    The result always contains the input, and expanding twice gives the
    same set as expanding once. Unmapped cuisines pass through unchanged.

    Examples:
        expand_cuisines({"japanese"}) -> {"japanese", "chinese", "thai", ...}
        expand_cuisines({"ethiopian"}) -> {"ethiopian"}
    """
    expanded = set(cuisines)
    for cuisine in list(expanded):
        family = family_of(cuisine)
        if family is not None:
            expanded |= CUISINE_FAMILIES[family]
    return frozenset(expanded)

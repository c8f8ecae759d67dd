"""
Flavr - Text normalization.

Shared helpers for consistent matching of free text: intent strings,
cuisine/dietary tags and ingredient units.
"""

# Measurement units an ingredient quantity can be attached to ("200g", "2 tbsp")
KNOWN_UNITS = {
    "g",
    "gram",
    "grams",
    "kg",
    "kilogram",
    "kilograms",
    "mg",
    "ml",
    "millilitre",
    "millilitres",
    "milliliter",
    "milliliters",
    "l",
    "litre",
    "litres",
    "liter",
    "liters",
    "oz",
    "ounce",
    "ounces",
    "lb",
    "lbs",
    "pound",
    "pounds",
    "cup",
    "cups",
    "tbsp",
    "tablespoon",
    "tablespoons",
    "tsp",
    "teaspoon",
    "teaspoons",
    "pint",
    "pints",
    "quart",
    "quarts",
    "can",
    "cans",
    "tin",
    "tins",
    "clove",
    "cloves",
    "slice",
    "slices",
    "piece",
    "pieces",
    "bunch",
    "bunches",
    "head",
    "heads",
    "handful",
    "handfuls",
    "stick",
    "sticks",
    "sprig",
    "sprigs",
}


def normalize_name(name: str) -> str:
    """
    Normalize a name for consistent matching.

    Lowercases, strips, and collapses internal whitespace.

    Examples:
        normalize_name("  Chicken Stir-Fry  ") -> "chicken stir-fry"
        normalize_name("green   pepper") -> "green pepper"
    """
    return " ".join(name.lower().strip().split())


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Normalize, dedupe and sort a tag list so order never matters."""
    return sorted({normalize_name(tag) for tag in tags or [] if tag and tag.strip()})


def singularize(word: str) -> str:
    """
    Naive singular form for keyword matching.

    Only handles the regular English endings: "tomatoes" -> "tomato",
    "berries" -> "berry", "noodles" -> "noodle". Irregular plurals pass through.
    """
    if len(word) > 4 and word.endswith("ies"):
        return word[:-3] + "y"
    if len(word) > 4 and word.endswith("oes"):
        return word[:-2]
    if len(word) > 3 and word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def is_unit(token: str) -> bool:
    """Check whether a token is a known measurement unit."""
    return token.lower().rstrip(".") in KNOWN_UNITS


"""
Flavr - Recipe template catalog.

Pre-authored structural skeletons for common recipe categories. Each
template's pattern is an ordered tuple of keyword groups; a group is
found when any of its keywords appears in the intent. Catalog order is
significant: the matcher accepts the first template over threshold whose
anchor group (the leading dish or method cue) is present.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class KeywordGroup:
    """One required element of a template pattern, e.g. "protein"."""

    name: str
    keywords: tuple[str, ...]
    anchor: bool = False


@dataclass(frozen=True)
class RecipeTemplate:
    """A structural recipe skeleton that bounds generation cost and content."""

    name: str
    pattern: tuple[KeywordGroup, ...]
    base_ingredients: tuple[str, ...]
    cooking_method: str
    flavor_profile: tuple[str, ...]
    serving_style: str
    estimated_cost: float  # USD per generation

    @property
    def anchors(self) -> tuple[KeywordGroup, ...]:
        return tuple(group for group in self.pattern if group.anchor)

    @property
    def pattern_text(self) -> str:
        return " + ".join(group.name for group in self.pattern)


PROTEINS = KeywordGroup(
    "protein",
    (
        "chicken",
        "beef",
        "pork",
        "lamb",
        "turkey",
        "duck",
        "prawn",
        "shrimp",
        "salmon",
        "cod",
        "fish",
        "tofu",
        "tempeh",
        "egg",
        "sausage",
        "bacon",
        "chickpea",
        "lentil",
    ),
)

VEGETABLES = KeywordGroup(
    "vegetables",
    (
        "vegetable",
        "veggie",
        "broccoli",
        "pepper",
        "carrot",
        "mushroom",
        "spinach",
        "courgette",
        "zucchini",
        "onion",
        "pak choi",
        "bok choy",
        "green bean",
        "cabbage",
        "cauliflower",
        "aubergine",
        "eggplant",
        "potato",
        "sweet potato",
        "squash",
        "tomato",
    ),
)

RECIPE_TEMPLATES: tuple[RecipeTemplate, ...] = (
    RecipeTemplate(
        name="Quick Stir-Fry",
        pattern=(
            KeywordGroup("stir-fry", ("stir-fry", "stir fry", "stirfry", "wok"), anchor=True),
            PROTEINS,
            VEGETABLES,
            KeywordGroup("sauce", ("sauce", "soy", "teriyaki", "oyster", "hoisin", "sweet and sour")),
            KeywordGroup("aromatics", ("garlic", "ginger", "chilli", "chili", "spring onion", "lemongrass")),
        ),
        base_ingredients=("protein", "2-3 vegetables", "cooking oil", "aromatics"),
        cooking_method="high-heat stir-frying",
        flavor_profile=("umami", "fresh", "vibrant"),
        serving_style="over rice or noodles",
        estimated_cost=0.001,
    ),
    RecipeTemplate(
        name="Classic Pasta",
        pattern=(
            KeywordGroup(
                "pasta",
                ("pasta", "spaghetti", "penne", "linguine", "tagliatelle", "rigatoni", "fusilli", "lasagne", "lasagna"),
                anchor=True,
            ),
            KeywordGroup("sauce base", ("sauce", "tomato", "cream", "pesto", "ragu", "carbonara", "arrabbiata")),
            PROTEINS,
            VEGETABLES,
            KeywordGroup("cheese", ("cheese", "parmesan", "pecorino", "mozzarella", "ricotta", "feta")),
        ),
        base_ingredients=("pasta", "sauce base", "protein", "vegetables", "cheese"),
        cooking_method="boiling + sautéing",
        flavor_profile=("savory", "rich", "comforting"),
        serving_style="hot with garnish",
        estimated_cost=0.001,
    ),
    RecipeTemplate(
        name="One-Pot Curry",
        pattern=(
            KeywordGroup(
                "curry",
                ("curry", "masala", "korma", "tikka", "dal", "dhal", "vindaloo", "jalfrezi"),
                anchor=True,
            ),
            PROTEINS,
            VEGETABLES,
            KeywordGroup("liquid", ("coconut", "tomato", "stock", "yoghurt", "yogurt", "cream")),
            KeywordGroup("spices", ("spice", "spiced", "cumin", "turmeric", "garam masala", "coriander", "cardamom")),
        ),
        base_ingredients=("protein", "vegetables", "curry base", "liquid", "spices"),
        cooking_method="building layers + simmering",
        flavor_profile=("aromatic", "warming", "complex"),
        serving_style="with rice or bread",
        estimated_cost=0.001,
    ),
    RecipeTemplate(
        name="Roasted Protein & Veg",
        pattern=(
            KeywordGroup("roast", ("roast", "roasted", "tray bake", "traybake", "sheet pan", "oven-baked"), anchor=True),
            PROTEINS,
            VEGETABLES,
            KeywordGroup("herbs", ("herb", "rosemary", "thyme", "sage", "oregano", "parsley")),
            KeywordGroup("oil", ("oil", "olive oil", "butter")),
        ),
        base_ingredients=("main protein", "vegetables", "herbs", "oil", "seasonings"),
        cooking_method="oven roasting",
        flavor_profile=("caramelized", "natural", "herbaceous"),
        serving_style="family-style platter",
        estimated_cost=0.001,
    ),
)

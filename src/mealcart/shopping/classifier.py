"""Keyword-based purchasing category classifier."""

from __future__ import annotations

import re
from typing import Any

OTHER_CATEGORY = "other"

# Declaration order matters: the first category with a matching keyword wins.
# Keywords are substrings of the lower-cased ingredient name, so a keyword must
# not contain a keyword from an earlier category unless SPECIFIC_KEYWORDS lists it.
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "meat": (
        "chicken", "beef", "pork", "turkey", "lamb", "fish", "salmon", "tuna", "cod",
        "shrimp", "steak", "mince", "prawn", "tilapia", "sausage", "bacon", "ham",
        "fillet", "burger", "meatball", "meatloaf", "ribeye", "sirloin", "tenderloin",
        "drumstick", "thigh", "breast", "wing", "seafood", "shellfish", "crab", "lobster",
        "sardine", "anchov", "mackerel", "trout", "halibut", "brisket", "ribs",
    ),
    "dairy": (
        "milk", "cheese", "yogurt", "yoghurt", "cream", "butter", "cheddar", "mozzarella",
        "feta", "parmesan", "ricotta", "quark", "dairy", "creamer",
    ),
    "produce": (
        "apple", "banana", "spinach", "lettuce", "tomato", "carrot", "potato", "onion",
        "garlic", "broccoli", "cauliflower", "pepper", "cucumber", "avocado", "berries",
        "berry", "celery", "kale", "orange", "lemon", "lime", "grapefruit", "peach", "pear",
        "plum", "cherry", "grape", "melon", "cantaloupe", "pineapple", "mango", "papaya",
        "kiwi", "asparagus", "eggplant", "cabbage", "mushroom", "zucchini", "squash", "yam",
        "beet", "radish", "leafy green", "fruit", "vegetable",
    ),
    "grains": (
        "rice", "pasta", "bread", "oat", "cereal", "quinoa", "couscous", "tortilla",
        "bagel", "baguette", "roll", "noodle", "spaghetti", "macaroni", "penne", "barley",
        "buckwheat", "cornmeal", "grits", "pita", "wrap", "taco shell", "cracker", "panko",
        "biscuit", "muffin", "granola", "bulgur", "farro", "millet", "flour",
    ),
    "canned": (
        "beans", "chickpea", "lentil", "soup", "corn", "canned", "preserved", "jarred",
        "pickled", "olive", "artichoke", "peas",
    ),
    "baking": (
        "sugar", "honey", "oil", "vinegar", "spice", "herb", "vanilla", "baking powder",
        "baking soda", "cocoa", "chocolate chips", "maple syrup", "molasses", "extract",
        "food coloring", "sprinkles", "frosting", "icing", "cake mix", "yeast", "salt",
        "black pepper", "white pepper", "peppercorn", "cinnamon", "nutmeg", "ginger",
        "oregano", "basil", "thyme", "rosemary", "sage", "bay leaf", "paprika", "cumin",
        "turmeric",
    ),
}

CATEGORIES: tuple[str, ...] = tuple(CATEGORY_KEYWORDS) + (OTHER_CATEGORY,)

# Checked before the table; these contain a keyword from an earlier category.
SPECIFIC_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("black pepper", "baking"),
    ("white pepper", "baking"),
    ("peppercorn", "baking"),
)

_MEAT_CUT_RE = re.compile(r"\b(fillet|steak|chop|ground)\b", re.IGNORECASE)


def classify(name: Any) -> str:
    """Return the purchasing category for an ingredient name, or ``"other"``."""

    if not isinstance(name, str):
        return OTHER_CATEGORY
    lowered = name.lower()

    for keyword, category in SPECIFIC_KEYWORDS:
        if keyword in lowered:
            return category

    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return category

    if _MEAT_CUT_RE.search(lowered):
        return "meat"

    return OTHER_CATEGORY


__all__ = [
    "CATEGORIES",
    "CATEGORY_KEYWORDS",
    "OTHER_CATEGORY",
    "SPECIFIC_KEYWORDS",
    "classify",
]

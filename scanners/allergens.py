# scanners/allergens.py
from __future__ import annotations

from typing import List, Sequence

from rapidfuzz import fuzz as rf_fuzz

from scanners.models import AllergyAlert

HIGH_SEVERITY = (
    "peanut", "tree nut", "walnut", "almond", "cashew", "pistachio",
    "shellfish", "shrimp", "crab", "lobster", "fish",
)
MEDIUM_SEVERITY = ("milk", "dairy", "lactose", "egg", "soy", "wheat", "gluten")

MIN_FUZZY_LEN = 4  # shorter names fuzzy-match everything


def allergen_severity(allergen: str) -> str:
    a = (allergen or "").lower()
    if any(s in a for s in HIGH_SEVERITY):
        return "high"
    if any(s in a for s in MEDIUM_SEVERITY):
        return "medium"
    return "low"


def check_allergens(
    ingredients: Sequence[str],
    allergens: Sequence[str],
    threshold: int = 85,
) -> List[AllergyAlert]:
    """
    Quick local allergen check, no model call.

    An allergen counts as found when it appears in the joined ingredient text,
    or when it fuzzy-matches a single ingredient at >= threshold (OCR typos).
    """
    ingredient_text = " ".join(ingredients).lower()
    lowered = [i.lower() for i in ingredients]
    found: List[AllergyAlert] = []

    for allergen in allergens:
        a = allergen.strip().lower()
        if not a:
            continue
        hit = a in ingredient_text
        if not hit and len(a) >= MIN_FUZZY_LEN:
            hit = any(rf_fuzz.partial_ratio(a, ing) >= threshold for ing in lowered)
        if hit:
            found.append(AllergyAlert(allergen=allergen, severity=allergen_severity(allergen), found=True))
    return found

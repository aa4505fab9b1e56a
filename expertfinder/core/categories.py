from __future__ import annotations

from typing import Dict, List, Optional, Tuple

ALL = "All"
LAND_OWNER = "Land Owner"
CONTRACTOR = "Contractor"

# Filter bar catalogue. Land owners are never hireable, so they are not a category here.
SUB_CATEGORIES: Dict[str, List[str]] = {
    "Planning": ["Architect", "Structural Engineer", "Civil Engineer"],
    "Design and Finish": ["Interior Designer", "False Ceiling Worker", "Fabrication Worker"],
    "SiteWork": ["Mason", "Electrician", "Plumber", "Carpenter", "Tile Worker", "Painter"],
    CONTRACTOR: [],
}


def norm(value: Optional[str]) -> str:
    return " ".join((value or "").lower().split())


def is_land_owner(category: Optional[str]) -> bool:
    return norm(category) == norm(LAND_OWNER)


def same_category(a: Optional[str], b: Optional[str]) -> bool:
    return bool(norm(a)) and norm(a) == norm(b)


def categories() -> List[str]:
    return [ALL, *SUB_CATEGORIES.keys()]


def sub_categories(category: Optional[str]) -> List[str]:
    if not category or category == ALL:
        return [ALL]
    return [ALL, *SUB_CATEGORIES.get(category, [])]


def normalize_filters(category: Optional[str], sub_category: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Maps the filter bar's "All" to None and drops a sub-category that does not belong to the category.
    Unknown categories pass through untouched; the directory decides what they match.
    """
    cat = None if not category or category == ALL else category
    sub = None if not sub_category or sub_category == ALL else sub_category
    if cat is None:
        return None, sub
    if sub is not None and cat in SUB_CATEGORIES and sub not in SUB_CATEGORIES[cat]:
        sub = None
    return cat, sub


import pytest

from expertfinder.core.categories import (
    categories,
    is_land_owner,
    normalize_filters,
    same_category,
    sub_categories,
)


@pytest.mark.parametrize(
    "category, sub_category, expected",
    [
        ("All", "All", (None, None)),
        (None, None, (None, None)),
        ("Planning", "All", ("Planning", None)),
        ("Planning", "Architect", ("Planning", "Architect")),
        ("Planning", "Mason", ("Planning", None)),
        ("All", "Mason", (None, "Mason")),
        ("Landscaping", "Gardener", ("Landscaping", "Gardener")),
    ],
)
def test_normalize_filters(category, sub_category, expected):
    assert normalize_filters(category, sub_category) == expected


def test_catalogue():
    assert categories()[0] == "All"
    assert "Land Owner" not in categories()
    assert sub_categories("SiteWork")[:2] == ["All", "Mason"]
    assert sub_categories("Contractor") == ["All"]
    assert sub_categories(None) == ["All"]


def test_category_comparison_ignores_case_and_spacing():
    assert is_land_owner("land  owner")
    assert same_category("Contractor", " contractor ")
    assert not same_category(None, None)

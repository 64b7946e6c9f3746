import pytest

from gmailctl.gmail import Category, possible_category_values


def test_possible_values_match_enum():
    assert possible_category_values() == [c.value for c in Category]
    assert len(possible_category_values()) == len(Category)


def test_possible_values_order():
    assert possible_category_values() == [
        "personal",
        "social",
        "updates",
        "forums",
        "promotions",
    ]


@pytest.mark.parametrize("value", possible_category_values())
def test_round_trip(value):
    assert Category(value).value == value
    assert str(Category(value)) == value


def test_is_string():
    assert Category("forums") == "forums"
    assert "forums" in possible_category_values()


def test_unknown_category():
    with pytest.raises(ValueError):
        Category("unknown")
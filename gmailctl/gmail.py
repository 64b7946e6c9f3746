"""Constants describing Gmail concepts."""

from __future__ import annotations

import enum


class Category(str, enum.Enum):
    """One of the smart categories in Gmail."""

    PERSONAL = "personal"
    SOCIAL = "social"
    UPDATES = "updates"
    FORUMS = "forums"
    PROMOTIONS = "promotions"

    def __str__(self) -> str:
        return self.value


def possible_category_values() -> list[str]:
    """Return the values a category can assume."""
    return [category.value for category in Category]
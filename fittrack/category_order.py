"""
Display order and colours for category chart series.

Stacked charts need each category to keep the same slot across re-renders.
This only affects presentation; rollup totals never depend on it.
"""

from typing import Iterable, Sequence

from fittrack.models import ActivityCategory


def _fold(text: str) -> str:
    """
    Case-fold, treating dotted and dotless i as the same letter.

    casefold() maps "I" to "i", but Turkish "ı" stays dotless and "İ" becomes
    "i" plus a combining dot, so "ŞINAV" would otherwise miss "şınav".
    """
    return text.casefold().replace("\u0307", "").replace("ı", "i")


def _priority_index(name: str, priority_substrings: Sequence[str]) -> int | None:
    folded = _fold(name)
    for index, substring in enumerate(priority_substrings):
        if substring and _fold(substring) in folded:
            return index
    return None


def order_categories(
    categories: Iterable[ActivityCategory],
    priority_substrings: Sequence[str] = (),
) -> list[ActivityCategory]:
    """
    Sort categories so the priority ones come first.

    A category whose display name contains one of ``priority_substrings``
    (case-insensitive, with Turkish dotted and dotless i folded together) is
    placed by the first substring it matches, in the list's declared order.
    Everything else follows in its original order.

    Args:
        categories: Categories in their original order
        priority_substrings: Ordered priority substrings (from configuration)

    Returns:
        A new list; the input is not modified.
    """
    categories = list(categories)
    no_priority = len(priority_substrings)

    def sort_key(category: ActivityCategory) -> int:
        index = _priority_index(category.display_name, priority_substrings)
        return no_priority if index is None else index

    # sorted() is stable, so ties keep their original relative order
    return sorted(categories, key=sort_key)


def assign_series_colors(
    ordered_categories: Sequence[ActivityCategory], palette: Sequence[str]
) -> list[dict]:
    """
    Pair each category with a palette colour, cycling through the palette.

    Returns:
        List of {category_id, name, unit, color} in series order.
    """
    if not palette:
        raise ValueError("palette must contain at least one colour")

    return [
        {
            "category_id": category.id,
            "name": category.display_name,
            "unit": category.unit,
            "color": palette[index % len(palette)],
        }
        for index, category in enumerate(ordered_categories)
    ]

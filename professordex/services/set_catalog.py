"""
Set browsing: filtering and ordering of catalog sets and set cards.
"""

import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Literal

from professordex.models.card import Card, CardSet
from professordex.models.ownership import MasterSetSummary

SetSort = Literal["newest", "oldest", "name"]
CompletionFilter = Literal["all", "completed", "incomplete"]
CardSort = Literal["number-asc", "number-desc", "name"]

_LEADING_DIGITS = re.compile(r"^\d+")


def _release_date(card_set: CardSet) -> date:
    # Catalog dates look like "2023/09/22"
    return datetime.strptime(card_set.release_date or "", "%Y/%m/%d").date()


def browsable_sets(sets: Iterable[CardSet]) -> list[CardSet]:
    """Drop sets without a card total or release date (promos, placeholders)."""
    return [s for s in sets if s.total and s.release_date]


def available_series(sets: Iterable[CardSet]) -> list[str]:
    """Distinct series names in first-seen order."""
    return list(dict.fromkeys(s.series for s in sets))


def filter_sets(
    sets: Iterable[CardSet],
    summaries: Mapping[str, MasterSetSummary] | None = None,
    search: str = "",
    series: str = "all",
    completion: CompletionFilter = "all",
    sort: SetSort = "newest",
) -> list[CardSet]:
    """
    Filter and sort sets for the set browser.

    Args:
        sets: Catalog sets
        summaries: The user's master-set summaries keyed by set id
        search: Case-insensitive match against set name or series
        series: Series name, or "all"
        completion: Keep only completed or incomplete master sets, or "all"
        sort: "newest" or "oldest" by release date, or "name"
    """
    summaries = summaries or {}
    needle = search.lower()

    kept = []
    for card_set in browsable_sets(sets):
        if needle and needle not in card_set.name.lower() and needle not in card_set.series.lower():
            continue
        if series != "all" and card_set.series != series:
            continue

        summary = summaries.get(card_set.id)
        completed = summary is not None and summary.completed
        if completion == "completed" and not completed:
            continue
        if completion == "incomplete" and completed:
            continue

        kept.append(card_set)

    if sort == "name":
        return sorted(kept, key=lambda s: s.name.lower())
    return sorted(kept, key=_release_date, reverse=sort == "newest")


def _collector_number(card: Card) -> int | None:
    match = _LEADING_DIGITS.match(card.number)
    return int(match.group()) if match else None


def sort_set_cards(
    cards: Iterable[Card], search: str = "", sort: CardSort = "number-asc"
) -> list[Card]:
    """
    Filter set cards by name and order them by collector number or name.

    Cards without a numeric collector number ("TG01") go last in either
    number order.
    """
    needle = search.lower()
    kept = [card for card in cards if needle in card.name.lower()]

    if sort == "name":
        return sorted(kept, key=lambda c: c.name.lower())

    numbered = [c for c in kept if _collector_number(c) is not None]
    unnumbered = [c for c in kept if _collector_number(c) is None]
    numbered.sort(key=lambda c: _collector_number(c) or 0, reverse=sort == "number-desc")
    return numbered + unnumbered

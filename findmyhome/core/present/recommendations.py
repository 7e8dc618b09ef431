# findmyhome/core/present/recommendations.py
"""
Recommendation Presenter: pure projections over the turn log.

Nothing here mutates its inputs: sorting works on a copy, and the turn log's
recommendation sets are only ever read.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from bs4 import BeautifulSoup

from findmyhome.schemas.models import Preferences, Property, Turn

NOT_AVAILABLE = "N/A"
NOT_SET = "Not set"

_WS = re.compile(r"\s+")
_ESCAPED_NL = re.compile(r"\\n")


class SortMode(str, Enum):
    RELEVANCE = "relevance"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    AREA_ASC = "area_asc"
    AREA_DESC = "area_desc"


# (field, descending) per mode; relevance keeps server order
_SORT_KEYS: dict[SortMode, tuple[str, bool]] = {
    SortMode.PRICE_ASC: ("price", False),
    SortMode.PRICE_DESC: ("price", True),
    SortMode.AREA_ASC: ("totalArea", False),
    SortMode.AREA_DESC: ("totalArea", True),
}


def numeric_value(value: Any) -> float | None:
    """Finite float for numbers and numeric strings; None for anything else."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def sort_properties(properties: Sequence[Property], mode: SortMode | str = SortMode.RELEVANCE) -> list[Property]:
    """
    Order properties for display.

    Items missing the sort field go last in both directions, so they never
    displace items that have it. Ties keep their server (relevance) order.
    """
    items = list(properties)
    mode = SortMode(mode)
    if mode is SortMode.RELEVANCE:
        return items

    field, descending = _SORT_KEYS[mode]
    present: list[tuple[float, Property]] = []
    missing: list[Property] = []
    for p in items:
        v = numeric_value(getattr(p, field))
        if v is None:
            missing.append(p)
        else:
            present.append((v, p))
    present.sort(key=lambda pair: pair[0], reverse=descending)
    return [p for _, p in present] + missing


# -------------------------
# Number formatting
# -------------------------


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_number(value: Any, fallback: str = NOT_AVAILABLE) -> str:
    """
    Format with Indian digit grouping (``12,34,567``), at most 3 fraction digits.
    Non-numeric or missing values render as ``fallback``.
    """
    num = numeric_value(value)
    if num is None:
        return fallback
    sign = "-" if num < 0 else ""
    text = f"{abs(num):.3f}".rstrip("0").rstrip(".")
    whole, _, frac = text.partition(".")
    out = sign + _group_indian(whole)
    if frac:
        out += "." + frac
    return "0" if out == "-0" else out


# -------------------------
# Cards & summaries
# -------------------------


@dataclass(frozen=True)
class PropertyCard:
    name: str
    subtitle: str
    price: str
    area: str
    beds: str
    baths: str
    balcony: str | None
    price_per_sqft: str | None
    description: str | None


def property_card(p: Property) -> PropertyCard:
    subtitle = " • ".join(x for x in (p.cityName, p.property_type, p.room_type) if x)
    balcony = None if p.hasBalcony is None else ("Balcony" if p.hasBalcony else "No balcony")
    per_sqft = f"Rs. {format_number(p.pricePerSqft)} / sq ft" if numeric_value(p.pricePerSqft) else None
    return PropertyCard(
        name=p.name,
        subtitle=subtitle,
        price=f"Rs. {format_number(p.price)}",
        area=f"{format_number(p.totalArea)} sq ft",
        beds=NOT_AVAILABLE if p.beds is None else str(p.beds),
        baths=NOT_AVAILABLE if p.baths is None else str(p.baths),
        balcony=balcony,
        price_per_sqft=per_sqft,
        description=p.description or None,
    )


@dataclass(frozen=True)
class TurnSummary:
    index: int
    title: str
    count: int


def clean_title(raw: str) -> str:
    """Strip markup, unescape ``\\n`` and collapse whitespace into one line."""
    text = BeautifulSoup(raw, "lxml").get_text() if "<" in raw else raw
    text = _ESCAPED_NL.sub(" ", text)
    return _WS.sub(" ", text).strip()


def recommendation_summaries(turn_log: Sequence[Turn]) -> list[TurnSummary]:
    """One entry per turn that produced recommendations, in chronological order."""
    out: list[TurnSummary] = []
    for index, turn in enumerate(turn_log):
        count = len(turn.recommended_properties)
        if not count:
            continue
        fallback = f"Chat {index + 1}"
        title = clean_title(turn.display_question() or fallback)
        out.append(TurnSummary(index=index, title=title or fallback, count=count))
    return out


def preferences_summary(prefs: Preferences | None) -> list[str]:
    if prefs is None:
        return ["No preferences loaded."]
    cities = ", ".join(prefs.preferred_cities) if prefs.preferred_cities else NOT_SET
    return [
        f"Price range: Rs. {format_number(prefs.min_price, NOT_SET)} - Rs. {format_number(prefs.max_price, NOT_SET)}",
        f"Area range: {format_number(prefs.min_area, NOT_SET)} - {format_number(prefs.max_area, NOT_SET)} sq ft",
        f"Preferred cities: {cities}",
    ]


__all__ = [
    "SortMode",
    "numeric_value",
    "sort_properties",
    "format_number",
    "PropertyCard",
    "property_card",
    "TurnSummary",
    "clean_title",
    "recommendation_summaries",
    "preferences_summary",
]

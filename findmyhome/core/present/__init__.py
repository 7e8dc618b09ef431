# findmyhome/core/present/__init__.py
from .answer_text import LineBreak, TextNode, render_answer
from .recommendations import (
    PropertyCard,
    SortMode,
    TurnSummary,
    format_number,
    preferences_summary,
    property_card,
    recommendation_summaries,
    sort_properties,
)

__all__ = [
    "TextNode",
    "LineBreak",
    "render_answer",
    "SortMode",
    "sort_properties",
    "format_number",
    "PropertyCard",
    "property_card",
    "TurnSummary",
    "recommendation_summaries",
    "preferences_summary",
]

# findmyhome/core/preferences/validator.py
"""
Preferences form validation.

Two layers:
  - ``validate_form``: whole-form check before submit; first failure wins and
    its message is returned (empty string when the form is valid).
  - ``field_warning`` / ``clamp_value`` / ``accepts_input``: per-field live
    feedback. Warnings never block typing; clamping happens only on blur.
"""

from __future__ import annotations

import re
from typing import Literal

from findmyhome.schemas.models import PreferencesForm

PRICE_MIN = 55_000
PRICE_MAX = 840_000_000
AREA_MIN = 70
AREA_MAX = 35_000

CITY_OPTIONS: tuple[str, ...] = (
    "Thane",
    "Bangalore",
    "Mumbai",
    "New Delhi",
    "Kolkata",
    "Chennai",
    "Pune",
    "Hyderabad",
)

NumericField = Literal["minPrice", "maxPrice", "minArea", "maxArea"]

_PRICE_FIELDS = ("minPrice", "maxPrice")
_AREA_FIELDS = ("minArea", "maxArea")
_DIGITS = re.compile(r"[0-9]*")


def parse_value(raw: str | None) -> float | None:
    """Blank → None; otherwise the number. Non-numeric text also reads as None."""
    if raw is None or not str(raw).strip():
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _bounds(name: str) -> tuple[int, int] | None:
    if name in _PRICE_FIELDS:
        return PRICE_MIN, PRICE_MAX
    if name in _AREA_FIELDS:
        return AREA_MIN, AREA_MAX
    return None


def validate_form(form: PreferencesForm) -> str:
    min_price = parse_value(form.minPrice)
    max_price = parse_value(form.maxPrice)
    min_area = parse_value(form.minArea)
    max_area = parse_value(form.maxArea)

    if min_price is None or max_price is None:
        return "Price range is required."
    if min_area is None or max_area is None:
        return "Area range is required."
    if not PRICE_MIN <= min_price <= PRICE_MAX:
        return f"Min price must be between {PRICE_MIN} and {PRICE_MAX}."
    if not PRICE_MIN <= max_price <= PRICE_MAX:
        return f"Max price must be between {PRICE_MIN} and {PRICE_MAX}."
    if min_price > max_price:
        return "Min price cannot exceed max price."
    if not AREA_MIN <= min_area <= AREA_MAX:
        return f"Min area must be between {AREA_MIN} and {AREA_MAX}."
    if not AREA_MIN <= max_area <= AREA_MAX:
        return f"Max area must be between {AREA_MIN} and {AREA_MAX}."
    if min_area > max_area:
        return "Min area cannot exceed max area."
    if not form.preferredCities:
        return "Select at least one preferred city."
    return ""


def field_warning(name: NumericField, raw: str) -> str:
    numeric = parse_value(raw)
    if numeric is None:
        return "Required"
    bounds = _bounds(name)
    if bounds and not bounds[0] <= numeric <= bounds[1]:
        return f"Must be {bounds[0]} - {bounds[1]}"
    return ""


def clamp_value(name: NumericField, raw: str) -> str:
    numeric = parse_value(raw)
    bounds = _bounds(name)
    if numeric is None or bounds is None:
        return raw
    clamped = float(min(max(numeric, bounds[0]), bounds[1]))
    return str(int(clamped)) if clamped.is_integer() else str(clamped)


def accepts_input(raw: str) -> bool:
    """Numeric fields accept digits only (an empty field is allowed)."""
    return _DIGITS.fullmatch(raw) is not None


def toggle_city(cities: list[str], city: str) -> list[str]:
    """Add or remove ``city``, preserving entry order. Returns a new list."""
    if city in cities:
        return [c for c in cities if c != city]
    return [*cities, city]


class FormState:
    """
    Live form editing: keeps the raw form and per-field warnings in step with
    change/blur events.
    """

    def __init__(self, form: PreferencesForm | None = None) -> None:
        self.form = form or PreferencesForm()
        self.warnings: dict[str, str] = {}

    def change(self, name: NumericField, raw: str) -> bool:
        """Apply a keystroke. Returns False (and changes nothing) for non-digit input."""
        if not accepts_input(raw):
            return False
        self.form = self.form.model_copy(update={name: raw})
        self.warnings[name] = field_warning(name, raw)
        return True

    def blur(self, name: NumericField) -> None:
        value = clamp_value(name, getattr(self.form, name))
        self.form = self.form.model_copy(update={name: value})
        self.warnings[name] = field_warning(name, value)

    def toggle_city(self, city: str) -> None:
        self.form = self.form.model_copy(update={"preferredCities": toggle_city(self.form.preferredCities, city)})

    def validate(self) -> str:
        return validate_form(self.form)


__all__ = [
    "PRICE_MIN",
    "PRICE_MAX",
    "AREA_MIN",
    "AREA_MAX",
    "CITY_OPTIONS",
    "parse_value",
    "validate_form",
    "field_warning",
    "clamp_value",
    "accepts_input",
    "toggle_city",
    "FormState",
]

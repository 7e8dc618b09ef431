# findmyhome/core/preferences/__init__.py
from .intake import IntakeFlow
from .validator import (
    AREA_MAX,
    AREA_MIN,
    CITY_OPTIONS,
    PRICE_MAX,
    PRICE_MIN,
    FormState,
    accepts_input,
    clamp_value,
    field_warning,
    validate_form,
)

__all__ = [
    "IntakeFlow",
    "FormState",
    "validate_form",
    "field_warning",
    "clamp_value",
    "accepts_input",
    "CITY_OPTIONS",
    "PRICE_MIN",
    "PRICE_MAX",
    "AREA_MIN",
    "AREA_MAX",
]

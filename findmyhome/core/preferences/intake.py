# findmyhome/core/preferences/intake.py
"""
Preference intake: load saved preferences into the form, validate, save, and
bootstrap the first conversation from them.
"""

from __future__ import annotations

import logging
import math

from findmyhome.core.api.client import ApiClient
from findmyhome.core.api.errors import ApiError, error_message
from findmyhome.core.routes import Route
from findmyhome.core.session.store import Session
from findmyhome.core.sync.chats import latest_chat
from findmyhome.schemas.models import Preferences, PreferencesForm

from .validator import FormState

log = logging.getLogger(__name__)

NO_SAVED_PREFERENCES = "No saved preferences yet."


def _field_or_default(value: object, default: str) -> str:
    # Stored values are numbers; anything else falls back to the form default.
    if isinstance(value, int | float) and not isinstance(value, bool) and math.isfinite(value):
        return str(int(value)) if float(value).is_integer() else str(value)
    return default


def form_from_preferences(prefs: Preferences) -> PreferencesForm:
    defaults = PreferencesForm()
    return PreferencesForm(
        minPrice=_field_or_default(prefs.min_price, defaults.minPrice),
        maxPrice=_field_or_default(prefs.max_price, defaults.maxPrice),
        minArea=_field_or_default(prefs.min_area, defaults.minArea),
        maxArea=_field_or_default(prefs.max_area, defaults.maxArea),
        preferredCities=list(prefs.preferred_cities),
    )


def _as_number(raw: str) -> int | float:
    num = float(raw)
    return int(num) if num.is_integer() else num


def preferences_from_form(form: PreferencesForm) -> Preferences:
    return Preferences(
        min_price=_as_number(form.minPrice),
        max_price=_as_number(form.maxPrice),
        min_area=_as_number(form.minArea),
        max_area=_as_number(form.maxArea),
        preferred_cities=list(form.preferredCities),
    )


class IntakeFlow:
    """
    Preferences screen state.

    ``status`` is an ``(kind, message)`` pair with kind in
    {"success", "info", "error"}, or None.
    """

    def __init__(self, api: ApiClient, session: Session) -> None:
        self.api = api
        self.session = session
        self.state = FormState()
        self.status: tuple[str, str] | None = None
        self.loading = False

    def enter(self, *, edit: bool = False) -> Route:
        """
        Open the screen. Outside edit mode, a user who already has conversations
        is sent straight to the latest one.
        """
        token = self.session.require_token()
        if edit:
            self._load_saved(token)
            return Route.PREFERENCES

        try:
            chats = self.api.list_chats(token)
        except ApiError as exc:
            log.info("Chat lookup failed on intake: %s", exc)
            self.status = ("info", NO_SAVED_PREFERENCES)
            return Route.PREFERENCES

        latest = latest_chat(chats)
        if latest is not None:
            self.session.set_thread_id(latest.thread_id)
            return Route.CHAT
        self._load_saved(token)
        return Route.PREFERENCES

    def _load_saved(self, token: str) -> None:
        try:
            prefs = self.api.get_preferences(token)
        except ApiError as exc:
            log.info("Could not load saved preferences: %s", exc)
            self.status = ("info", NO_SAVED_PREFERENCES)
            return
        if prefs is not None:
            self.state = FormState(form_from_preferences(prefs))

    def submit(self) -> Route:
        """
        Validate, save, and start the first conversation. Returns CHAT on success;
        PREFERENCES (with ``status`` set) when validation or the network fails.
        """
        self.status = None
        error = self.state.validate()
        if error:
            self.status = ("error", error)
            return Route.PREFERENCES

        token = self.session.require_token()
        self.loading = True
        self.status = ("info", "Saving preferences and starting chat...")
        try:
            self.api.save_preferences(preferences_from_form(self.state.form), token)
            boot = self.api.initial_preferences(token)
        except ApiError as exc:
            self.status = ("error", error_message(exc, "Failed to save preferences."))
            return Route.PREFERENCES
        finally:
            self.loading = False

        self.session.set_state_cache(boot.state.model_dump(mode="json"))
        self.session.set_thread_id(boot.thread_id)
        self.status = None
        log.info("Preferences saved; conversation %s started", boot.thread_id)
        return Route.CHAT


__all__ = ["IntakeFlow", "form_from_preferences", "preferences_from_form", "NO_SAVED_PREFERENCES"]

# tests/unit/test_intake.py
from __future__ import annotations

import pytest

from findmyhome.core.preferences.intake import (
    NO_SAVED_PREFERENCES,
    IntakeFlow,
    form_from_preferences,
    preferences_from_form,
)
from findmyhome.core.routes import PreconditionError, Route
from findmyhome.schemas.models import BootstrapResponse, ChatState, Preferences, PreferencesForm
from tests.utils import http_error, make_chat, make_session, make_turn


@pytest.fixture
def fresh_session():
    """Logged in, no conversation yet."""
    return make_session(thread_id=None)


@pytest.fixture
def intake(fake_api, fresh_session) -> IntakeFlow:
    return IntakeFlow(fake_api, fresh_session)  # type: ignore[arg-type]


# -------------------------
# Form <-> preferences
# -------------------------


def test_form_from_preferences_uses_defaults_for_non_numbers():
    prefs = Preferences(min_price=60000, max_price="lots", min_area=250.5, max_area=None, preferred_cities=["Pune"])
    form = form_from_preferences(prefs)
    assert form.minPrice == "60000"
    assert form.maxPrice == "2000000"
    assert form.minArea == "250.5"
    assert form.maxArea == "1000"
    assert form.preferredCities == ["Pune"]


def test_preferences_from_form_parses_numbers():
    form = PreferencesForm(minPrice="55000", maxPrice="2000000", minArea="200", maxArea="1000", preferredCities=["Pune"])
    prefs = preferences_from_form(form)
    assert prefs.model_dump() == {
        "min_price": 55000,
        "max_price": 2000000,
        "min_area": 200,
        "max_area": 1000,
        "preferred_cities": ["Pune"],
    }


# -------------------------
# enter()
# -------------------------


def test_enter_requires_login(fake_api):
    flow = IntakeFlow(fake_api, make_session(token=None))  # type: ignore[arg-type]
    with pytest.raises(PreconditionError) as ei:
        flow.enter()
    assert ei.value.route is Route.AUTH


def test_enter_with_existing_chats_skips_to_latest(intake, fake_api, fresh_session):
    fake_api.chats = [
        make_chat("a", last_active="2024-01-01T00:00:00"),
        make_chat("b", last_active="2024-05-01T00:00:00"),
    ]
    assert intake.enter() is Route.CHAT
    assert fresh_session.thread_id == "b"
    assert fake_api.calls_to("get_preferences") == []


def test_enter_without_chats_loads_saved_preferences(intake, fake_api):
    fake_api.preferences = Preferences(min_price=70000, max_price=900000, min_area=300, max_area=800, preferred_cities=["Thane"])
    assert intake.enter() is Route.PREFERENCES
    assert intake.state.form.minPrice == "70000"
    assert intake.state.form.preferredCities == ["Thane"]


def test_enter_edit_mode_never_redirects(intake, fake_api):
    fake_api.chats = [make_chat("a")]
    assert intake.enter(edit=True) is Route.PREFERENCES
    assert fake_api.calls_to("list_chats") == []
    assert fake_api.calls_to("get_preferences") == [("tok-123",)]


def test_enter_load_failure_is_informational(intake, fake_api):
    fake_api.preferences = http_error("Not found", status=404)
    assert intake.enter(edit=True) is Route.PREFERENCES
    assert intake.status == ("info", NO_SAVED_PREFERENCES)
    assert intake.state.form == PreferencesForm()


# -------------------------
# submit()
# -------------------------


def test_submit_validation_error_sends_nothing(intake, fake_api):
    assert intake.submit() is Route.PREFERENCES
    assert intake.status == ("error", "Select at least one preferred city.")
    assert fake_api.calls_to("save_preferences") == []


def test_submit_saves_bootstraps_and_activates_thread(intake, fake_api, fresh_session):
    seeded = make_turn(question=None, query_used="2BHK in Pune under 20L", answer="Here you go")
    fake_api.bootstrap = BootstrapResponse(thread_id="thread-boot", state=ChatState(turn_log=[seeded]))
    intake.state.toggle_city("Pune")

    assert intake.submit() is Route.CHAT

    assert fake_api.saved[0].preferred_cities == ["Pune"]
    assert fake_api.saved[0].min_price == 55000
    assert fresh_session.thread_id == "thread-boot"
    assert fresh_session.state_cache["turn_log"][0]["query_used"] == "2BHK in Pune under 20L"
    assert intake.status is None
    assert intake.loading is False


def test_submit_failure_reports_and_stays(intake, fake_api, fresh_session):
    fake_api.bootstrap = http_error("", status=500)
    intake.state.toggle_city("Pune")

    assert intake.submit() is Route.PREFERENCES

    assert intake.status == ("error", "Failed to save preferences.")
    assert fresh_session.thread_id == ""
    assert intake.loading is False

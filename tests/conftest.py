# tests/conftest.py
from __future__ import annotations

from pathlib import Path

import pytest

from findmyhome.core.session.store import Session
from findmyhome.core.sync.chats import ChatManager
from findmyhome.core.sync.synchronizer import ConversationSynchronizer
from findmyhome.schemas.models import ClientSettings
from tests.utils import FakeApi, make_session


# -------- Environment hygiene --------
@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("FINDMYHOME_API_BASE", "FINDMYHOME_TIMEOUT", "FINDMYHOME_STATE_DIR", "FINDMYHOME_DEBUG"):
        monkeypatch.delenv(key, raising=False)
    yield


# -------- Collaborators --------
@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def session() -> Session:
    """Logged-in session with an active thread (memory-backed)."""
    return make_session()


@pytest.fixture
def settings(tmp_path: Path) -> ClientSettings:
    return ClientSettings(api_base="http://api.test", timeout_s=5.0, state_dir=tmp_path / "state")


# -------- Synchronizer fixtures --------
@pytest.fixture
def sync(fake_api, session) -> ConversationSynchronizer:
    return ConversationSynchronizer(fake_api, session)  # type: ignore[arg-type]


@pytest.fixture
def views(sync):
    """Every ConversationView the synchronizer emits, in order."""
    seen = []
    sync.subscribe(seen.append)
    return seen


@pytest.fixture
def chat_manager(fake_api, session, sync) -> ChatManager:
    return ChatManager(fake_api, session, sync)  # type: ignore[arg-type]


# -------- Pytest markers --------
def pytest_configure(config):
    config.addinivalue_line("markers", "integration: marks integration tests")

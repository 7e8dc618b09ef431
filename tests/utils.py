# tests/utils.py
"""
Single source of truth for test data, factories, and fake collaborators.
Update values here to cascade across the test suite.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from findmyhome.core.api.errors import HttpStatusError
from findmyhome.core.session.store import MemoryStore, Session
from findmyhome.schemas.models import (
    BootstrapResponse,
    ChatSession,
    ChatState,
    ConversationResponse,
    InvokeResponse,
    Preferences,
    Property,
    Turn,
)

# -----------------------------
# Global defaults (edit once)
# -----------------------------

DEFAULT_TOKEN = "tok-123"
DEFAULT_THREAD = "thread-a"
DEFAULT_EMAIL = "asha@example.com"


# -----------------------------
# Model factories
# -----------------------------


def make_property(name: str = "Sunrise Residency", **overrides: Any) -> Property:
    base: dict[str, Any] = {
        "name": name,
        "cityName": "Pune",
        "price": 4_500_000,
        "totalArea": 850,
        "beds": 2,
        "baths": 2,
    }
    base.update(overrides)
    return Property.model_validate(base)


def make_turn(
    question: str | None = "2BHK in Pune?",
    answer: str | None = "Here are some options.",
    recs: list[Property] | None = None,
    query_used: str | None = None,
) -> Turn:
    return Turn(question=question, answer=answer, query_used=query_used, recommended_properties=recs or [])


def make_turn_log(n: int = 3, *, prefix: str = "q") -> list[Turn]:
    """n turns, each with one distinctly named property."""
    return [make_turn(question=f"{prefix}{i}", answer=f"a{i}", recs=[make_property(f"{prefix}-home-{i}")]) for i in range(n)]


def make_chat(thread_id: str = DEFAULT_THREAD, title: str | None = "Pune search", last_active: str = "2024-05-01T10:00:00") -> ChatSession:
    return ChatSession(thread_id=thread_id, title=title, created_at="2024-05-01T09:00:00", last_active=last_active)


def make_conversation(turns: list[Turn], thread_id: str = DEFAULT_THREAD) -> ConversationResponse:
    return ConversationResponse(thread_id=thread_id, conversation_history=turns, user_queries=[])


def make_invoke(turns: list[Turn]) -> InvokeResponse:
    return InvokeResponse(state=ChatState(turn_log=turns))


def http_error(detail: str = "Server exploded", status: int = 500, **data: Any) -> HttpStatusError:
    return HttpStatusError(detail, status=status, data={"detail": detail, **data})


def make_session(token: str | None = DEFAULT_TOKEN, thread_id: str | None = DEFAULT_THREAD) -> Session:
    session = Session(durable=MemoryStore(), transient=MemoryStore())
    if token:
        session.set_token(token)
    if thread_id:
        session.set_thread_id(thread_id)
    return session


# -----------------------------
# Fake API
# -----------------------------

Result = Any  # a model, an Exception to raise, or a callable producing either


class FakeApi:
    """
    In-memory stand-in for ApiClient. Each endpoint returns (or raises) the
    configured result and records the call in ``calls``.

    A configured result may be a callable; it is invoked with the call's
    arguments, which lets a test run a user action "while the request is in
    flight" before the response is returned.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.conversations: dict[str, Result] = {}
        self.invoke_result: Result = make_invoke([])
        self.chats: Result = []
        self.created_chat: Result = make_chat("thread-new", "New search")
        self.preferences: Result = None
        self.bootstrap: Result = BootstrapResponse(thread_id="thread-boot", state=ChatState(turn_log=[]))
        self.approval: Result = "Request submitted"
        self.signup_result: Result = "Account created"
        self.login_result: Result = DEFAULT_TOKEN
        self.saved: list[Preferences] = []

    def _resolve(self, result: Result, *args: Any) -> Any:
        if callable(result) and not isinstance(result, type):
            result = result(*args)
        if isinstance(result, BaseException):
            raise result
        return result

    def calls_to(self, name: str) -> list[tuple[Any, ...]]:
        return [args for n, args in self.calls if n == name]

    # conversations
    def get_conversation(self, thread_id: str, token: str) -> ConversationResponse:
        self.calls.append(("get_conversation", (thread_id, token)))
        result = self.conversations.get(thread_id, make_conversation([], thread_id))
        return self._resolve(result, thread_id)

    def list_chats(self, token: str) -> list[ChatSession]:
        self.calls.append(("list_chats", (token,)))
        return self._resolve(self.chats, token)

    def create_chat(self, title: str, token: str) -> ChatSession:
        self.calls.append(("create_chat", (title, token)))
        return self._resolve(self.created_chat, title)

    def invoke(self, user_query: str, thread_id: str, token: str) -> InvokeResponse:
        self.calls.append(("invoke", (user_query, thread_id, token)))
        return self._resolve(self.invoke_result, user_query, thread_id)

    # preferences
    def get_preferences(self, token: str) -> Preferences | None:
        self.calls.append(("get_preferences", (token,)))
        return self._resolve(self.preferences, token)

    def save_preferences(self, prefs: Preferences, token: str) -> dict[str, Any]:
        self.calls.append(("save_preferences", (prefs, token)))
        self.saved.append(prefs)
        return {"message": "saved"}

    def initial_preferences(self, token: str) -> BootstrapResponse:
        self.calls.append(("initial_preferences", (token,)))
        return self._resolve(self.bootstrap, token)

    # access
    def request_approval(self, email: str, reason: str | None = None) -> str:
        self.calls.append(("request_approval", (email, reason)))
        return self._resolve(self.approval, email)

    def signup(self, email: str, password: str) -> str:
        self.calls.append(("signup", (email, password)))
        return self._resolve(self.signup_result, email)

    def login(self, email: str, password: str) -> str:
        self.calls.append(("login", (email, password)))
        return self._resolve(self.login_result, email)

    def close(self) -> None:
        self.calls.append(("close", ()))


# -----------------------------
# Fake HTTP layer for ApiClient
# -----------------------------


class FakeResponse:
    def __init__(self, status: int = 200, body: Any = None, *, reason: str = "OK", raw: bytes | None = None) -> None:
        self.status_code = status
        self.reason = reason
        self._body = body
        self._raw = raw

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._raw is not None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._body


class FakeHttpSession:
    """requests.Session double; ``responder(method, url, **kwargs)`` builds each reply."""

    def __init__(self, responder: Callable[..., FakeResponse] | FakeResponse) -> None:
        self.headers: dict[str, str] = {}
        self.requests: list[dict[str, Any]] = []
        self.closed = False
        self._responder = responder

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        if isinstance(self._responder, FakeResponse):
            return self._responder
        return self._responder(method, url, **kwargs)

    def close(self) -> None:
        self.closed = True

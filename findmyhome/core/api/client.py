# findmyhome/core/api/client.py
"""
Thin JSON client for the FindMyHome backend.

Every call goes through ``ApiClient.request``, which:
  - prefixes the configured base URL,
  - sends JSON with ``Content-Type: application/json`` unless overridden,
  - adds ``Authorization: Bearer <token>`` when a token is given,
  - decodes the body leniently (empty or non-JSON body → ``{}``),
  - raises ``HttpStatusError`` on any non-2xx status, with the body's
    ``detail`` (or ``message``, or the reason phrase) as the user-facing text.

No retries and no backoff: failures surface immediately and the user retries
by repeating the action.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests
from pydantic import TypeAdapter

from findmyhome.schemas.models import (
    BootstrapResponse,
    ChatSession,
    ClientSettings,
    ConversationResponse,
    InvokeResponse,
    Preferences,
)

from .errors import HttpStatusError, ResponseFormatError, api_error_guard

log = logging.getLogger(__name__)

_CHAT_LIST = TypeAdapter(list[ChatSession])


def _decode_body(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return {}


def _detail_from(data: Any, resp: requests.Response) -> str:
    if isinstance(data, dict):
        detail = data.get("detail") or data.get("message")
        if isinstance(detail, str) and detail:
            return detail
        if detail:
            # FastAPI validation errors arrive as a list of dicts
            return str(detail)
    return resp.reason or f"HTTP {resp.status_code}"


class ApiClient:
    """Session-backed client; one instance per running app."""

    def __init__(self, settings: ClientSettings | None = None, *, session: requests.Session | None = None) -> None:
        self.settings = settings or ClientSettings()
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.settings.user_agent})

    # ---------- lifecycle ----------

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ---------- core ----------

    def request(
        self,
        path: str,
        *,
        method: str = "GET",
        json: Any = None,
        token: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        hdrs = dict(headers or {})
        if not any(k.lower() == "content-type" for k in hdrs):
            hdrs["Content-Type"] = "application/json"
        if token:
            hdrs["Authorization"] = f"Bearer {token}"

        url = f"{self.settings.api_base}{path}"
        log.debug("%s %s", method, path)
        with api_error_guard():
            resp = self._session.request(method, url, json=json, headers=hdrs, timeout=self.settings.timeout_s)

        data = _decode_body(resp)
        if not resp.ok:
            detail = _detail_from(data, resp)
            log.info("%s %s -> %s %s", method, path, resp.status_code, detail)
            raise HttpStatusError(detail, status=resp.status_code, data=data)
        return data

    def _get(self, path: str, token: str | None = None) -> Any:
        return self.request(path, token=token)

    def _post(self, path: str, body: Any, token: str | None = None) -> Any:
        return self.request(path, method="POST", json=body, token=token)

    # ---------- conversations ----------

    def get_conversation(self, thread_id: str, token: str) -> ConversationResponse:
        data = self._get(f"/conversation/{quote(thread_id, safe='')}", token)
        with api_error_guard():
            return ConversationResponse.model_validate(_expect_dict(data))

    def list_chats(self, token: str) -> list[ChatSession]:
        data = self._get("/my-chats", token)
        if not isinstance(data, list):
            raise ResponseFormatError("Expected a list of chats.", data=data)
        with api_error_guard():
            return _CHAT_LIST.validate_python(data)

    def create_chat(self, title: str, token: str) -> ChatSession:
        data = self._post("/create-chat", {"title": title}, token)
        with api_error_guard():
            return ChatSession.model_validate(_expect_dict(data))

    def invoke(self, user_query: str, thread_id: str, token: str) -> InvokeResponse:
        data = self._post("/invoke", {"user_query": user_query, "thread_id": thread_id}, token)
        with api_error_guard():
            return InvokeResponse.model_validate(_expect_dict(data))

    # ---------- preferences ----------

    def get_preferences(self, token: str) -> Preferences | None:
        data = self._get("/my-preferences", token)
        prefs = _expect_dict(data).get("preferences")
        if not prefs:
            return None
        with api_error_guard():
            return Preferences.model_validate(prefs)

    def save_preferences(self, prefs: Preferences, token: str) -> Any:
        return self._post("/save-preferences", prefs.model_dump(), token)

    def initial_preferences(self, token: str) -> BootstrapResponse:
        data = self._post("/initial-preferences", {}, token)
        with api_error_guard():
            return BootstrapResponse.model_validate(_expect_dict(data))

    # ---------- access ----------

    def request_approval(self, email: str, reason: str | None = None) -> str:
        payload: dict[str, str] = {"email": email}
        if reason:
            payload["reason"] = reason
        return str(_expect_dict(self._post("/request-approval", payload)).get("message", ""))

    def signup(self, email: str, password: str) -> str:
        data = self._post("/signup", {"email": email, "password": password})
        return str(_expect_dict(data).get("message", ""))

    def login(self, email: str, password: str) -> str:
        data = _expect_dict(self._post("/login", {"email": email, "password": password}))
        token = data.get("access_token")
        if not isinstance(token, str) or not token:
            raise ResponseFormatError("Login response did not include an access token.", data=data)
        return token


def _expect_dict(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ResponseFormatError("Expected a JSON object from the server.", data=data)
    return data


__all__ = ["ApiClient"]

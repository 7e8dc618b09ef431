# findmyhome/core/session/store.py
"""
Local session storage.

Two tiers, mirroring browser storage:
  - durable   (FileStore): bearer token and active thread id; survives restarts.
  - transient (MemoryStore): last known conversation snapshot; best-effort,
    gone when the process exits, cleared on logout or conversation switch.

``Session`` is the explicit context object the rest of the client receives.
Created at app start (``Session.open``), torn down with ``logout()``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from findmyhome.core.routes import PreconditionError, Route

log = logging.getLogger(__name__)

STORAGE_KEYS = {
    "token": "findmyhome_token",
    "thread": "findmyhome_thread",
    "state": "findmyhome_state",
}

SESSION_FILENAME = "session.json"


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileStore:
    """
    JSON-file-backed store. The whole file is rewritten on every change;
    a missing or corrupt file reads as empty.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            log.warning("Ignoring unreadable session file %s", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class Session:
    """Auth token, active thread id and the cached conversation snapshot."""

    def __init__(self, durable: KeyValueStore | None = None, transient: KeyValueStore | None = None) -> None:
        self.durable: KeyValueStore = durable if durable is not None else MemoryStore()
        self.transient: KeyValueStore = transient if transient is not None else MemoryStore()

    @classmethod
    def open(cls, state_dir: Path) -> Session:
        return cls(durable=FileStore(Path(state_dir) / SESSION_FILENAME), transient=MemoryStore())

    # ---------- token ----------

    @property
    def token(self) -> str:
        return self.durable.get(STORAGE_KEYS["token"]) or ""

    def set_token(self, token: str) -> None:
        self.durable.set(STORAGE_KEYS["token"], token)

    def require_token(self) -> str:
        token = self.token
        if not token:
            raise PreconditionError(Route.AUTH, "No session token; log in first.")
        return token

    # ---------- active thread ----------

    @property
    def thread_id(self) -> str:
        return self.durable.get(STORAGE_KEYS["thread"]) or ""

    def set_thread_id(self, thread_id: str) -> None:
        self.durable.set(STORAGE_KEYS["thread"], thread_id)

    def require_thread(self) -> str:
        thread_id = self.thread_id
        if not thread_id:
            raise PreconditionError(Route.PREFERENCES, "No active conversation; submit preferences first.")
        return thread_id

    # ---------- snapshot ----------

    @property
    def state_cache(self) -> dict[str, Any] | None:
        raw = self.transient.get(STORAGE_KEYS["state"])
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    def set_state_cache(self, state: dict[str, Any]) -> None:
        self.transient.set(STORAGE_KEYS["state"], json.dumps(state))

    def clear_state_cache(self) -> None:
        self.transient.delete(STORAGE_KEYS["state"])

    # ---------- lifecycle ----------

    def logout(self) -> None:
        self.durable.delete(STORAGE_KEYS["token"])
        self.durable.delete(STORAGE_KEYS["thread"])
        self.transient.delete(STORAGE_KEYS["state"])


__all__ = ["STORAGE_KEYS", "KeyValueStore", "MemoryStore", "FileStore", "Session"]

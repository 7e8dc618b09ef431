# findmyhome/core/sync/chats.py
"""
Session/Chat Manager: list, create and switch between conversation threads.
Turn logs themselves are owned by the ConversationSynchronizer.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from findmyhome.core.api.client import ApiClient
from findmyhome.core.api.errors import ApiError, error_message
from findmyhome.core.session.store import Session
from findmyhome.schemas.models import ChatSession, Preferences

from .synchronizer import ConversationSynchronizer

log = logging.getLogger(__name__)

CREATE_FAILED = "Failed to create chat."
NAME_REQUIRED = "Enter a chat name."

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _parse_ts(value: str) -> datetime:
    if not value:
        return _EPOCH
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def latest_chat(chats: Sequence[ChatSession]) -> ChatSession | None:
    """Most recently active chat; unparseable timestamps sort oldest."""
    if not chats:
        return None
    return max(chats, key=lambda c: _parse_ts(c.last_active))


class ChatManager:
    def __init__(self, api: ApiClient, session: Session, sync: ConversationSynchronizer) -> None:
        self.api = api
        self.session = session
        self.sync = sync
        self.chats: list[ChatSession] = []
        self.preferences: Preferences | None = None
        self.name_error = ""
        self.loading = False

    def refresh(self) -> list[ChatSession]:
        """
        Reload the sidebar: the chat list (picking up the active chat's title)
        and the saved preferences. Both are advisory: a failed lookup keeps
        whatever was there before.
        """
        token = self.session.token
        if not token:
            return self.chats
        self.loading = True
        try:
            self._load_chats(token)
            self._load_preferences(token)
        finally:
            self.loading = False
        return self.chats

    def _load_chats(self, token: str) -> None:
        try:
            self.chats = self.api.list_chats(token)
        except ApiError as exc:
            log.info("Chat list unavailable: %s", exc)
            return
        current = next((c for c in self.chats if c.thread_id == self.sync.thread_id), None)
        if current is not None:
            self.sync.set_title(current.title)

    def _load_preferences(self, token: str) -> None:
        try:
            prefs = self.api.get_preferences(token)
        except ApiError as exc:
            log.info("Saved preferences unavailable: %s", exc)
            return
        self.preferences = prefs

    def create(self, title: str) -> ChatSession | None:
        """
        Create a named conversation and make it active. A blank name is a
        validation error and nothing is sent.
        """
        token = self.session.require_token()
        name = title.strip()
        if not name:
            self.name_error = NAME_REQUIRED
            return None
        self.name_error = ""

        try:
            chat = self.api.create_chat(name, token)
        except ApiError as exc:
            self.sync.set_status(error_message(exc, CREATE_FAILED))
            return None

        self.sync.start_new(chat, fallback_title=name)
        self.chats = [chat, *self.chats]
        log.info("Created chat %s", chat.thread_id)
        return chat

    def select(self, chat: ChatSession) -> None:
        self.sync.switch(chat.thread_id, chat.display_title())


__all__ = ["ChatManager", "latest_chat", "CREATE_FAILED", "NAME_REQUIRED"]

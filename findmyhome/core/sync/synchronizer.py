# findmyhome/core/sync/synchronizer.py
"""
Conversation Synchronizer

Purpose
-------
Keep one turn log for the active conversation, reconciling three sources:
  1) the cached snapshot in the session (painted first, may be stale),
  2) the authoritative server history (always replaces the log in full),
  3) optimistic turns appended locally while a send is in flight.

Rules
-----
- Server responses replace the whole log; there is no field-level merge.
- The current recommendation set is that of the LAST turn with a non-empty
  set, so a trailing question-only turn never blanks the property panel.
- Switching conversations clears the log, the recommendations and the cached
  snapshot before the new fetch is issued.
- Every fetch/send remembers the thread id it was issued for; a result that
  arrives after the active thread changed is dropped.
- At most one outstanding send per conversation.
- A failed send keeps its optimistic turn on screen (no rollback).

Listeners registered with ``subscribe`` receive a ``ConversationView`` after
every state change. They run synchronously and may trigger further actions.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import ValidationError

from findmyhome.core.api.client import ApiClient
from findmyhome.core.api.errors import ApiError, error_message
from findmyhome.core.session.store import Session
from findmyhome.schemas.models import UNTITLED_CHAT, ChatSession, ChatState, ConversationView, Property, Turn

log = logging.getLogger(__name__)

Listener = Callable[[ConversationView], None]

LOAD_FAILED = "Failed to load conversation."
SEND_FAILED = "Failed to send."
NO_THREAD = "Start recommendations before chatting."
REPLY_PENDING = "Still working on the previous reply."


def current_recommendations(turn_log: Sequence[Turn]) -> list[Property]:
    """Recommendations of the last turn that has any; empty when none does."""
    for turn in reversed(turn_log):
        if turn.recommended_properties:
            return list(turn.recommended_properties)
    return []


def turns_from_state(state: dict[str, Any] | None) -> list[Turn]:
    """Turn log from a cached snapshot; unreadable snapshots yield []."""
    if not state:
        return []
    try:
        return ChatState.model_validate(state).turn_log
    except ValidationError:
        log.debug("Discarding unreadable conversation snapshot")
        return []


@dataclass(frozen=True)
class ChatMessage:
    role: Literal["user", "assistant"]
    text: str


def conversation_messages(turn_log: Sequence[Turn]) -> list[ChatMessage]:
    out: list[ChatMessage] = []
    for turn in turn_log:
        question = turn.display_question()
        if question:
            out.append(ChatMessage("user", question))
        if turn.answer:
            out.append(ChatMessage("assistant", turn.answer))
    return out


class ConversationSynchronizer:
    def __init__(self, api: ApiClient, session: Session) -> None:
        self.api = api
        self.session = session

        self.thread_id = ""
        self.title = UNTITLED_CHAT
        self.turn_log: list[Turn] = []
        self.recommendations: list[Property] = []
        self.selected_turn: int | None = None
        self.status: str | None = None
        self.message = ""

        self._outstanding: set[str] = set()
        self._listeners: list[Listener] = []

    # ---------- observation ----------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    @property
    def pending_reply(self) -> bool:
        return self.thread_id in self._outstanding

    def view(self) -> ConversationView:
        return ConversationView(
            thread_id=self.thread_id,
            title=self.title,
            turn_log=tuple(self.turn_log),
            recommendations=tuple(self.recommendations),
            status=self.status,
            pending_reply=self.pending_reply,
        )

    def _notify(self) -> None:
        snapshot = self.view()
        for listener in list(self._listeners):
            listener(snapshot)

    def messages(self) -> list[ChatMessage]:
        return conversation_messages(self.turn_log)

    # ---------- internal state helpers ----------

    def _replace_log(self, turns: Sequence[Turn]) -> None:
        self.turn_log = list(turns)
        self.recommendations = current_recommendations(self.turn_log)
        self.selected_turn = None

    def _is_stale(self, issued_for: str) -> bool:
        return issued_for != self.thread_id

    def _fetch_history(self, thread_id: str, token: str) -> None:
        try:
            resp = self.api.get_conversation(thread_id, token)
        except ApiError as exc:
            if self._is_stale(thread_id):
                log.debug("Ignoring failed fetch for stale thread %s", thread_id)
                return
            log.warning("Loading conversation %s failed: %s", thread_id, exc)
            self.status = error_message(exc, LOAD_FAILED)
            self._notify()
            return

        if self._is_stale(thread_id):
            log.debug("Dropping history for %s; active thread is now %s", thread_id, self.thread_id)
            return
        self._replace_log(resp.conversation_history)
        self.session.set_state_cache({"turn_log": [t.model_dump(mode="json") for t in self.turn_log]})
        self._notify()

    # ---------- operations ----------

    def load(self) -> None:
        """
        Initial load of the conversation view.

        Raises PreconditionError when the session has no token (→ auth) or no
        active thread (→ preferences intake).
        """
        token = self.session.require_token()
        thread_id = self.session.require_thread()
        self.thread_id = thread_id
        self.status = None

        cached = turns_from_state(self.session.state_cache)
        if cached:
            self._replace_log(cached)
            self._notify()

        self._fetch_history(thread_id, token)

    def send(self, text: str | None = None) -> bool:
        """
        Send a chat turn. ``text`` defaults to the input buffer (``message``).
        Returns True when a request was issued.
        """
        raw = self.message if text is None else text
        user_message = raw.strip()
        if not user_message:
            return False
        if not self.thread_id:
            self.status = NO_THREAD
            self._notify()
            return False
        if self.pending_reply:
            self.status = REPLY_PENDING
            self._notify()
            return False

        token = self.session.require_token()
        thread_id = self.thread_id
        self.status = None
        self.message = ""
        self._outstanding.add(thread_id)
        optimistic = Turn(question=user_message, answer="", recommended_properties=list(self.recommendations))
        self.turn_log = [*self.turn_log, optimistic]
        self._notify()

        try:
            resp = self.api.invoke(user_message, thread_id, token)
        except ApiError as exc:
            self._outstanding.discard(thread_id)
            if self._is_stale(thread_id):
                log.debug("Ignoring failed send for stale thread %s", thread_id)
                return True
            log.warning("Send to %s failed: %s", thread_id, exc)
            self.status = error_message(exc, SEND_FAILED)
            self._notify()
            return True

        self._outstanding.discard(thread_id)
        if self._is_stale(thread_id):
            log.debug("Dropping reply for %s; active thread is now %s", thread_id, self.thread_id)
            return True
        if self.status == REPLY_PENDING:
            self.status = None
        self._replace_log(resp.state.turn_log)
        self.session.set_state_cache(resp.state.model_dump(mode="json"))
        self._notify()
        return True

    def switch(self, thread_id: str, title: str | None = None) -> None:
        """Make ``thread_id`` active and load its history."""
        token = self.session.require_token()
        self.session.set_thread_id(thread_id)
        self.thread_id = thread_id
        self.title = (title or "").strip() or UNTITLED_CHAT
        self.status = None
        self._replace_log([])
        self.session.clear_state_cache()
        self._notify()

        self._fetch_history(thread_id, token)

    def start_new(self, chat: ChatSession, fallback_title: str = UNTITLED_CHAT) -> None:
        """Activate a conversation the server just created; it has no turns yet."""
        self.session.set_thread_id(chat.thread_id)
        self.thread_id = chat.thread_id
        self.title = chat.display_title(fallback=fallback_title.strip() or UNTITLED_CHAT)
        self.status = None
        self._replace_log([])
        self.session.set_state_cache({"turn_log": []})
        self._notify()

    def reset(self) -> None:
        """Forget all conversation state (logout)."""
        self.thread_id = ""
        self.title = UNTITLED_CHAT
        self.message = ""
        self.status = None
        self._outstanding.clear()
        self._replace_log([])
        self._notify()

    def set_title(self, title: str | None) -> None:
        self.title = (title or "").strip() or UNTITLED_CHAT
        self._notify()

    def set_status(self, message: str | None) -> None:
        self.status = message
        self._notify()

    # ---------- turn selection ----------

    def select_turn(self, index: int | None) -> None:
        """
        Show the recommendations of an earlier turn instead of the current set.
        ``None`` (or an index without recommendations) goes back to current.
        """
        if index is not None and 0 <= index < len(self.turn_log) and self.turn_log[index].recommended_properties:
            self.selected_turn = index
        else:
            self.selected_turn = None
        self._notify()

    def displayed_recommendations(self) -> list[Property]:
        if self.selected_turn is not None and self.selected_turn < len(self.turn_log):
            return list(self.turn_log[self.selected_turn].recommended_properties)
        return list(self.recommendations)


__all__ = [
    "ConversationSynchronizer",
    "ChatMessage",
    "current_recommendations",
    "conversation_messages",
    "turns_from_state",
    "LOAD_FAILED",
    "SEND_FAILED",
    "NO_THREAD",
    "REPLY_PENDING",
]

# findmyhome/core/auth/flow.py
"""
Access flow: request approval → sign up → log in.

The panel shown is an explicit state (``AuthPanel``). Transitions out of the
request panel are driven by an ``ApprovalStatus`` read from the error body's
structured ``code`` field. Older backends only send free text in ``detail``;
``approval_status_from_detail`` is the single place that interprets that text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from findmyhome.core.api.client import ApiClient
from findmyhome.core.api.errors import ApiError, error_message
from findmyhome.core.routes import Route
from findmyhome.core.session.store import Session
from findmyhome.core.sync.chats import latest_chat

log = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

StatusKind = Literal["success", "info", "warning", "error"]


class AuthPanel(str, Enum):
    REQUEST = "request"
    SIGNUP = "signup"
    LOGIN = "login"


class ApprovalStatus(str, Enum):
    APPROVED = "approved"
    ALREADY_REGISTERED = "already_registered"
    PENDING = "pending"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Status:
    kind: StatusKind
    message: str


def approval_status_from_detail(detail: str) -> ApprovalStatus | None:
    text = detail.lower()
    if "approved" in text:
        return ApprovalStatus.APPROVED
    if "log in" in text:
        return ApprovalStatus.ALREADY_REGISTERED
    if "submitted for approval" in text:
        return ApprovalStatus.PENDING
    if "rejected" in text:
        return ApprovalStatus.REJECTED
    return None


def approval_status(exc: ApiError) -> ApprovalStatus | None:
    code = exc.data.get("code")
    if isinstance(code, str):
        try:
            return ApprovalStatus(code.strip().lower())
        except ValueError:
            log.debug("Unknown approval code %r", code)
    return approval_status_from_detail(exc.detail)


# status → (next panel or None to stay, banner, show "check status")
_TRANSITIONS: dict[ApprovalStatus, tuple[AuthPanel | None, Status, bool]] = {
    ApprovalStatus.APPROVED: (
        AuthPanel.SIGNUP,
        Status("success", "You are approved. Create a password to continue."),
        False,
    ),
    ApprovalStatus.ALREADY_REGISTERED: (
        AuthPanel.LOGIN,
        Status("success", "You already have access. Log in to continue."),
        False,
    ),
    ApprovalStatus.PENDING: (
        None,
        Status("info", "Your request is still under review. Check again later."),
        True,
    ),
    ApprovalStatus.REJECTED: (
        None,
        Status("warning", "Your request was not approved. Contact the admin."),
        False,
    ),
}


def resolve_start_route(api: ApiClient, session: Session) -> Route:
    """
    Where a logged-in user lands: the most recently active chat when there is
    one (its id becomes the active thread), otherwise preferences intake.
    """
    token = session.token
    if not token:
        return Route.AUTH
    try:
        chats = api.list_chats(token)
    except ApiError as exc:
        log.info("Chat lookup failed, falling back to preferences: %s", exc)
        return Route.PREFERENCES
    latest = latest_chat(chats)
    if latest is None:
        return Route.PREFERENCES
    session.set_thread_id(latest.thread_id)
    return Route.CHAT


class AuthFlow:
    def __init__(self, api: ApiClient, session: Session) -> None:
        self.api = api
        self.session = session
        self.panel = AuthPanel.REQUEST
        self.email = ""
        self.status: Status | None = None
        self.show_check_status = False
        self.loading = False

    def resume(self) -> Route:
        return resolve_start_route(self.api, self.session)

    def request_access(self, email: str | None = None, reason: str = "") -> None:
        """Submit (or re-check) an access request for ``email``."""
        if email is not None:
            self.email = email.strip()
        self.status = None
        if not self.email:
            self.status = Status("error", "Please enter your email.")
            return

        self.loading = True
        try:
            message = self.api.request_approval(self.email, reason.strip() or None)
        except ApiError as exc:
            self._apply_approval_error(exc)
            return
        finally:
            self.loading = False

        self.status = Status("success", f"{message}. We will notify you after approval.")
        self.show_check_status = True

    def _apply_approval_error(self, exc: ApiError) -> None:
        status = approval_status(exc)
        if status is None:
            self.status = Status("error", error_message(exc, "Request failed."))
            return
        panel, banner, check = _TRANSITIONS[status]
        if panel is not None:
            self.panel = panel
        self.status = banner
        if check:
            self.show_check_status = True

    def signup(self, password: str, confirm: str) -> None:
        self.status = None
        if not self.email:
            self.status = Status("error", "Missing email for signup.")
            return
        if len(password) < MIN_PASSWORD_LENGTH:
            self.status = Status("error", f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
            return
        if password != confirm:
            self.status = Status("error", "Passwords do not match.")
            return

        self.loading = True
        try:
            message = self.api.signup(self.email, password)
        except ApiError as exc:
            self.status = Status("error", error_message(exc, "Signup failed."))
            return
        finally:
            self.loading = False

        self.status = Status("success", f"{message}. Please log in to continue.")
        self.panel = AuthPanel.LOGIN

    def login(self, password: str, email: str | None = None) -> Route:
        """Log in; on success returns the route to continue to."""
        if email is not None:
            self.email = email.strip()
        self.status = None
        if not self.email:
            self.status = Status("error", "Please enter your email.")
            return Route.AUTH
        if not password:
            self.status = Status("error", "Please enter your password.")
            return Route.AUTH

        self.loading = True
        try:
            token = self.api.login(self.email, password)
        except ApiError as exc:
            self.status = Status("error", error_message(exc, "Login failed."))
            return Route.AUTH
        finally:
            self.loading = False

        self.session.set_token(token)
        log.info("Logged in as %s", self.email)
        return resolve_start_route(self.api, self.session)

    def logout(self) -> Route:
        self.session.logout()
        self.panel = AuthPanel.REQUEST
        self.status = None
        return Route.AUTH


__all__ = [
    "AuthPanel",
    "ApprovalStatus",
    "Status",
    "AuthFlow",
    "approval_status",
    "approval_status_from_detail",
    "resolve_start_route",
]

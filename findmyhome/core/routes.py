# findmyhome/core/routes.py
"""
Screens the client can send the user to, and the precondition failure that
carries a redirect target.
"""

from __future__ import annotations

from enum import Enum


class Route(str, Enum):
    AUTH = "auth"
    PREFERENCES = "preferences"
    CHAT = "chat"


class PreconditionError(RuntimeError):
    """
    A required piece of session state is missing.

    Not a user-facing error: the caller is expected to redirect to ``route``
    (AUTH when there is no token, PREFERENCES when there is no active thread).
    """

    def __init__(self, route: Route, reason: str) -> None:
        super().__init__(reason)
        self.route = route

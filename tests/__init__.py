# tests/__init__.py
"""
Expose common test utilities so tests can import directly:
    from tests import FakeApi, make_turn
"""

from .utils import FakeApi, make_chat, make_property, make_session, make_turn, make_turn_log

__all__ = ["FakeApi", "make_chat", "make_property", "make_session", "make_turn", "make_turn_log"]

# findmyhome/core/sync/__init__.py
from .chats import ChatManager, latest_chat
from .synchronizer import (
    ChatMessage,
    ConversationSynchronizer,
    conversation_messages,
    current_recommendations,
)

__all__ = [
    "ConversationSynchronizer",
    "ChatManager",
    "ChatMessage",
    "current_recommendations",
    "conversation_messages",
    "latest_chat",
]

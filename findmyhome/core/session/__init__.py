# findmyhome/core/session/__init__.py
from .store import STORAGE_KEYS, FileStore, KeyValueStore, MemoryStore, Session

__all__ = ["STORAGE_KEYS", "KeyValueStore", "MemoryStore", "FileStore", "Session"]

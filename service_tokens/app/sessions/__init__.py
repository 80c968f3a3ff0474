"""
Session store package.

Session records map a session identifier to the owning principal id and
expire no later than the token they back.
"""

from .store import SessionStore, InMemorySessionStore
from .redis_store import RedisSessionStore

__all__ = ["SessionStore", "InMemorySessionStore", "RedisSessionStore"]

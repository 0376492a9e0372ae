"""
Adapters layer - Record stores (in-memory and MongoDB).
"""

from .memory_store import MemoryStore
from .mongo_store import MongoStore

__all__ = ["MemoryStore", "MongoStore"]

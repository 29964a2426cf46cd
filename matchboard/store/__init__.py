"""Remote store clients for the shared board document."""

from .base import RemoteStore, Subscription
from .firebase import FirebaseStore
from .memory import MemoryStore

__all__ = ["FirebaseStore", "MemoryStore", "RemoteStore", "Subscription"]

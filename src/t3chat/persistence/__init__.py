"""Chat persistence collaborators."""

from t3chat.persistence.base import ChatRecord, PersistenceClient
from t3chat.persistence.convex import ConvexPersistence
from t3chat.persistence.memory import InMemoryPersistence

__all__ = [
    "ChatRecord",
    "PersistenceClient",
    "ConvexPersistence",
    "InMemoryPersistence",
]

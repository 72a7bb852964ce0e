"""Window storage backends."""

from .base import WindowEntry, WindowStore
from .memory import InMemoryWindowStore

__all__ = [
    "WindowEntry",
    "WindowStore",
    "InMemoryWindowStore",
]

"""
In-memory session storage implementation.

Provides non-persistent session storage for testing and temporary use.
"""
from typing import Optional

from .protocols import SessionStorage
from .models import SessionData


class MemorySession(SessionStorage):
    """
    In-memory session storage.

    Stores an independent copy of the session data. Data is lost when
    the object is destroyed.

    Example:
        >>> session = MemorySession()
        >>> session.save(session_data)
        >>> loaded = session.load()
    """

    def __init__(self, data: Optional[SessionData] = None):
        self._data: Optional[SessionData] = data.copy() if data else None

    def load(self) -> Optional[SessionData]:
        return self._data.copy() if self._data else None

    def save(self, data: SessionData) -> None:
        self._data = data.copy()

    def delete(self) -> None:
        self._data = None

    def exists(self) -> bool:
        return self._data is not None

    def close(self) -> None:
        """Close storage (no-op for memory storage)."""
        pass

    def __enter__(self) -> 'MemorySession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

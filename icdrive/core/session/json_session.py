"""
JSON file session storage implementation.

Keeps the snapshot as a single JSON document, e.g. ``cache.json``.
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from .protocols import SessionStorage
from .models import SessionData
from ..exceptions import DecodingError


class JSONFileSession(SessionStorage):
    """
    Session storage backed by one JSON file.

    Writes go to a temporary file that replaces the target, so a crash
    mid-write never leaves a truncated session behind.

    Example:
        >>> storage = JSONFileSession("cache.json")
        >>> storage.save(session_data)
        >>> loaded = storage.load()
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[SessionData]:
        """
        Load session data from the file.

        Raises:
            DecodingError: If the file exists but is not a valid snapshot
        """
        if not self._path.exists():
            return None
        try:
            return SessionData.from_json(self._path.read_text(encoding='utf-8'))
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            raise DecodingError(f"Invalid session file {self._path}: {e}") from e

    def save(self, data: SessionData) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(data.to_json())
            os.replace(tmp, self._path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def delete(self) -> None:
        if self._path.exists():
            self._path.unlink()

    def exists(self) -> bool:
        return self._path.exists()

    def close(self) -> None:
        pass

    def __enter__(self) -> 'JSONFileSession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

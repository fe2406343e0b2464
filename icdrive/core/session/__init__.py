"""
Session management module.

The session snapshot, the credential store that mutates it, and
storage backends for persisting it between runs.
"""
from .protocols import SessionStorage
from .models import SessionData, ServiceInfo, generate_session_identifier
from .credentials import CredentialStore
from .memory_session import MemorySession
from .json_session import JSONFileSession
from .sqlite_session import SQLiteSession

__all__ = [
    'SessionStorage',
    'SessionData',
    'ServiceInfo',
    'generate_session_identifier',
    'CredentialStore',
    'MemorySession',
    'JSONFileSession',
    'SQLiteSession',
]

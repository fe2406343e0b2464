"""
icdrive - Async Python client for iCloud Drive.

Usage:
    >>> from icdrive import ICloudClient
    >>>
    >>> async with ICloudClient("cache.json") as icloud:
    ...     await icloud.start(username, password, code_provider=ask_code)
    ...     drive = await icloud.drive()
    ...     root = await drive.root()
    ...     for node in root:
    ...         print(node)
"""
from .client import ICloudClient

# Configuration
from .core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    AiohttpTransport,
    HttpRequest,
    HttpResponse,
    Transport,
    RequestPipeline,
    AsyncAuthService,
    AuthenticationState,
)

# Session management
from .core.session import (
    SessionStorage,
    SessionData,
    ServiceInfo,
    CredentialStore,
    MemorySession,
    JSONFileSession,
    SQLiteSession,
)

# Drive
from .core.drive import DriveNode, DriveService, File, Folder, decode_node

# Errors
from .core.exceptions import (
    IcloudError,
    TransportError,
    DecodingError,
    MissingCacheItem,
    InvalidCredentials,
    NeedsSecondFactor,
    AuthenticationFailed,
    TrustFailed,
    InvalidNodeType,
)

from .core.logging import setup_logging

__version__ = '1.0.0'

__all__ = [
    'ICloudClient',
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'AiohttpTransport',
    'HttpRequest',
    'HttpResponse',
    'Transport',
    'RequestPipeline',
    'AsyncAuthService',
    'AuthenticationState',
    'SessionStorage',
    'SessionData',
    'ServiceInfo',
    'CredentialStore',
    'MemorySession',
    'JSONFileSession',
    'SQLiteSession',
    'DriveNode',
    'DriveService',
    'File',
    'Folder',
    'decode_node',
    'IcloudError',
    'TransportError',
    'DecodingError',
    'MissingCacheItem',
    'InvalidCredentials',
    'NeedsSecondFactor',
    'AuthenticationFailed',
    'TrustFailed',
    'InvalidNodeType',
    'setup_logging',
]

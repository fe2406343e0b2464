"""iCloud web API module."""
from .config import APIConfig, ProxyConfig, SSLConfig, TimeoutConfig
from .transport import (
    AiohttpTransport,
    HttpRequest,
    HttpResponse,
    Transport,
    decode_header_value,
)
from .request import RequestBuilder
from .pipeline import RequestPipeline
from .async_auth import AsyncAuthService, AuthenticationState

__all__ = [
    # Configuration
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',

    # Transport
    'AiohttpTransport',
    'HttpRequest',
    'HttpResponse',
    'Transport',
    'decode_header_value',

    # Requests
    'RequestBuilder',
    'RequestPipeline',

    # Authentication
    'AsyncAuthService',
    'AuthenticationState',
]

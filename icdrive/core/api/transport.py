"""
HTTP transport layer.

The core only needs "send a request, get status, headers and body
back". Transport is that seam; AiohttpTransport is the production
implementation and tests substitute an in-memory one.
"""
import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Protocol, Tuple, Union, runtime_checkable

import aiohttp
from multidict import CIMultiDict

from .config import APIConfig
from ..exceptions import DecodingError, TransportError
from ..logging import get_logger

HeaderValue = Union[str, bytes]
RawHeaders = Tuple[Tuple[HeaderValue, HeaderValue], ...]


def decode_header_value(value: HeaderValue) -> str:
    """
    Decode a raw header value as strict UTF-8.

    Raises:
        DecodingError: If the bytes are not valid UTF-8
    """
    if isinstance(value, str):
        return value
    try:
        return value.decode('utf-8')
    except UnicodeDecodeError as e:
        raise DecodingError(f"Header value is not valid UTF-8: {e}") from e


def header_name(name: HeaderValue) -> str:
    if isinstance(name, bytes):
        return name.decode('latin-1')
    return name


@dataclass(frozen=True)
class HttpRequest:
    """An outgoing request, fully built."""
    method: str
    url: str
    headers: CIMultiDict = field(default_factory=CIMultiDict)
    body: Optional[bytes] = None


@dataclass(frozen=True)
class HttpResponse:
    """
    A received response.

    Headers are kept as raw (name, value) pairs so repeated headers such
    as Set-Cookie survive and value decoding stays with the consumer.
    """
    status: int
    raw_headers: RawHeaders = ()
    body: bytes = b''

    def iter_headers(self) -> Iterable[Tuple[str, HeaderValue]]:
        for name, value in self.raw_headers:
            yield header_name(name), value

    def header(self, name: str) -> Optional[str]:
        """Get the first value of a header, decoded, or None if absent."""
        wanted = name.lower()
        for key, value in self.iter_headers():
            if key.lower() == wanted:
                return decode_header_value(value)
        return None

    def header_all(self, name: str) -> List[str]:
        wanted = name.lower()
        return [
            decode_header_value(value)
            for key, value in self.iter_headers()
            if key.lower() == wanted
        ]

    def text(self) -> str:
        try:
            return self.body.decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecodingError(f"Response body is not valid UTF-8: {e}", self.status) from e

    def json(self) -> Any:
        """
        Parse the body as JSON.

        Raises:
            DecodingError: If the body is not valid JSON
        """
        try:
            return json.loads(self.text())
        except json.JSONDecodeError as e:
            raise DecodingError(f"Malformed JSON response: {e}", self.status) from e


@runtime_checkable
class Transport(Protocol):
    """Anything able to deliver an HttpRequest and return the HttpResponse."""

    async def send(self, request: HttpRequest) -> HttpResponse:
        ...

    async def close(self) -> None:
        ...


class AiohttpTransport:
    """
    Transport backed by an aiohttp ClientSession.

    Cookies are owned by the session credential store, so the aiohttp
    cookie jar is disabled.

    Example:
        >>> async with AiohttpTransport(APIConfig.default()) as transport:
        ...     response = await transport.send(request)
    """

    def __init__(self, config: Optional[APIConfig] = None):
        self._config = config or APIConfig.default()
        self._session: Optional[aiohttp.ClientSession] = None
        self._connector: Optional[aiohttp.TCPConnector] = None
        self._logger = get_logger('icdrive.transport')

    async def __aenter__(self) -> 'AiohttpTransport':
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created and open."""
        if self._session is None or self._session.closed:
            self._connector = aiohttp.TCPConnector(
                **self._config.get_connector_kwargs()
            )
            self._session = aiohttp.ClientSession(
                connector=self._connector,
                cookie_jar=aiohttp.DummyCookieJar(),
                **self._config.get_session_kwargs()
            )
        return self._session

    async def send(self, request: HttpRequest) -> HttpResponse:
        session = await self._ensure_session()
        proxy = self._config.proxy.to_aiohttp_proxy() if self._config.proxy else None

        try:
            async with session.request(
                request.method,
                request.url,
                data=request.body,
                headers=request.headers,
                proxy=proxy
            ) as response:
                body = await response.read()
                return HttpResponse(
                    status=response.status,
                    raw_headers=tuple(response.raw_headers),
                    body=body
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._logger.error(f"Network error: {e}")
            raise TransportError(f"Network error: {e}", e) from e

    async def close(self) -> None:
        """Close the session and release resources."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

        if self._connector and not self._connector.closed:
            await self._connector.close()
        self._connector = None

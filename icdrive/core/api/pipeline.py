"""
Request pipeline.

The single chokepoint for outbound calls: credentials are attached to
every request and refreshed from every response, whatever its status.
"""
from typing import Any, Callable, Optional, TYPE_CHECKING, Union

from .request import RequestBuilder
from .transport import HttpResponse, Transport
from ..exceptions import AuthenticationFailed
from ..logging import get_logger

if TYPE_CHECKING:
    from ..session.credentials import CredentialStore

Customizer = Callable[[RequestBuilder], Any]

UNAUTHORIZED = 401


class RequestPipeline:
    """
    Sends requests on behalf of a CredentialStore.

    Not safe for concurrent use on its own; ICloudClient serializes
    access behind its session lock.
    """

    def __init__(self, store: 'CredentialStore', transport: Transport):
        self._store = store
        self._transport = transport
        self._logger = get_logger('icdrive.pipeline')

    @property
    def store(self) -> 'CredentialStore':
        return self._store

    @property
    def transport(self) -> Transport:
        return self._transport

    async def send(
        self,
        method: str,
        url: str,
        body: Optional[Union[bytes, str]] = None,
        customize: Optional[Customizer] = None
    ) -> HttpResponse:
        """
        Build, send and post-process a request.

        Args:
            method: HTTP method
            url: Absolute request URL
            body: Raw request body
            customize: Hook applied after the credential headers, used for
                endpoint-specific headers such as Content-Type

        Returns:
            The response, for any status other than 401

        Raises:
            AuthenticationFailed: On HTTP 401, after headers were applied
            TransportError: If the request could not be delivered
            DecodingError: If a credential header could not be decoded
        """
        builder = RequestBuilder(method, url, body)
        self._store.apply_outgoing(builder)
        if customize is not None:
            customize(builder)

        request = builder.build()
        self._logger.debug(f"{request.method} {request.url}")

        response = await self._transport.send(request)
        self._logger.debug(f"{request.method} {request.url} -> {response.status}")

        self._store.apply_incoming(response.iter_headers())

        if response.status == UNAUTHORIZED:
            raise AuthenticationFailed(status=response.status)

        return response

"""Request builder for API requests."""
from typing import Iterable, Optional, Tuple, Union

from multidict import CIMultiDict

from ..transport import HttpRequest


class RequestBuilder:
    """
    Builds API requests.

    Header setters replace any existing value for the same name, and
    return the builder so calls can be chained.
    """

    def __init__(self, method: str, url: str, body: Optional[Union[bytes, str]] = None):
        """Initializes request builder."""
        self.method = method.upper()
        self.url = url
        self.headers: CIMultiDict = CIMultiDict()
        self.body = body.encode('utf-8') if isinstance(body, str) else body

    def header(self, name: str, value: str) -> 'RequestBuilder':
        self.headers[name] = value
        return self

    def headers_from(self, pairs: Iterable[Tuple[str, str]]) -> 'RequestBuilder':
        for name, value in pairs:
            self.headers[name] = value
        return self

    def build(self) -> HttpRequest:
        return HttpRequest(
            method=self.method,
            url=self.url,
            headers=CIMultiDict(self.headers),
            body=self.body
        )

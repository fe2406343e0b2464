"""
Credential store.

Owns the mutable session fields and the two directional rules: which
stored fields are attached to an outgoing request, and which response
headers update which stored field.
"""
from typing import Dict, Iterable, Optional, Tuple

from .models import SessionData, ServiceInfo
from ..api.config import (
    ACCOUNT_COUNTRY_HEADER,
    COOKIE_HEADER,
    GLOBAL_HEADERS,
    OAUTH_STATE_HEADER,
    SCNT_HEADER,
    SESSION_ID_HEADER,
    SESSION_TOKEN_HEADER,
    SET_COOKIE_HEADER,
    TRUST_TOKEN_HEADER,
)
from ..api.request import RequestBuilder
from ..api.transport import HeaderValue, decode_header_value, header_name
from ..logging import get_logger

logger = get_logger(__name__)

# Response header -> SessionData attribute
TRACKED_HEADERS: Tuple[Tuple[str, str], ...] = (
    (ACCOUNT_COUNTRY_HEADER, 'account_country'),
    (SESSION_ID_HEADER, 'session_id'),
    (SESSION_TOKEN_HEADER, 'session_token'),
    (SCNT_HEADER, 'scnt'),
    (TRUST_TOKEN_HEADER, 'trust_token'),
)

_TRACKED_BY_NAME = {name.lower(): attr for name, attr in TRACKED_HEADERS}


def cookie_name(pair: str) -> str:
    return pair.split('=', 1)[0].strip()


class CredentialStore:
    """
    Holds a SessionData and applies the header rules to it.

    Example:
        >>> store = CredentialStore(SessionData.new())
        >>> store.apply_outgoing(builder)
        >>> store.apply_incoming(response.raw_headers)
    """

    def __init__(self, data: SessionData):
        self._data = data

    @property
    def data(self) -> SessionData:
        """The live session data (not a copy)."""
        return self._data

    def snapshot(self) -> SessionData:
        return self._data.copy()

    def apply_outgoing(self, builder: RequestBuilder) -> RequestBuilder:
        """
        Attach credential headers to a request.

        OAuth state and the origin/referer pair are always sent; session
        id, scnt and the cookie header only when there is something to send.
        """
        data = self._data
        builder.header(OAUTH_STATE_HEADER, data.oauth_state)

        if data.session_id is not None:
            builder.header(SESSION_ID_HEADER, data.session_id)

        if data.scnt is not None:
            builder.header(SCNT_HEADER, data.scnt)

        builder.headers_from(GLOBAL_HEADERS)

        if data.cookies:
            builder.header(COOKIE_HEADER, '; '.join(sorted(data.cookies)))

        return builder

    def apply_incoming(self, headers: Iterable[Tuple[str, HeaderValue]]) -> None:
        """
        Fold response headers back into the session.

        All values are decoded before anything is stored, so a malformed
        header leaves the session untouched.

        Args:
            headers: (name, value) pairs; values may be str or raw bytes

        Raises:
            DecodingError: If a relevant header value is not valid UTF-8
        """
        fields: Dict[str, str] = {}
        cookies: Dict[str, str] = {}

        for name, value in headers:
            key = header_name(name).lower()
            if key in _TRACKED_BY_NAME:
                fields[_TRACKED_BY_NAME[key]] = decode_header_value(value)
            elif key == SET_COOKIE_HEADER.lower():
                pair = decode_header_value(value).split(';', 1)[0].strip()
                if pair:
                    cookies[cookie_name(pair)] = pair

        for attr, value in fields.items():
            setattr(self._data, attr, value)

        for name, pair in cookies.items():
            self.set_cookie(name, pair)

        if fields or cookies:
            logger.debug(
                f"Session updated: fields={sorted(fields)} cookies={sorted(cookies)}"
            )

    def set_cookie(self, name: str, pair: str) -> None:
        """Store a cookie pair, replacing any entry with the same name."""
        stale = {c for c in self._data.cookies if cookie_name(c) == name}
        self._data.cookies.difference_update(stale)
        self._data.cookies.add(pair)

    def cookie(self, name: str) -> Optional[str]:
        for pair in self._data.cookies:
            if cookie_name(pair) == name:
                return pair.split('=', 1)[1] if '=' in pair else ''
        return None

    def set_service(self, name: str, url: str) -> None:
        self._data.webservices[name] = ServiceInfo(url=url)

    def get_service_info(self, name: str) -> Optional[ServiceInfo]:
        return self._data.get_service_info(name)

"""
Async authentication service.

Drives the iCloud sign-in protocol: login, account authentication,
second-factor verification and device trust.
"""
import json
from enum import Enum

from .config import (
    ACCOUNT_COUNTRY_HEADER,
    APIConfig,
    AUTH_HEADERS,
    RESPONSE_DISPOSITION_HEADER,
    SESSION_TOKEN_HEADER,
)
from .pipeline import RequestPipeline
from .request import RequestBuilder
from ..exceptions import (
    AuthenticationFailed,
    DecodingError,
    InvalidCredentials,
    MissingCacheItem,
    TrustFailed,
)
from ..logging import get_logger

OK = 200
NO_CONTENT = 204
CONFLICT = 409

DRIVE_SERVICE = 'drive'


class AuthenticationState(Enum):
    """Outcome of an authenticate() call. Never persisted."""
    UNAUTHENTICATED = 'Unauthenticated'
    NEEDS_SECOND_FACTOR = 'Needs 2FA'
    AUTHENTICATED = 'Authenticated'

    def __str__(self) -> str:
        return self.value


def _auth_request(content_type=None, accept='*/*'):
    def customize(builder: RequestBuilder) -> None:
        if content_type:
            builder.header('Content-Type', content_type)
        builder.header('Accept', accept)
        builder.headers_from(AUTH_HEADERS)
    return customize


def _parse_disposition(value: str) -> int:
    try:
        code = int(value.strip())
    except ValueError:
        raise DecodingError(f"Invalid {RESPONSE_DISPOSITION_HEADER} value: {value!r}")
    if not 100 <= code <= 999:
        raise DecodingError(f"Invalid {RESPONSE_DISPOSITION_HEADER} value: {value!r}")
    return code


class AsyncAuthService:
    """
    Asynchronous authentication service.

    Every call goes through the request pipeline, so the session is
    updated from response headers whether the call succeeds or not.
    """

    def __init__(self, pipeline: RequestPipeline, config: APIConfig = None):
        """
        Initialize auth service.

        Args:
            pipeline: Request pipeline bound to the session's credential store
            config: API configuration (endpoints)
        """
        self._pipeline = pipeline
        self._config = config or APIConfig.default()
        self._logger = get_logger('icdrive.auth')

    @property
    def store(self):
        return self._pipeline.store

    async def login(self, username: str, password: str) -> None:
        """
        Sign in with an Apple ID.

        A 200 response is a success unless the response disposition
        header is present and carries anything other than 409. Sign-in
        answers 409 when the account continues to a second factor.

        Raises:
            InvalidCredentials: If the sign-in is rejected
            DecodingError: If the disposition header is not a status code
        """
        body = json.dumps({
            'accountName': username,
            'password': password,
            'rememberMe': True,
            'trustTokens': []
        })

        response = await self._pipeline.send(
            'POST',
            self._config.signin_url,
            body,
            _auth_request('application/json')
        )

        if response.status != OK:
            self._logger.info(f"Sign-in rejected with status {response.status}")
            raise InvalidCredentials(status=response.status)

        disposition = response.header(RESPONSE_DISPOSITION_HEADER)
        if disposition is not None and _parse_disposition(disposition) != CONFLICT:
            self._logger.info(f"Sign-in rejected with disposition {disposition}")
            raise InvalidCredentials(status=response.status)

        self._logger.info("Signed in")

    async def authenticate(self) -> AuthenticationState:
        """
        Exchange the session token for an authenticated web session.

        Returns:
            The resulting authentication state; any non-200 answer is
            UNAUTHENTICATED rather than an error

        Raises:
            MissingCacheItem: If no prior login populated the account
                country or session token
            DecodingError: If a 200 body is not a JSON object
        """
        data = self.store.data
        if data.account_country is None:
            raise MissingCacheItem(ACCOUNT_COUNTRY_HEADER)
        if data.session_token is None:
            raise MissingCacheItem(SESSION_TOKEN_HEADER)

        body = json.dumps({
            'accountCountryCode': data.account_country,
            'dsWebAuthToken': data.session_token,
            'extended_login': True,
            'trustToken': data.trust_token or ''
        })

        response = await self._pipeline.send(
            'POST',
            self._config.account_login_url,
            body,
            _auth_request('application/json')
        )

        if response.status != OK:
            self._logger.info(f"Account login answered {response.status}")
            return AuthenticationState.UNAUTHENTICATED

        auth_info = response.json()
        if not isinstance(auth_info, dict):
            raise DecodingError("Account login response is not a JSON object", response.status)

        webservices = auth_info.get('webservices')
        drivews = webservices.get('drivews') if isinstance(webservices, dict) else None
        drive_url = drivews.get('url') if isinstance(drivews, dict) else None
        if isinstance(drive_url, str):
            self.store.set_service(DRIVE_SERVICE, drive_url)

        if auth_info.get('hsaChallengeRequired') is True:
            if auth_info.get('hsaTrustedBrowser') is True:
                state = AuthenticationState.AUTHENTICATED
            else:
                state = AuthenticationState.NEEDS_SECOND_FACTOR
        else:
            state = AuthenticationState.AUTHENTICATED

        self._logger.info(f"Authentication state: {state}")
        return state

    async def authenticate_2fa(self, code: str) -> None:
        """
        Verify a one-time security code.

        Raises:
            AuthenticationFailed: Unless the server answers 204
        """
        body = json.dumps({
            'securityCode': {
                'code': code
            }
        })

        response = await self._pipeline.send(
            'POST',
            self._config.security_code_url,
            body,
            _auth_request('application/json', 'application/json')
        )

        if response.status != NO_CONTENT:
            raise AuthenticationFailed(status=response.status)

        self._logger.info("Security code accepted")

    async def trust_session(self) -> None:
        """
        Mark this device as trusted so later logins skip the second factor.

        Raises:
            TrustFailed: Unless the server answers 204
        """
        response = await self._pipeline.send(
            'GET',
            self._config.trust_url,
            None,
            _auth_request()
        )

        if response.status != NO_CONTENT:
            raise TrustFailed(status=response.status)

        self._logger.info("Session trusted")

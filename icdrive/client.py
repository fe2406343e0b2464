"""
ICloudClient - High-level async client for iCloud Drive.

Example:
    >>> async with ICloudClient("cache.json") as icloud:
    ...     await icloud.start("user@example.com", "secret", code_provider=ask_code)
    ...     drive = await icloud.drive()
    ...     root = await drive.root()
    ...     for node in root:
    ...         print(node)
"""
import asyncio
import inspect
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Tuple, Union

from .core.api import (
    AiohttpTransport,
    APIConfig,
    AsyncAuthService,
    AuthenticationState,
    HttpResponse,
    RequestPipeline,
    Transport,
)
from .core.api.pipeline import Customizer
from .core.drive import DriveService
from .core.exceptions import (
    AuthenticationFailed,
    InvalidCredentials,
    MissingCacheItem,
    NeedsSecondFactor,
)
from .core.logging import get_logger
from .core.session import (
    CredentialStore,
    JSONFileSession,
    MemorySession,
    SessionData,
    SessionStorage,
)

DRIVE_SERVICE = 'drive'

CredentialsProvider = Callable[[], Union[Tuple[str, str], Awaitable[Tuple[str, str]]]]
CodeProvider = Callable[[], Union[str, Awaitable[str]]]


async def _resolve(provider: Callable[[], Any]) -> Any:
    value = provider()
    if inspect.isawaitable(value):
        value = await value
    return value


class ICloudClient:
    """
    High-level async client owning one iCloud session.

    The credential store and transport sit behind a single asyncio lock.
    Every protocol operation holds it from building the request until
    the response headers have been folded back into the session, so
    concurrent callers are served one at a time and never send stale
    credentials.

    Session sources:

    1. Nothing: a fresh in-memory session
        >>> client = ICloudClient()

    2. A snapshot obtained from save()
        >>> client = ICloudClient(snapshot)

    3. A JSON file path or any SessionStorage
        >>> client = ICloudClient("cache.json")
        >>> client = ICloudClient(SQLiteSession("account"))
    """

    def __init__(
        self,
        session: Optional[Union[str, Path, SessionData, SessionStorage]] = None,
        *,
        config: Optional[APIConfig] = None,
        transport: Optional[Transport] = None,
        id_generator: Optional[Callable[[], str]] = None
    ):
        """
        Initialize the client.

        Args:
            session: Snapshot, storage, or JSON file path to resume from
            config: Optional API configuration
            transport: Optional transport (defaults to aiohttp)
            id_generator: Unique id source for a fresh session's OAuth state
        """
        self._config = config or APIConfig.default()
        self._logger = get_logger('icdrive.client')
        self._id_generator = id_generator

        if session is None:
            self._storage: SessionStorage = MemorySession()
        elif isinstance(session, SessionData):
            self._storage = MemorySession(session)
        elif isinstance(session, (str, Path)):
            self._storage = JSONFileSession(session)
        else:
            self._storage = session

        data = self._storage.load()
        if data is None:
            data = SessionData.new(id_generator)
            self._logger.debug("Starting a new session")

        self._owns_transport = transport is None
        self._transport = transport or AiohttpTransport(self._config)

        self._lock = asyncio.Lock()
        self._store = CredentialStore(data)
        self._pipeline = RequestPipeline(self._store, self._transport)
        self._auth = AsyncAuthService(self._pipeline, self._config)

    @property
    def config(self) -> APIConfig:
        return self._config

    @property
    def storage(self) -> SessionStorage:
        return self._storage

    # =========================================================================
    # Context manager
    # =========================================================================

    async def __aenter__(self) -> 'ICloudClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        """Release the transport and storage."""
        async with self._lock:
            if self._owns_transport:
                await self._transport.close()
            self._storage.close()

    # =========================================================================
    # Protocol operations
    # =========================================================================

    def _persist(self) -> None:
        self._storage.save(self._store.snapshot())

    async def _locked(self, operation: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run one protocol operation under the session lock and persist.

        When the operation fails, a storage failure is only logged so the
        caller still sees the protocol error.
        """
        async with self._lock:
            try:
                result = await operation()
            except BaseException:
                try:
                    self._persist()
                except Exception as e:
                    self._logger.error(f"Failed to save session: {e}")
                raise
            self._persist()
            return result

    async def send(
        self,
        method: str,
        url: str,
        body: Optional[Union[bytes, str]] = None,
        customize: Optional[Customizer] = None
    ) -> HttpResponse:
        """Send a request on this session (see RequestPipeline.send)."""
        return await self._locked(
            lambda: self._pipeline.send(method, url, body, customize)
        )

    async def login(self, username: str, password: str) -> None:
        """
        Sign in with an Apple ID.

        Raises:
            InvalidCredentials: If the sign-in is rejected
        """
        await self._locked(lambda: self._auth.login(username, password))

    async def authenticate(self) -> AuthenticationState:
        """
        Authenticate using the stored session.

        Raises:
            MissingCacheItem: If no login has populated the session yet
        """
        return await self._locked(lambda: self._auth.authenticate())

    async def authenticate_2fa(self, code: str) -> None:
        """
        Verify a second-factor code.

        Raises:
            AuthenticationFailed: If the code is rejected
        """
        await self._locked(lambda: self._auth.authenticate_2fa(code))

    async def trust_session(self) -> None:
        """
        Trust this device for future logins.

        Raises:
            TrustFailed: If the server does not acknowledge the request
        """
        await self._locked(lambda: self._auth.trust_session())

    async def start(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        *,
        credentials: Optional[CredentialsProvider] = None,
        code_provider: Optional[CodeProvider] = None
    ) -> AuthenticationState:
        """
        Resume the stored session or log in afresh.

        Tries the stored session first. If it is missing or stale, logs in
        with the given username/password (or asks the credentials provider)
        and authenticates again. If a second factor is required, asks the
        code provider, verifies the code, trusts the device and
        authenticates once more.

        Args:
            username: Apple ID
            password: Apple ID password
            credentials: Called for (username, password) when none were given
            code_provider: Called for the one-time 2FA code

        Returns:
            Final authentication state

        Raises:
            InvalidCredentials: If no credentials are available or they
                are rejected
            NeedsSecondFactor: If 2FA is required and no code provider was given
        """
        try:
            state = await self.authenticate()
        except (MissingCacheItem, AuthenticationFailed) as e:
            self._logger.info(f"Stored session unusable: {e}")
            state = AuthenticationState.UNAUTHENTICATED

        if state is AuthenticationState.UNAUTHENTICATED:
            if (username is None or password is None) and credentials is not None:
                username, password = await _resolve(credentials)
            if not username or not password:
                raise InvalidCredentials("No credentials supplied.")

            await self.login(username, password)
            state = await self.authenticate()

        if state is AuthenticationState.NEEDS_SECOND_FACTOR:
            if code_provider is None:
                raise NeedsSecondFactor()

            code = await _resolve(code_provider)
            await self.authenticate_2fa(code)
            await self.trust_session()
            state = await self.authenticate()

        self._logger.info(f"Session state: {state}")
        return state

    # =========================================================================
    # Services and session data
    # =========================================================================

    async def drive(self) -> Optional[DriveService]:
        """
        Create an interface to iCloud Drive using the current session.

        Returns:
            DriveService, or None until authentication discovered the
            drive web service URL
        """
        async with self._lock:
            info = self._store.get_service_info(DRIVE_SERVICE)
        if info is None:
            return None
        return DriveService(self, info.url)

    async def save(self) -> SessionData:
        """
        Snapshot the session for restoration later.

        Also writes it to the configured storage.

        Returns:
            An independent copy of the session data
        """
        async with self._lock:
            self._persist()
            return self._store.snapshot()

    async def log_out(self) -> None:
        """Forget the session: delete it from storage and start a new one."""
        async with self._lock:
            self._storage.delete()
            self._store = CredentialStore(SessionData.new(self._id_generator))
            self._pipeline = RequestPipeline(self._store, self._transport)
            self._auth = AsyncAuthService(self._pipeline, self._config)

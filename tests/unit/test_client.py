"""Tests for ICloudClient."""
import asyncio

import pytest

from icdrive import (
    AuthenticationState,
    ICloudClient,
    InvalidCredentials,
    MemorySession,
    NeedsSecondFactor,
    SessionData,
)
from icdrive.core.drive import DriveService

SIGNIN_HEADERS = [
    ('X-Apple-ID-Account-Country', 'USA'),
    ('X-Apple-Session-Token', 'token-1'),
    ('scnt', 'scnt-1'),
]

ACCOUNT_LOGIN = {
    'webservices': {'drivews': {'url': 'https://p01-drivews.icloud.com:443'}},
    'hsaChallengeRequired': False,
}


@pytest.fixture
def fresh_client(transport):
    return ICloudClient(transport=transport, id_generator=lambda: 'fresh')


class TestSessionHandling:
    """Session snapshot, storage and services."""

    @pytest.mark.asyncio
    async def test_fresh_session(self, fresh_client):
        saved = await fresh_client.save()

        assert saved == SessionData(oauth_state='auth-fresh')

    @pytest.mark.asyncio
    async def test_resume_from_snapshot(self, client, logged_in_data):
        assert await client.save() == logged_in_data

    @pytest.mark.asyncio
    async def test_save_returns_independent_copy(self, client):
        saved = await client.save()
        saved.cookies.clear()

        assert (await client.save()).cookies == {'dslang=US-EN', 'site=USA'}

    @pytest.mark.asyncio
    async def test_drive_unavailable_before_authentication(self, client):
        assert await client.drive() is None

    @pytest.mark.asyncio
    async def test_drive_after_authentication(self, client, transport):
        transport.queue(200, body=ACCOUNT_LOGIN)

        assert await client.authenticate() is AuthenticationState.AUTHENTICATED

        drive = await client.drive()
        assert isinstance(drive, DriveService)
        assert drive.url == 'https://p01-drivews.icloud.com:443'

    @pytest.mark.asyncio
    async def test_every_step_is_persisted(self, transport):
        storage = MemorySession()
        client = ICloudClient(storage, transport=transport)
        transport.queue(403, [('scnt', 'scnt-9')])

        with pytest.raises(InvalidCredentials):
            await client.login('user', 'wrong')

        assert storage.load().scnt == 'scnt-9'

    @pytest.mark.asyncio
    async def test_json_file_session(self, tmp_path, transport):
        path = tmp_path / 'cache.json'
        transport.queue(200, SIGNIN_HEADERS)

        async with ICloudClient(path, transport=transport) as client:
            await client.login('user', 'secret')
            state = (await client.save()).oauth_state

        resumed = ICloudClient(path, transport=transport)
        saved = await resumed.save()
        assert saved.session_token == 'token-1'
        assert saved.oauth_state == state

    @pytest.mark.asyncio
    async def test_close_keeps_caller_transport_open(self, client, transport):
        await client.close()

        assert transport.closed is False

    @pytest.mark.asyncio
    async def test_log_out(self, transport):
        storage = MemorySession(SessionData(oauth_state='auth-old', session_token='t'))
        client = ICloudClient(storage, transport=transport, id_generator=lambda: 'new')

        await client.log_out()

        assert storage.exists() is False
        assert await client.save() == SessionData(oauth_state='auth-new')


class BrokenStorage(MemorySession):
    """Storage whose writes always fail."""

    def save(self, data):
        raise OSError('disk full')


class TestStorageFailures:
    """A failing storage never hides the protocol outcome."""

    @pytest.mark.asyncio
    async def test_protocol_error_wins_over_save_error(self, transport):
        client = ICloudClient(BrokenStorage(), transport=transport)
        transport.queue(403)

        with pytest.raises(InvalidCredentials):
            await client.login('user', 'wrong')

    @pytest.mark.asyncio
    async def test_save_error_after_success_is_raised(self, transport):
        client = ICloudClient(BrokenStorage(), transport=transport)
        transport.queue(200, SIGNIN_HEADERS)

        with pytest.raises(OSError):
            await client.login('user', 'secret')

        transport.queue(200)
        with pytest.raises(OSError):
            await client.send('GET', 'https://example.invalid/')

        assert transport.requests[1].headers['scnt'] == 'scnt-1'


class TestStart:
    """The resume / login / second-factor flow."""

    @pytest.mark.asyncio
    async def test_resumes_valid_session(self, client, transport):
        transport.queue(200, body=ACCOUNT_LOGIN)

        state = await client.start()

        assert state is AuthenticationState.AUTHENTICATED
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_logs_in_when_session_is_empty(self, fresh_client, transport):
        transport.queue(200, SIGNIN_HEADERS)
        transport.queue(200, body=ACCOUNT_LOGIN)

        state = await fresh_client.start('user', 'secret')

        assert state is AuthenticationState.AUTHENTICATED
        assert [r.url.rsplit('/', 1)[-1] for r in transport.requests] == [
            'signin?isRememberMeEnable=true',
            'accountLogin',
        ]
        assert await fresh_client.drive() is not None

    @pytest.mark.asyncio
    async def test_logs_in_when_session_is_stale(self, client, transport):
        transport.queue(421)
        transport.queue(200, SIGNIN_HEADERS)
        transport.queue(200, body=ACCOUNT_LOGIN)

        state = await client.start('user', 'secret')

        assert state is AuthenticationState.AUTHENTICATED
        assert len(transport.requests) == 3

    @pytest.mark.asyncio
    async def test_logs_in_after_unauthorized(self, client, transport):
        transport.queue(401)
        transport.queue(200, SIGNIN_HEADERS)
        transport.queue(200, body=ACCOUNT_LOGIN)

        assert await client.start('user', 'secret') is AuthenticationState.AUTHENTICATED

    @pytest.mark.asyncio
    async def test_credentials_provider(self, fresh_client, transport):
        transport.queue(200, SIGNIN_HEADERS)
        transport.queue(200, body=ACCOUNT_LOGIN)
        asked = []

        def credentials():
            asked.append(True)
            return 'user', 'secret'

        await fresh_client.start(credentials=credentials)

        assert asked == [True]

    @pytest.mark.asyncio
    async def test_no_credentials(self, fresh_client, transport):
        with pytest.raises(InvalidCredentials):
            await fresh_client.start()

        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_second_factor(self, client, transport):
        transport.queue(200, body={'hsaChallengeRequired': True, 'hsaTrustedBrowser': False})
        transport.queue(204)
        transport.queue(204, [('X-Apple-TwoSV-Trust-Token', 'trust-1')])
        transport.queue(200, body={'hsaChallengeRequired': True, 'hsaTrustedBrowser': True})

        async def code_provider():
            return '123456'

        state = await client.start(code_provider=code_provider)

        assert state is AuthenticationState.AUTHENTICATED
        assert transport.requests[1].url.endswith('/verify/trusteddevice/securitycode')
        assert transport.requests[2].url.endswith('/2sv/trust')
        assert (await client.save()).trust_token == 'trust-1'

    @pytest.mark.asyncio
    async def test_second_factor_without_provider(self, client, transport):
        transport.queue(200, body={'hsaChallengeRequired': True})

        with pytest.raises(NeedsSecondFactor):
            await client.start()


class TestConcurrency:
    """Operations on one session are serialized."""

    @pytest.mark.asyncio
    async def test_requests_are_serialized(self, client, transport):
        gate = asyncio.Event()
        transport.queue(200, [('scnt', 'scnt-2')], gate=gate)
        transport.queue(200)

        first = asyncio.create_task(client.send('GET', 'https://example.invalid/1'))
        await asyncio.sleep(0)
        second = asyncio.create_task(client.send('GET', 'https://example.invalid/2'))
        for _ in range(5):
            await asyncio.sleep(0)

        assert len(transport.requests) == 1

        gate.set()
        await asyncio.gather(first, second)

        assert transport.requests[0].headers['scnt'] == 'scnt-1'
        assert transport.requests[1].headers['scnt'] == 'scnt-2'

    @pytest.mark.asyncio
    async def test_cancelled_call_leaves_session_untouched(self, client, transport, logged_in_data):
        gate = asyncio.Event()
        transport.queue(200, [('scnt', 'never')], gate=gate)
        transport.queue(200)

        task = asyncio.create_task(client.send('GET', 'https://example.invalid/'))
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert await client.save() == logged_in_data

        await client.send('GET', 'https://example.invalid/again')
        assert transport.requests[-1].headers['scnt'] == 'scnt-1'

    @pytest.mark.asyncio
    async def test_timeout_by_caller(self, client, transport):
        transport.queue(200, gate=asyncio.Event())

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(client.send('GET', 'https://example.invalid/'), 0.01)

"""Pytest fixtures for icdrive tests."""
import json

import pytest

from icdrive import (
    APIConfig,
    AsyncAuthService,
    CredentialStore,
    HttpResponse,
    ICloudClient,
    RequestPipeline,
    SessionData,
)


class FakeTransport:
    """
    In-memory transport.

    Responses are served in the order they were queued; a queued
    exception is raised instead. A gate (asyncio.Event) holds the
    response back until it is set.
    """

    def __init__(self):
        self.requests = []
        self.closed = False
        self._responses = []

    def queue(self, status=200, headers=(), body=b'', gate=None):
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode('utf-8')
        elif isinstance(body, str):
            body = body.encode('utf-8')
        self._responses.append((HttpResponse(status, tuple(headers), body), gate))
        return self

    def fail(self, error, gate=None):
        self._responses.append((error, gate))
        return self

    async def send(self, request):
        self.requests.append(request)
        response, gate = self._responses.pop(0)
        if gate is not None:
            await gate.wait()
        if isinstance(response, BaseException):
            raise response
        return response

    async def close(self):
        self.closed = True


@pytest.fixture
def transport():
    """Fake transport with an empty response queue."""
    return FakeTransport()


@pytest.fixture
def config():
    return APIConfig.default()


@pytest.fixture
def session_data():
    """Fresh session with a fixed OAuth state."""
    return SessionData.new(lambda: 'test-uuid')


@pytest.fixture
def logged_in_data(session_data):
    """Session as it looks after a successful sign-in."""
    session_data.account_country = 'USA'
    session_data.session_token = 'token-1'
    session_data.session_id = 'sid-1'
    session_data.scnt = 'scnt-1'
    session_data.cookies = {'dslang=US-EN', 'site=USA'}
    return session_data


@pytest.fixture
def store(session_data):
    return CredentialStore(session_data)


@pytest.fixture
def pipeline(store, transport):
    return RequestPipeline(store, transport)


@pytest.fixture
def auth(pipeline, config):
    return AsyncAuthService(pipeline, config)


@pytest.fixture
def client(logged_in_data, transport):
    """Client over an in-memory session that has already signed in."""
    return ICloudClient(logged_in_data, transport=transport)


@pytest.fixture
def drive_folder_payload():
    """Node payload as returned by retrieveItemDetailsInFolders."""
    return {
        'type': 'FOLDER',
        'drivewsid': 'FOLDER::com.apple.CloudDocs::root',
        'name': 'root',
        'dateCreated': '2020-01-01T00:00:00Z',
        'items': [
            {
                'type': 'FOLDER',
                'drivewsid': 'FOLDER::com.apple.CloudDocs::DOCS',
                'name': 'Documents',
                'dateCreated': '2020-02-01T10:00:00Z',
            },
            {
                'type': 'FILE',
                'drivewsid': 'FILE::com.apple.CloudDocs::ID1',
                'name': 'notes',
                'extension': 'txt',
                'size': 10,
                'dateCreated': '2020-03-01T08:30:00Z',
                'dateChanged': '2020-03-02T08:30:00Z',
                'dateModified': '2020-03-03T08:30:00+02:00',
                'lastOpenTime': '2020-03-04T08:30:00Z',
            },
        ],
    }

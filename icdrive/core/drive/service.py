"""Drive web service: fetches nodes through the client's session."""
import json
from typing import TYPE_CHECKING

from .codec import FILE_TYPE, decode_node
from .models import DriveNode, Folder
from ..exceptions import AuthenticationFailed, DecodingError, InvalidNodeType
from ..logging import get_logger

if TYPE_CHECKING:
    from ...client import ICloudClient

ROOT_ID = 'FOLDER::com.apple.CloudDocs::root'

OK = 200


def _json_request(builder) -> None:
    builder.header('Content-Type', 'application/json')
    builder.header('Accept', 'application/json')


class DriveService:
    """
    Read access to iCloud Drive.

    Every fetch returns a freshly decoded, caller-owned node tree; nothing
    is cached between calls.

    Example:
        >>> drive = await client.drive()
        >>> root = await drive.root()
        >>> for node in root:
        ...     print(node)
    """

    def __init__(self, client: 'ICloudClient', url: str):
        """
        Args:
            client: Client whose session the requests run on
            url: Base URL of the drivews web service
        """
        self._client = client
        self._url = url.rstrip('/')
        self._logger = get_logger('icdrive.drive')

    @property
    def url(self) -> str:
        return self._url

    async def root(self) -> Folder:
        """
        Fetch the drive root folder.

        Raises:
            InvalidNodeType: If the root does not decode as a folder
        """
        node = await self.get_node(ROOT_ID)
        if not isinstance(node, Folder):
            raise InvalidNodeType(FILE_TYPE, 'Drive root is not a folder')
        return node

    async def get_node(self, node_id: str) -> DriveNode:
        """
        Fetch one node and its decoded subtree.

        Args:
            node_id: Full drivewsid, e.g. "FOLDER::com.apple.CloudDocs::root"

        Raises:
            AuthenticationFailed: On any non-200 answer (session expired)
            DecodingError: If the body is not a one-element JSON array
            InvalidNodeType: If the node kind is not supported
        """
        body = json.dumps([{
            'drivewsid': node_id,
            'partialData': False
        }])

        response = await self._client.send(
            'POST',
            f"{self._url}/retrieveItemDetailsInFolders",
            body,
            _json_request
        )

        if response.status != OK:
            self._logger.debug(f"Node fetch for {node_id} answered {response.status}: {response.body[:500]!r}")
            raise AuthenticationFailed(status=response.status)

        payload = response.json()
        if not isinstance(payload, list) or len(payload) != 1:
            raise DecodingError(
                f"Expected a single-element array for {node_id}", response.status
            )

        return decode_node(payload[0])

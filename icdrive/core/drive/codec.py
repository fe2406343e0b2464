"""
Drive node decoding.

Turns the JSON objects returned by the drive web service into Folder
and File nodes, recursing into folder items.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from .models import DriveNode, File, Folder
from ..exceptions import DecodingError, IcloudError, InvalidNodeType
from ..logging import get_logger

logger = get_logger(__name__)

FOLDER_TYPE = 'FOLDER'
FILE_TYPE = 'FILE'


def parse_timestamp(text: Any) -> datetime:
    """
    Parse an RFC 3339 timestamp into an offset-aware datetime.

    Raises:
        DecodingError: If the value is not a string, is malformed, or has
            no UTC offset
    """
    if not isinstance(text, str):
        raise DecodingError(f"Timestamp must be a string, got {type(text).__name__}")

    value = text.strip()
    # fromisoformat only accepts 'Z' from Python 3.11
    if value[-1:] in ('Z', 'z'):
        value = value[:-1] + '+00:00'

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise DecodingError(f"Malformed timestamp {text!r}: {e}") from e

    if parsed.tzinfo is None:
        raise DecodingError(f"Timestamp {text!r} has no UTC offset")

    return parsed


def _require_str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise DecodingError(f"Node field {key!r} missing or not a string")
    return value


def _require_int(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodingError(f"Node field {key!r} missing or not an integer")
    return value


def _require_date(data: Dict[str, Any], key: str) -> datetime:
    if key not in data:
        raise DecodingError(f"Node field {key!r} missing")
    return parse_timestamp(data[key])


def _optional_date(data: Dict[str, Any], key: str) -> Optional[datetime]:
    try:
        return parse_timestamp(data[key])
    except (KeyError, DecodingError):
        return None


def _decode_items(items: Any) -> List[DriveNode]:
    if not isinstance(items, list):
        return []

    nodes = []
    for item in items:
        try:
            nodes.append(decode_node(item))
        except IcloudError as e:
            # One bad child must not hide the rest of the listing
            logger.debug(f"Skipping undecodable folder item: {e}")
    return nodes


def _decode_folder(data: Dict[str, Any]) -> Folder:
    return Folder(
        id=_require_str(data, 'drivewsid'),
        name=_require_str(data, 'name'),
        date_created=_require_date(data, 'dateCreated'),
        items=tuple(_decode_items(data.get('items'))),
    )


def _decode_file(data: Dict[str, Any]) -> File:
    name = _require_str(data, 'name')
    extension = data.get('extension')
    if isinstance(extension, str) and extension:
        name = f"{name}.{extension}"

    return File(
        id=_require_str(data, 'drivewsid'),
        name=name,
        size=_require_int(data, 'size'),
        date_created=_require_date(data, 'dateCreated'),
        date_changed=_require_date(data, 'dateChanged'),
        date_modified=_require_date(data, 'dateModified'),
        last_opened=_optional_date(data, 'lastOpenTime'),
    )


def decode_node(value: Any) -> DriveNode:
    """
    Decode a drive node from its JSON value.

    Folder items are decoded recursively; items that fail to decode are
    dropped from the listing.

    Args:
        value: Parsed JSON object for one node

    Returns:
        Folder or File

    Raises:
        InvalidNodeType: If "type" is missing or not FOLDER/FILE
        DecodingError: If a required field is missing, mistyped, or a
            date is malformed
    """
    node_type = value.get('type') if isinstance(value, dict) else None

    if node_type == FOLDER_TYPE:
        return _decode_folder(value)
    if node_type == FILE_TYPE:
        return _decode_file(value)

    raise InvalidNodeType(node_type)

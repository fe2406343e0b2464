"""iCloud Drive nodes and service."""
from .models import DriveNode, File, Folder
from .codec import decode_node, parse_timestamp
from .service import DriveService, ROOT_ID

__all__ = [
    'DriveNode',
    'File',
    'Folder',
    'decode_node',
    'parse_timestamp',
    'DriveService',
    'ROOT_ID',
]

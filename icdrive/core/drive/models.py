"""
Drive node models.

Nodes are detached, immutable snapshots of server state at fetch time:
no parent links and no reference to the service that produced them.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Folder:
    """
    A drive folder and its already decoded children.

    Iterating a folder walks its items in server order; iteration is
    restartable and never touches the network:

        >>> for node in folder:
        ...     print(node.name)
    """
    id: str
    name: str
    date_created: datetime
    items: Tuple['DriveNode', ...] = field(default=(), repr=False)

    @property
    def is_folder(self) -> bool:
        return True

    @property
    def is_file(self) -> bool:
        return False

    def __iter__(self) -> Iterator['DriveNode']:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def files(self) -> List['File']:
        return [node for node in self.items if isinstance(node, File)]

    @property
    def folders(self) -> List['Folder']:
        return [node for node in self.items if isinstance(node, Folder)]

    def find(self, name: str) -> Optional['DriveNode']:
        """First direct child with the given name."""
        for node in self.items:
            if node.name == name:
                return node
        return None

    def __str__(self) -> str:
        return (
            f"Folder(id={self.id},name={self.name},"
            f"dateCreated={self.date_created.isoformat()}, items={len(self.items)})"
        )


@dataclass(frozen=True)
class File:
    """A drive file."""
    id: str
    name: str
    size: int
    date_created: datetime
    date_changed: datetime
    date_modified: datetime
    last_opened: Optional[datetime] = None

    @property
    def is_folder(self) -> bool:
        return False

    @property
    def is_file(self) -> bool:
        return True

    def _format_size(self) -> str:
        size = float(self.size)
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if size < 1024:
                return f"{size:.1f} {unit}"
            size /= 1024
        return f"{size:.1f} PB"

    def __str__(self) -> str:
        return (
            f"File(id={self.id},name={self.name},size={self._format_size()},"
            f"dateModified={self.date_modified.isoformat()})"
        )


DriveNode = Union[Folder, File]

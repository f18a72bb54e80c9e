from .filesystem import FilesystemStore
from .interface import SnapshotStore

__all__ = ["FilesystemStore", "SnapshotStore"]

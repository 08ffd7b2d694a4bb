"""Storage network backends implementing ``rs_compactor.service.StorageService``."""

from .http import HttpStorageClient
from .snapshot import SnapshotStorage

__all__ = ["HttpStorageClient", "SnapshotStorage"]

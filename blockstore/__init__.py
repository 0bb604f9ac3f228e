"""
Cloud block storage adapters for snapshotting and restoring volumes.
"""

from .adapter import BlockStorageAdapter, VolumeInfo
from .aws import AWSBlockStorageAdapter
from .errors import (
    BlockStorageError,
    Internal,
    InvalidArgument,
    NotFound,
    PollTimeout,
    SnapshotNotVisible,
    Unavailable,
)
from .factory import (
    get_block_storage_adapter,
    new_aws_block_storage_adapter,
    new_gcp_block_storage_adapter,
)
from .gcp import GCPBlockStorageAdapter
from .polling import PollPolicy
from .snapshot_service import SnapshotService


__all__ = [
    "BlockStorageAdapter",
    "VolumeInfo",
    "AWSBlockStorageAdapter",
    "GCPBlockStorageAdapter",
    "get_block_storage_adapter",
    "new_aws_block_storage_adapter",
    "new_gcp_block_storage_adapter",
    "PollPolicy",
    "SnapshotService",
    "BlockStorageError",
    "InvalidArgument",
    "NotFound",
    "Unavailable",
    "Internal",
    "PollTimeout",
    "SnapshotNotVisible",
]

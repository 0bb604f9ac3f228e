"""
Abstract base class for block storage adapters.

Defines the snapshot and volume lifecycle that every cloud provider
backend must implement so callers can snapshot and restore volumes
without knowing which cloud they are talking to.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, NamedTuple, Optional


class VolumeInfo(NamedTuple):
    """Type and provisioned IOPS of a volume. iops is None when not applicable."""
    volume_type: str
    iops: Optional[int] = None


class BlockStorageAdapter(ABC):
    """
    Abstract base class for block storage adapters.

    An adapter is bound to one account/project and one zone at construction
    time and holds no mutable state afterwards, so a single instance may be
    shared between callers as long as its SDK client is thread-safe.

    Every id returned by an adapter can be passed back to the same adapter
    without further resolution.
    """

    @abstractmethod
    def create_volume_from_snapshot(self, snapshot_id: str, volume_type: str,
                                    iops: Optional[int] = None) -> str:
        """
        Create a new volume from an existing snapshot.

        Args:
            snapshot_id: Snapshot to restore from
            volume_type: Provider volume type, passed through as-is
            iops: Provisioned IOPS; only honored for volume types that
                support it, ignored otherwise

        Returns:
            The new volume's id

        Raises:
            NotFound: If the snapshot does not exist
            InvalidArgument: If the volume type is not supported
        """
        pass

    @abstractmethod
    def get_volume_info(self, volume_id: str) -> VolumeInfo:
        """
        Look up a volume's type and IOPS.

        Raises:
            NotFound: If the id does not resolve to a volume
            Internal: If the provider returns more than one volume for the id
        """
        pass

    @abstractmethod
    def is_volume_ready(self, volume_id: str) -> bool:
        """
        Check whether a volume is available for attachment.

        Transient states (creating, restoring) return False rather than
        raising. Lookup failures raise as in get_volume_info.
        """
        pass

    @abstractmethod
    def list_snapshots(self, tag_filters: Dict[str, str]) -> List[str]:
        """
        List ids of snapshots whose tags match every key/value pair given.

        An empty filter returns every snapshot visible to the adapter.
        """
        pass

    @abstractmethod
    def create_snapshot(self, volume_id: str, tags: Dict[str, str]) -> str:
        """
        Snapshot a volume and attach tags to the snapshot.

        Retrying is the caller's decision; adapters never deduplicate. If
        tagging fails after the snapshot was created, the error is raised
        with ``resource_id`` set to the snapshot id and the snapshot is left
        in place.

        Returns:
            The new snapshot's id
        """
        pass

    @abstractmethod
    def delete_snapshot(self, snapshot_id: str) -> None:
        """
        Delete a snapshot.

        Raises:
            NotFound: If the snapshot does not exist
        """
        pass

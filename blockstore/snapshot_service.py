"""Snapshot and restore helpers layered on a block storage adapter."""
import logging
from typing import Dict, List, Optional

from .adapter import BlockStorageAdapter, VolumeInfo
from .config import VOLUME_READY_POLL
from .errors import Unavailable
from .polling import PollPolicy

logger = logging.getLogger(__name__)


class SnapshotService:
    """Wraps an adapter and waits for restored volumes to become usable"""

    def __init__(self, adapter: BlockStorageAdapter, volume_ready_poll: Optional[PollPolicy] = None):
        self.adapter = adapter
        self.volume_ready_poll = volume_ready_poll or PollPolicy.from_config(VOLUME_READY_POLL)

    def create_volume_from_snapshot(self, snapshot_id: str, volume_type: str,
                                    iops: Optional[int] = None) -> str:
        """Restore a snapshot and block until the new volume is ready.

        Raises PollTimeout, carrying the volume id, if the volume is still
        not ready when the poll gives up. The volume is not deleted. Only
        Unavailable lookups are retried; NotFound, InvalidArgument and
        Internal propagate from the first lookup that raises them.
        """
        volume_id = self.adapter.create_volume_from_snapshot(snapshot_id, volume_type, iops)

        self.volume_ready_poll.wait_for(
            lambda: self.adapter.is_volume_ready(volume_id),
            description=f'volume {volume_id} to become ready',
            resource_id=volume_id,
            retry_on=(Unavailable,),
        )
        logger.info(f"Volume {volume_id} restored from {snapshot_id} is ready")

        return volume_id

    def create_snapshot(self, volume_id: str, tags: Dict[str, str]) -> str:
        return self.adapter.create_snapshot(volume_id, tags)

    def delete_snapshot(self, snapshot_id: str) -> None:
        self.adapter.delete_snapshot(snapshot_id)

    def get_volume_info(self, volume_id: str) -> VolumeInfo:
        return self.adapter.get_volume_info(volume_id)

    def find_snapshots(self, tag_filters: Dict[str, str]) -> List[str]:
        return self.adapter.list_snapshots(tag_filters)

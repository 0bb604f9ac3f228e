"""GCP Persistent Disk implementation of the block storage adapter."""
import logging
import uuid
from typing import Callable, Dict, FrozenSet, List, Optional

from google.api_core.exceptions import GoogleAPIError, from_http_status
from google.cloud import compute_v1

from .adapter import BlockStorageAdapter, VolumeInfo
from .config import LABEL_POLL
from .errors import (
    BlockStorageError, PollTimeout, SnapshotNotVisible, translate_errors, translate_gcp_error,
)
from .polling import PollPolicy

logger = logging.getLogger(__name__)

# Snapshot names must adhere to RFC1035 and be 1-63 characters long
MAX_SNAPSHOT_NAME_LENGTH = 63

RESTORED_DISK_PREFIX = 'restore-'

# Disk statuses treated as ready for attachment. RESTORING is left out
# until it is known to be safe to attach a disk in that state.
DEFAULT_READY_STATUSES: FrozenSet[str] = frozenset(['READY'])


def _new_uuid() -> str:
    return str(uuid.uuid4())


def snapshot_name(volume_id: str, unique_id: str) -> str:
    """Build a snapshot name of at most 63 characters from a disk name.

    The disk name is truncated, never the unique suffix.
    """
    suffix = f'-{unique_id}'
    max_prefix = MAX_SNAPSHOT_NAME_LENGTH - len(suffix)

    if len(volume_id) <= max_prefix:
        return volume_id + suffix
    return volume_id[:max_prefix] + suffix


def label_filter(tag_filters: Dict[str, str]) -> str:
    """Translate tag filters into a Compute Engine list filter expression.

    A single filter is rendered as ``key eq value``. Multiple filters are
    each parenthesized and space separated, which the API treats as AND.
    """
    use_parentheses = len(tag_filters) > 1

    sub_filters = []
    for key, value in tag_filters.items():
        fs = f'{key} eq {value}'
        if use_parentheses:
            fs = f'({fs})'
        sub_filters.append(fs)

    return ' '.join(sub_filters)


class GCPBlockStorageAdapter(BlockStorageAdapter):
    """Persistent disks and snapshots in a single project and zone"""

    def __init__(self, disks: compute_v1.DisksClient, snapshots: compute_v1.SnapshotsClient,
                 project: str, zone: str,
                 label_poll: Optional[PollPolicy] = None,
                 ready_statuses: FrozenSet[str] = DEFAULT_READY_STATUSES,
                 name_generator: Callable[[], str] = _new_uuid):
        """
        Args:
            disks: Compute Engine disks client
            snapshots: Compute Engine snapshots client
            project: GCP project id
            zone: Zone disks are created in
            label_poll: How long to wait for a new snapshot to become labelable
            ready_statuses: Disk statuses that count as ready for attachment
            name_generator: Returns a unique string used in generated resource names
        """
        self.disks = disks
        self.snapshots = snapshots
        self.project = project
        self.zone = zone
        self.label_poll = label_poll or PollPolicy.from_config(LABEL_POLL)
        self.ready_statuses = frozenset(ready_statuses)
        self.name_generator = name_generator

    @translate_errors('gcp')
    def create_volume_from_snapshot(self, snapshot_id: str, volume_type: str,
                                    iops: Optional[int] = None) -> str:
        res = self.snapshots.get(project=self.project, snapshot=snapshot_id)

        disk = compute_v1.Disk(
            name=RESTORED_DISK_PREFIX + self.name_generator(),
            source_snapshot=res.self_link,
            type_=volume_type,
        )

        self.disks.insert(project=self.project, zone=self.zone, disk_resource=disk)
        logger.info(f"Created disk {disk.name} from snapshot {snapshot_id}")

        return disk.name

    @translate_errors('gcp')
    def get_volume_info(self, volume_id: str) -> VolumeInfo:
        res = self.disks.get(project=self.project, zone=self.zone, disk=volume_id)

        # Persistent disks expose no IOPS setting through this adapter
        return VolumeInfo(res.type_, None)

    @translate_errors('gcp')
    def is_volume_ready(self, volume_id: str) -> bool:
        disk = self.disks.get(project=self.project, zone=self.zone, disk=volume_id)
        return disk.status in self.ready_statuses

    @translate_errors('gcp')
    def list_snapshots(self, tag_filters: Dict[str, str]) -> List[str]:
        request = compute_v1.ListSnapshotsRequest(
            project=self.project,
            filter=label_filter(tag_filters),
        )

        return [snap.name for snap in self.snapshots.list(request=request)]

    @translate_errors('gcp')
    def create_snapshot(self, volume_id: str, tags: Dict[str, str]) -> str:
        name = snapshot_name(volume_id, self.name_generator())

        operation = self.disks.create_snapshot(
            project=self.project,
            zone=self.zone,
            disk=volume_id,
            snapshot_resource=compute_v1.Snapshot(name=name),
        )
        logger.info(f"Created snapshot {name} of disk {volume_id}")

        # The snapshot is not immediately available after creation for
        # putting labels on it
        try:
            snap = self.label_poll.wait_for(
                lambda: self.snapshots.get(project=self.project, snapshot=name),
                description=f'snapshot {name} to become fetchable',
                resource_id=name,
            )
        except PollTimeout as e:
            failure = self._creation_failure(operation, name)
            if failure is not None:
                logger.error(f"Creating snapshot {name} of disk {volume_id} failed: {failure.message}")
                raise failure from e
            logger.error(f"Snapshot {name} never became fetchable; it has no labels")
            raise SnapshotNotVisible(name, self.label_poll.timeout) from e

        labels = compute_v1.GlobalSetLabelsRequest(
            labels=tags,
            label_fingerprint=snap.label_fingerprint,
        )

        # The snapshot is not rolled back if labeling fails
        try:
            self.snapshots.set_labels(
                project=self.project,
                resource=name,
                global_set_labels_request_resource=labels,
            )
        except GoogleAPIError as e:
            error = translate_gcp_error(e)
            error.resource_id = name
            logger.error(f"Snapshot {name} was created but labeling failed: {error.message}")
            raise error from e

        return name

    def _creation_failure(self, operation, name: str) -> Optional[BlockStorageError]:
        """Return the error a finished snapshot operation reported, if any.

        A snapshot that never shows up is usually one whose creation failed
        asynchronously (quota, bad source disk). The operation is refreshed
        once; if the refresh itself fails the caller falls back to
        SnapshotNotVisible.
        """
        try:
            operation.done()
        except GoogleAPIError as e:
            logger.warning(f"Could not refresh create operation for snapshot {name}: {str(e)}")
            return None

        if not operation.error_code:
            return None

        error = translate_gcp_error(from_http_status(int(operation.error_code), operation.error_message or ''))
        error.resource_id = name
        return error

    @translate_errors('gcp')
    def delete_snapshot(self, snapshot_id: str) -> None:
        self.snapshots.delete(project=self.project, snapshot=snapshot_id)
        logger.info(f"Deleted snapshot {snapshot_id}")

"""AWS EBS implementation of the block storage adapter."""
import logging
from typing import Dict, FrozenSet, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .adapter import BlockStorageAdapter, VolumeInfo
from .errors import Internal, NotFound, translate_aws_error, translate_errors

logger = logging.getLogger(__name__)

# EBS volume types for which IOPS is captured when snapshotting and
# provided when restoring
DEFAULT_IOPS_VOLUME_TYPES: FrozenSet[str] = frozenset(['io1', 'io2'])

VOLUME_STATE_AVAILABLE = 'available'


class AWSBlockStorageAdapter(BlockStorageAdapter):
    """EBS volumes and snapshots in a single availability zone"""

    def __init__(self, ec2, availability_zone: str,
                 iops_volume_types: FrozenSet[str] = DEFAULT_IOPS_VOLUME_TYPES):
        """
        Args:
            ec2: boto3 EC2 client bound to the zone's region
            availability_zone: Zone new volumes are created in
            iops_volume_types: Volume types that accept provisioned IOPS
        """
        self.ec2 = ec2
        self.availability_zone = availability_zone
        self.iops_volume_types = frozenset(iops_volume_types)

    def _describe_volume(self, volume_id: str) -> Dict:
        """Describe a single volume, failing unless exactly one comes back."""
        res = self.ec2.describe_volumes(VolumeIds=[volume_id])
        volumes = res.get('Volumes', [])

        if not volumes:
            raise NotFound(f"Expected one volume from DescribeVolumes for volume ID {volume_id}, got 0",
                           resource_id=volume_id)
        if len(volumes) > 1:
            raise Internal(f"Expected one volume from DescribeVolumes for volume ID {volume_id}, "
                           f"got {len(volumes)}", resource_id=volume_id)

        return volumes[0]

    @translate_errors('aws')
    def create_volume_from_snapshot(self, snapshot_id: str, volume_type: str,
                                    iops: Optional[int] = None) -> str:
        req = {
            'SnapshotId': snapshot_id,
            'AvailabilityZone': self.availability_zone,
            'VolumeType': volume_type,
        }

        if volume_type in self.iops_volume_types and iops is not None:
            req['Iops'] = iops

        res = self.ec2.create_volume(**req)
        logger.info(f"Created volume {res['VolumeId']} from snapshot {snapshot_id}")

        return res['VolumeId']

    @translate_errors('aws')
    def get_volume_info(self, volume_id: str) -> VolumeInfo:
        vol = self._describe_volume(volume_id)

        volume_type = vol.get('VolumeType', '')
        iops = None
        if volume_type in self.iops_volume_types and vol.get('Iops') is not None:
            iops = vol['Iops']

        return VolumeInfo(volume_type, iops)

    @translate_errors('aws')
    def is_volume_ready(self, volume_id: str) -> bool:
        vol = self._describe_volume(volume_id)
        return vol.get('State') == VOLUME_STATE_AVAILABLE

    @translate_errors('aws')
    def list_snapshots(self, tag_filters: Dict[str, str]) -> List[str]:
        """List ids of snapshots owned by this account matching every tag filter.

        Keys are tag names and get a ``tag:`` prefix; keys that already
        start with ``tag:`` are used as given.
        """
        # EC2 filters are always ANDed together
        filters = [
            {'Name': key if key.startswith('tag:') else f'tag:{key}', 'Values': [value]}
            for key, value in tag_filters.items()
        ]

        paginator = self.ec2.get_paginator('describe_snapshots')

        ret = []
        for page in paginator.paginate(OwnerIds=['self'], Filters=filters):
            for snapshot in page.get('Snapshots', []):
                ret.append(snapshot['SnapshotId'])

        return ret

    @translate_errors('aws')
    def create_snapshot(self, volume_id: str, tags: Dict[str, str]) -> str:
        res = self.ec2.create_snapshot(VolumeId=volume_id)
        snapshot_id = res['SnapshotId']
        logger.info(f"Created snapshot {snapshot_id} of volume {volume_id}")

        if not tags:
            return snapshot_id

        ec2_tags = [{'Key': key, 'Value': value} for key, value in tags.items()]

        # The snapshot is not rolled back if tagging fails
        try:
            self.ec2.create_tags(Resources=[snapshot_id], Tags=ec2_tags)
        except (ClientError, BotoCoreError) as e:
            error = translate_aws_error(e)
            error.resource_id = snapshot_id
            logger.error(f"Snapshot {snapshot_id} was created but tagging failed: {error.message}")
            raise error from e

        return snapshot_id

    @translate_errors('aws')
    def delete_snapshot(self, snapshot_id: str) -> None:
        self.ec2.delete_snapshot(SnapshotId=snapshot_id)
        logger.info(f"Deleted snapshot {snapshot_id}")

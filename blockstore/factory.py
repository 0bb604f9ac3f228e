"""
Block storage adapter construction.

Each constructor validates its location settings, builds an authenticated
client from the ambient credentials and checks that the zone exists, so a
returned adapter can assume a valid location for every later call.
"""

import logging
from typing import Optional, Union

import boto3
import google.auth
from google.cloud import compute_v1

from .adapter import BlockStorageAdapter
from .aws import AWSBlockStorageAdapter
from .config import AWSConfig, GCPConfig, get_config
from .errors import InvalidArgument, NotFound, translate_errors
from .gcp import GCPBlockStorageAdapter

logger = logging.getLogger(__name__)

COMPUTE_SCOPE = 'https://www.googleapis.com/auth/compute'


@translate_errors('aws')
def new_aws_block_storage_adapter(region: str, availability_zone: str, **kwargs) -> AWSBlockStorageAdapter:
    """Create an EBS adapter for an availability zone.

    Extra keyword arguments are passed to AWSBlockStorageAdapter.
    """
    if not region:
        raise InvalidArgument("missing region in aws configuration")
    if not availability_zone:
        raise InvalidArgument("missing availabilityZone in aws configuration")

    session = boto3.session.Session(region_name=region)
    if session.get_credentials() is None:
        raise InvalidArgument("AWS credentials could not be resolved from the environment")

    ec2 = session.client('ec2')

    # validate the availability zone
    res = ec2.describe_availability_zones(ZoneNames=[availability_zone])
    if not res.get('AvailabilityZones'):
        raise NotFound(f"availability zone {availability_zone!r} not found",
                       resource_id=availability_zone)

    logger.info(f"Created AWS block storage adapter for {availability_zone} in {region}")
    return AWSBlockStorageAdapter(ec2, availability_zone, **kwargs)


@translate_errors('gcp')
def new_gcp_block_storage_adapter(project: str, zone: str, **kwargs) -> GCPBlockStorageAdapter:
    """Create a persistent disk adapter for a project and zone.

    Extra keyword arguments are passed to GCPBlockStorageAdapter.
    """
    if not project:
        raise InvalidArgument("missing project in gcp configuration")
    if not zone:
        raise InvalidArgument("missing zone in gcp configuration")

    credentials, _ = google.auth.default(scopes=[COMPUTE_SCOPE])

    # validate project & zone
    zones = compute_v1.ZonesClient(credentials=credentials)
    res = zones.get(project=project, zone=zone)
    if res is None:
        raise NotFound(f"zone {zone!r} not found for project {project!r}", resource_id=zone)

    logger.info(f"Created GCP block storage adapter for {zone} in project {project}")
    return GCPBlockStorageAdapter(
        compute_v1.DisksClient(credentials=credentials),
        compute_v1.SnapshotsClient(credentials=credentials),
        project,
        zone,
        **kwargs,
    )


def get_block_storage_adapter(provider_type: str,
                              config: Optional[Union[AWSConfig, GCPConfig]] = None,
                              **kwargs) -> BlockStorageAdapter:
    """Factory function to get the block storage adapter for a provider.

    When no config is given it is read from the environment.
    """
    provider_type = provider_type.lower()
    if config is None:
        config = get_config(provider_type)

    if provider_type == 'aws':
        if not isinstance(config, AWSConfig):
            raise InvalidArgument(f"aws adapter requires AWSConfig, got {type(config).__name__}")
        return new_aws_block_storage_adapter(config.region, config.availability_zone, **kwargs)

    if provider_type == 'gcp':
        if not isinstance(config, GCPConfig):
            raise InvalidArgument(f"gcp adapter requires GCPConfig, got {type(config).__name__}")
        return new_gcp_block_storage_adapter(config.project, config.zone, **kwargs)

    raise InvalidArgument(f"Unsupported provider type: {provider_type}")

"""Configuration classes for block storage adapters."""
import os
from dataclasses import dataclass
from typing import Union

from dotenv import load_dotenv

from .errors import InvalidArgument

# Load environment variables from .env file
load_dotenv()


@dataclass
class PollConfig:
    """Configuration for bounded polling of eventually consistent resources."""
    interval: float = 1.0  # seconds between attempts
    timeout: float = 30.0  # seconds before giving up

    @classmethod
    def from_env(cls, prefix: str, interval: float = 1.0,
                 timeout: float = 30.0) -> 'PollConfig':
        """Read <prefix>_INTERVAL and <prefix>_TIMEOUT, falling back to the given defaults."""
        return cls(
            interval=float(os.getenv(f'{prefix}_INTERVAL', interval)),
            timeout=float(os.getenv(f'{prefix}_TIMEOUT', timeout)),
        )


# GCP snapshots are not labelable until they can be fetched
LABEL_POLL = PollConfig.from_env('BLOCKSTORE_LABEL_POLL', interval=1.0, timeout=30.0)

# Restored volumes take minutes to leave their creating state
VOLUME_READY_POLL = PollConfig.from_env('BLOCKSTORE_VOLUME_POLL', interval=5.0, timeout=300.0)


@dataclass
class AWSConfig:
    """Location settings for the AWS EBS adapter."""
    region: str = ''
    availability_zone: str = ''

    @classmethod
    def from_env(cls) -> 'AWSConfig':
        return cls(
            region=os.getenv('AWS_REGION', ''),
            availability_zone=os.getenv('AWS_AVAILABILITY_ZONE', ''),
        )


@dataclass
class GCPConfig:
    """Location settings for the GCP Persistent Disk adapter."""
    project: str = ''
    zone: str = ''

    @classmethod
    def from_env(cls) -> 'GCPConfig':
        return cls(
            project=os.getenv('GCP_PROJECT', ''),
            zone=os.getenv('GCP_ZONE', ''),
        )


def get_config(provider_type: str) -> Union[AWSConfig, GCPConfig]:
    """Load the location config for a provider from the environment."""
    configs = {
        'aws': AWSConfig,
        'gcp': GCPConfig,
    }

    config_class = configs.get(provider_type.lower())
    if not config_class:
        raise InvalidArgument(f"Unsupported provider type: {provider_type}")

    return config_class.from_env()

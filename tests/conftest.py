"""Global test configuration."""
import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Add project root to Python path for imports
sys.path.insert(0, str(PROJECT_ROOT))

# Keep adapter tests independent of the developer's environment
for var in ('AWS_REGION', 'AWS_AVAILABILITY_ZONE', 'GCP_PROJECT', 'GCP_ZONE',
            'BLOCKSTORE_LABEL_POLL_INTERVAL', 'BLOCKSTORE_LABEL_POLL_TIMEOUT',
            'BLOCKSTORE_VOLUME_POLL_INTERVAL', 'BLOCKSTORE_VOLUME_POLL_TIMEOUT'):
    os.environ.pop(var, None)

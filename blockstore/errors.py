"""Error types and SDK error translation for block storage adapters."""

import logging
from functools import wraps
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from google.api_core import exceptions as gcp_exceptions
from google.auth.exceptions import DefaultCredentialsError

logger = logging.getLogger(__name__)

# EC2 error codes that indicate a malformed or unsupported request
AWS_INVALID_ARGUMENT_CODES = frozenset([
    'InvalidParameter',
    'InvalidParameterValue',
    'InvalidParameterCombination',
    'ValidationError',
    'UnknownVolumeType',
])


class BlockStorageError(Exception):
    """Base class for block storage errors."""
    def __init__(self, message, code='Internal', resource_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.resource_id = resource_id


class InvalidArgument(BlockStorageError):
    """Missing or malformed configuration, or an unsupported argument."""
    def __init__(self, message, resource_id=None):
        super().__init__(message, 'InvalidArgument', resource_id)


class NotFound(BlockStorageError):
    """Unknown id or location, or a lookup that resolved to nothing."""
    def __init__(self, message, resource_id=None):
        super().__init__(message, 'NotFound', resource_id)


class Unavailable(BlockStorageError):
    """Network or control-plane failure."""
    def __init__(self, message, resource_id=None):
        super().__init__(message, 'Unavailable', resource_id)


class Internal(BlockStorageError):
    """Provider response has an unexpected shape."""
    def __init__(self, message, resource_id=None):
        super().__init__(message, 'Internal', resource_id)


class PollTimeout(Unavailable):
    """A bounded poll gave up before its condition held."""


class SnapshotNotVisible(PollTimeout):
    """A freshly created snapshot never became fetchable for labeling."""
    def __init__(self, snapshot_name, timeout):
        super().__init__(
            f"Snapshot {snapshot_name} was created but could not be fetched within "
            f"{timeout}s; it exists without labels",
            resource_id=snapshot_name,
        )


def translate_aws_error(e: Exception) -> BlockStorageError:
    if isinstance(e, NoCredentialsError):
        return InvalidArgument(f"AWS credentials could not be resolved: {str(e)}")
    if isinstance(e, ClientError):
        code = e.response.get('Error', {}).get('Code', '')
        message = e.response.get('Error', {}).get('Message', str(e))
        if code.endswith('NotFound'):
            return NotFound(f"{code}: {message}")
        if code in AWS_INVALID_ARGUMENT_CODES:
            return InvalidArgument(f"{code}: {message}")
        return Unavailable(f"{code}: {message}")
    return Unavailable(str(e))


def translate_gcp_error(e: Exception) -> BlockStorageError:
    if isinstance(e, DefaultCredentialsError):
        return InvalidArgument(f"GCP credentials could not be resolved: {str(e)}")
    if isinstance(e, gcp_exceptions.NotFound):
        return NotFound(e.message)
    if isinstance(e, (gcp_exceptions.BadRequest, gcp_exceptions.InvalidArgument)):
        return InvalidArgument(e.message)
    return Unavailable(str(e))


_SDK_ERRORS = {
    'aws': ((ClientError, BotoCoreError), translate_aws_error),
    'gcp': ((gcp_exceptions.GoogleAPIError, DefaultCredentialsError), translate_gcp_error),
}


def translate_errors(provider):
    """Decorator that converts SDK exceptions into BlockStorageError subclasses.

    Args:
        provider (str): 'aws' or 'gcp', selects which SDK errors are translated
    """
    sdk_errors, translate = _SDK_ERRORS[provider]

    def decorator(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except BlockStorageError:
                raise
            except sdk_errors as e:
                error = translate(e)
                logger.error(f"{provider} error in {f.__name__}: {error.code}: {error.message}")
                raise error from e
        return wrapped
    return decorator

"""Error taxonomy and retry policies for GameTorch activities.

The only retries in the client are the two fixed-interval loops in
``gametorch.animations`` (status polling and artifact-not-ready). Temporal
must not add its own retries on top, so every activity runs a single attempt
and every domain error is declared non-retryable.
"""

from datetime import timedelta
from temporalio.common import RetryPolicy
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


# Custom exceptions
class GameTorchError(Exception):
    """Base class for every failure raised by the client."""
    pass

class ValidationError(GameTorchError):
    """Request parameters rejected before any network call."""
    pass

class InvalidParameter(ValidationError):
    """A parameter is outside its allowed values (e.g. duration)."""
    pass

class ConflictingParameter(ValidationError):
    """Two mutually exclusive parameters were both supplied."""
    pass

class TransportError(GameTorchError):
    """The server could not be reached (connection, timeout, protocol)."""
    pass

class RemoteError(GameTorchError):
    """The server answered with a non-2xx status."""

    def __init__(self, status: int, body: Any = None, url: Optional[str] = None):
        self.status = status
        self.body = body
        self.url = url
        message = f"HTTP {status}"
        if url:
            message += f" from {url}"
        if body:
            message += f": {body}"
        super().__init__(message)

class MalformedResponse(GameTorchError):
    """An expected field is missing from a JSON payload."""
    pass

class JobFailedRefunded(GameTorchError):
    """The service reported the animation as failed and refunded (status 3)."""

    def __init__(self, animation_id: Any = None):
        self.animation_id = animation_id
        super().__init__(f"animation {animation_id} failed and refunded (status=3)")

class ArtifactTimeout(GameTorchError):
    """The result ZIP never materialized within the wait ceiling."""

    def __init__(self, result_id: Any = None, waited_seconds: int = 0):
        self.result_id = result_id
        self.waited_seconds = waited_seconds
        super().__init__(
            f"timed out waiting for .zip file of result {result_id} "
            f"after {waited_seconds} seconds"
        )


NON_RETRYABLE_ERROR_TYPES = [
    "ValidationError",
    "InvalidParameter",
    "ConflictingParameter",
    "TransportError",
    "RemoteError",
    "MalformedResponse",
    "JobFailedRefunded",
    "ArtifactTimeout",
    "FileNotFoundError",
    "PermissionError",
    "OSError",
]

# Single attempt: failures surface to the caller unchanged
SINGLE_ATTEMPT_POLICY = RetryPolicy(
    initial_interval=timedelta(seconds=1),
    maximum_attempts=1,
    non_retryable_error_types=NON_RETRYABLE_ERROR_TYPES
)

# Mapping of activity types to retry policies
ACTIVITY_RETRY_POLICIES: Dict[str, RetryPolicy] = {
    "submit_animation": SINGLE_ATTEMPT_POLICY,
    "check_animation_status": SINGLE_ATTEMPT_POLICY,
    "download_animation_zip": SINGLE_ATTEMPT_POLICY,
}

def get_retry_policy(activity_name: str) -> RetryPolicy:
    """Get retry policy for a specific activity.

    Args:
        activity_name: Name of the activity

    Returns:
        RetryPolicy for the activity, defaults to SINGLE_ATTEMPT_POLICY
    """
    policy = ACTIVITY_RETRY_POLICIES.get(activity_name, SINGLE_ATTEMPT_POLICY)
    logger.debug(f"Using retry policy for {activity_name}: {policy}")
    return policy

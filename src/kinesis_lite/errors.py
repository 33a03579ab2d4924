"""Error taxonomy and the classification policy applied to every Kinesis call."""

import logging
from enum import Enum
from typing import Any, Dict, Optional

from botocore.exceptions import ClientError, WaiterError

logger = logging.getLogger(__name__)

ERROR_PREFIX = "AWS error encountered"


class StreamErrorKind(Enum):
    """Error codes the Kinesis API can return."""
    RESOURCE_IN_USE = "ResourceInUseException"
    RESOURCE_NOT_FOUND = "ResourceNotFoundException"
    LIMIT_EXCEEDED = "LimitExceededException"
    PROVISIONED_THROUGHPUT_EXCEEDED = "ProvisionedThroughputExceededException"
    INVALID_ARGUMENT = "InvalidArgumentException"
    ACCESS_DENIED = "AccessDeniedException"
    EXPIRED_ITERATOR = "ExpiredIteratorException"
    EXPIRED_NEXT_TOKEN = "ExpiredNextTokenException"
    VALIDATION = "ValidationException"
    INTERNAL_FAILURE = "InternalFailureException"
    KMS_ACCESS_DENIED = "KMSAccessDeniedException"
    KMS_DISABLED = "KMSDisabledException"
    KMS_INVALID_STATE = "KMSInvalidStateException"
    KMS_NOT_FOUND = "KMSNotFoundException"
    KMS_OPT_IN_REQUIRED = "KMSOptInRequired"
    KMS_THROTTLING = "KMSThrottlingException"
    THROTTLING = "ThrottlingException"
    RESOURCE_NOT_READY = "ResourceNotReady"
    UNKNOWN = "Unknown"

    @classmethod
    def from_code(cls, code: Optional[str]) -> "StreamErrorKind":
        """Map a service error code onto a known kind, falling back to UNKNOWN."""
        if not code:
            return cls.UNKNOWN
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


def is_already_exists(kind: StreamErrorKind) -> bool:
    """Return True for the idempotent-create conflict kind."""
    return kind is StreamErrorKind.RESOURCE_IN_USE


class StreamClientError(Exception):
    """Base class for errors raised by kinesis_lite."""


class ConfigurationError(StreamClientError):
    """Session, credential or region resolution failed."""


class InvalidArgumentError(StreamClientError, ValueError):
    """An argument was rejected before any request was sent."""


class ShardTopologyError(StreamClientError):
    """The stream does not have the single shard this client reads from."""

    def __init__(self, stream_name: str, shard_count: int):
        self.stream_name = stream_name
        self.shard_count = shard_count
        super().__init__(
            f"Stream {stream_name} has {shard_count} shards; "
            f"exactly one shard is supported"
        )


class ProviderError(StreamClientError):
    """
    A structured error returned by the stream service.

    The original botocore exception is kept on ``original`` and is also the
    ``__cause__`` when raised by the client.
    """

    def __init__(
        self,
        kind: StreamErrorKind,
        code: str,
        message: str,
        operation: Optional[str] = None,
        original: Optional[BaseException] = None
    ):
        self.kind = kind
        self.code = code
        self.message = message
        self.operation = operation
        self.original = original
        super().__init__(f"{ERROR_PREFIX}: {original if original is not None else message}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.name,
            "code": self.code,
            "message": self.message,
            "operation": self.operation,
        }


def _structured_details(error: BaseException) -> Optional[Dict[str, Any]]:
    """Extract code, message and operation from botocore's structured errors."""
    if isinstance(error, ClientError):
        details = error.response.get('Error', {})
        return {
            "code": details.get('Code') or StreamErrorKind.UNKNOWN.value,
            "message": details.get('Message') or str(error),
            "operation": error.operation_name,
        }

    if isinstance(error, WaiterError):
        # A waiter that gave up reports the last response it saw
        last_response = error.last_response or {}
        details = last_response.get('Error', {})
        return {
            "code": details.get('Code') or StreamErrorKind.RESOURCE_NOT_READY.value,
            "message": details.get('Message') or error.kwargs.get('reason') or str(error),
            "operation": error.kwargs.get('name'),
        }

    return None


def classify_error(error: BaseException) -> Optional[BaseException]:
    """
    Decide whether an error from a Kinesis call is suppressed or surfaced.

    Args:
        error: Exception raised by a boto3 call or waiter

    Returns:
        None if the error is the already-exists kind, a ProviderError wrapping
        any other structured error, or the error itself when it is not a
        structured service error (connection failures, parameter validation).
    """
    details = _structured_details(error)
    if details is None:
        return error

    kind = StreamErrorKind.from_code(details["code"])
    if is_already_exists(kind):
        logger.debug(f"Suppressing {details['code']} from {details['operation']}")
        return None

    return ProviderError(
        kind=kind,
        code=details["code"],
        message=details["message"],
        operation=details["operation"],
        original=error
    )

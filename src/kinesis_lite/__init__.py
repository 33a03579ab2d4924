"""
kinesis-lite - a minimal synchronous client for Kinesis Data Streams.

Ensures a stream exists, appends keyed records and reads the oldest records
of a single-shard stream. Session bootstrap resolves region and credentials
from explicit configuration; every service error passes through one
classification policy that only tolerates "stream already exists".
"""

from .clients.kinesis_client import KinesisStreamClient
from .config.aws_config import AWSClientManager, create_stream_client
from .config.settings import StreamClientSettings, load_settings
from .errors import (
    ConfigurationError,
    InvalidArgumentError,
    ProviderError,
    ShardTopologyError,
    StreamClientError,
    StreamErrorKind,
    classify_error,
)
from .models import StreamIdentity, StreamRecord

__version__ = "1.0.0"

__all__ = [
    "AWSClientManager",
    "ConfigurationError",
    "InvalidArgumentError",
    "KinesisStreamClient",
    "ProviderError",
    "ShardTopologyError",
    "StreamClientError",
    "StreamClientSettings",
    "StreamErrorKind",
    "StreamIdentity",
    "StreamRecord",
    "classify_error",
    "create_stream_client",
    "load_settings",
]

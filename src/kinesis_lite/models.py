"""Value types exchanged with the stream client."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .errors import InvalidArgumentError


@dataclass(frozen=True)
class StreamIdentity:
    """A stream's name and the shard count it should be created with."""
    name: str
    shard_count: Optional[int] = 1

    def __post_init__(self):
        validate_stream_name(self.name)
        validate_shard_count(self.shard_count)


@dataclass(frozen=True)
class StreamRecord:
    """A record read back from a stream."""
    stream_name: str
    partition_key: str
    data: bytes
    sequence_number: Optional[str] = None
    approximate_arrival_timestamp: Optional[datetime] = None

    @classmethod
    def from_response(cls, stream_name: str, record: Dict[str, Any]) -> "StreamRecord":
        """Build a record from one entry of a GetRecords response."""
        return cls(
            stream_name=stream_name,
            partition_key=record['PartitionKey'],
            data=bytes(record['Data']),
            sequence_number=record.get('SequenceNumber'),
            approximate_arrival_timestamp=record.get('ApproximateArrivalTimestamp')
        )


def validate_stream_name(name: str) -> None:
    if not isinstance(name, str) or not name:
        raise InvalidArgumentError("Stream name must be a non-empty string")


def validate_partition_key(partition_key: str) -> None:
    if not isinstance(partition_key, str) or not partition_key:
        raise InvalidArgumentError("Partition key must be a non-empty string")


def validate_shard_count(shard_count: Optional[int]) -> None:
    # None means the service decides; bool is excluded because it is an int
    if shard_count is None:
        return
    if isinstance(shard_count, bool) or not isinstance(shard_count, int) or shard_count < 1:
        raise InvalidArgumentError(f"Shard count must be a positive integer, got {shard_count!r}")

"""Synchronous Kinesis Data Streams client: create, put and consume."""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ..config.settings import KinesisConfig
from ..errors import classify_error, InvalidArgumentError, ShardTopologyError
from ..models import (
    StreamIdentity,
    StreamRecord,
    validate_partition_key,
    validate_shard_count,
    validate_stream_name,
)
from ..utils.logging import log_error_with_context

logger = logging.getLogger(__name__)

TRIM_HORIZON = 'TRIM_HORIZON'
GET_RECORDS_LIMIT = 1

Payload = Union[bytes, bytearray, memoryview, str]


class KinesisStreamClient:
    """
    Minimal facade over a Kinesis Data Streams client.

    Every remote call is a single blocking attempt whose error, if any, goes
    through ``classify_error``: the already-exists kind is suppressed, other
    service errors are raised as ``ProviderError`` and anything else is raised
    unchanged.

    Consuming assumes a single-shard stream. ``consume_records`` always reads
    the first shard that ListShards returns, starting from TRIM_HORIZON, and
    keeps no iterator between calls, so repeated calls re-read the oldest
    records.
    """

    def __init__(self, kinesis_client, config: Optional[KinesisConfig] = None):
        self._client = kinesis_client
        self.config = config or KinesisConfig()

    @property
    def kinesis_client(self):
        return self._client

    def _call(self, operation: str, func: Callable[..., Any], **kwargs) -> Optional[Any]:
        """Invoke a boto3 call and apply the error policy. Returns None when suppressed."""
        try:
            return func(**kwargs)
        except Exception as e:
            surfaced = classify_error(e)
            if surfaced is None:
                logger.info(f"{operation}: ignoring already-exists error for {kwargs.get('StreamName')}")
                return None

            if surfaced is e:
                log_error_with_context(logger, e, operation, stream_name=kwargs.get('StreamName'))
                raise
            log_error_with_context(
                logger, e, operation,
                stream_name=kwargs.get('StreamName'),
                provider_error=surfaced.to_dict()
            )
            raise surfaced from e

    def create_stream_if_not_exists(self, name: str, shard_count: Optional[int]) -> None:
        """
        Create a stream and block until it is ACTIVE.

        An existing stream is not an error. ``shard_count`` is sent as
        ShardCount on creation and as the DescribeStream Limit while waiting;
        when None it is left out of both requests.

        Raises:
            InvalidArgumentError: Empty name or non-positive shard count
            ProviderError: Any service error other than ResourceInUseException
        """
        validate_stream_name(name)
        validate_shard_count(shard_count)

        create_kwargs: Dict[str, Any] = {'StreamName': name}
        if shard_count is not None:
            create_kwargs['ShardCount'] = shard_count

        response = self._call('CreateStream', self._client.create_stream, **create_kwargs)
        if response is not None:
            logger.info(f"Created stream {name} with {shard_count} shards")

        wait_kwargs: Dict[str, Any] = {'StreamName': name}
        if shard_count is not None:
            wait_kwargs['Limit'] = shard_count

        waiter_config = self._waiter_config()
        if waiter_config:
            wait_kwargs['WaiterConfig'] = waiter_config

        waiter = self._client.get_waiter('stream_exists')
        self._call('StreamExists', waiter.wait, **wait_kwargs)
        logger.info(f"Stream {name} is active")

    def ensure_streams(self, identities: Iterable[StreamIdentity]) -> None:
        """Create each stream if missing, stopping at the first error."""
        for identity in identities:
            self.create_stream_if_not_exists(identity.name, identity.shard_count)

    def put_record(self, stream_name: str, partition_key: str, data: Payload) -> None:
        """
        Append a single record to a stream.

        Args:
            stream_name: Target stream
            partition_key: Key the service uses to pick a shard
            data: Record payload; str is encoded as UTF-8

        Raises:
            InvalidArgumentError: Empty stream name or partition key, or a
                payload that is not bytes-like or str
            ProviderError: The service rejected the record
        """
        validate_stream_name(stream_name)
        validate_partition_key(partition_key)
        payload = self._to_bytes(data)

        response = self._call(
            'PutRecord',
            self._client.put_record,
            StreamName=stream_name,
            PartitionKey=partition_key,
            Data=payload
        )
        if response is not None:
            logger.debug(
                f"Put {len(payload)} bytes to {stream_name} "
                f"shard {response.get('ShardId')} seq {response.get('SequenceNumber')}"
            )

    def consume_records(self, stream_name: str) -> List[StreamRecord]:
        """
        Fetch records from the start of the stream's first shard.

        Performs ListShards, GetShardIterator (TRIM_HORIZON) and a single
        GetRecords call capped at GET_RECORDS_LIMIT, so the result holds at
        most one record. Nothing is paginated and no position is remembered.

        Raises:
            InvalidArgumentError: Empty stream name
            ShardTopologyError: The stream has no shards, or more than one
                while strict_single_shard is enabled
            ProviderError: Any service error, e.g. the stream does not exist
        """
        validate_stream_name(stream_name)

        shard_iterator = self._get_shard_iterator(stream_name)
        if shard_iterator is None:
            return []

        response = self._call(
            'GetRecords',
            self._client.get_records,
            ShardIterator=shard_iterator,
            Limit=GET_RECORDS_LIMIT
        )
        if response is None:
            return []

        records = [
            StreamRecord.from_response(stream_name, record)
            for record in response.get('Records', [])
        ]
        logger.debug(f"Retrieved {len(records)} records from {stream_name}")
        return records

    def _get_shard_iterator(self, stream_name: str) -> Optional[str]:
        shards_response = self._call('ListShards', self._client.list_shards, StreamName=stream_name)
        if shards_response is None:
            return None

        shard_id = self._select_shard(stream_name, shards_response.get('Shards', []))

        iterator_response = self._call(
            'GetShardIterator',
            self._client.get_shard_iterator,
            StreamName=stream_name,
            ShardId=shard_id,
            ShardIteratorType=TRIM_HORIZON
        )
        if iterator_response is None:
            return None

        return iterator_response['ShardIterator']

    def _select_shard(self, stream_name: str, shards: List[Dict[str, Any]]) -> str:
        if not shards:
            raise ShardTopologyError(stream_name, 0)

        if len(shards) > 1:
            if self.config.strict_single_shard:
                raise ShardTopologyError(stream_name, len(shards))
            logger.warning(
                f"Stream {stream_name} has {len(shards)} shards; "
                f"reading only {shards[0]['ShardId']}"
            )

        return shards[0]['ShardId']

    def _waiter_config(self) -> Dict[str, int]:
        waiter_config = {}
        if self.config.waiter_delay_seconds is not None:
            waiter_config['Delay'] = self.config.waiter_delay_seconds
        if self.config.waiter_max_attempts is not None:
            waiter_config['MaxAttempts'] = self.config.waiter_max_attempts
        return waiter_config

    @staticmethod
    def _to_bytes(data: Payload) -> bytes:
        if isinstance(data, str):
            return data.encode('utf-8')
        if isinstance(data, (bytes, bytearray, memoryview)):
            return bytes(data)
        raise InvalidArgumentError(f"Record data must be bytes or str, got {type(data).__name__}")

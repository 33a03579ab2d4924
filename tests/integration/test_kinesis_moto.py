"""End-to-end behaviour of the stream client against moto's Kinesis backend."""

import pytest
from moto import mock_aws

from kinesis_lite.config.aws_config import create_stream_client
from kinesis_lite.config.settings import StreamClientSettings
from kinesis_lite.errors import InvalidArgumentError, ProviderError, ShardTopologyError, StreamErrorKind

pytestmark = pytest.mark.integration

STREAM = "my-stream"


@pytest.fixture
def kinesis(aws_credentials, test_settings):
    """Stream client bootstrapped from settings with moto intercepting AWS calls."""
    with mock_aws():
        yield create_stream_client(test_settings)


@pytest.fixture
def stream(kinesis):
    kinesis.create_stream_if_not_exists(STREAM, 1)
    return STREAM


def test_create_is_idempotent(kinesis):
    kinesis.create_stream_if_not_exists(STREAM, 1)
    kinesis.create_stream_if_not_exists(STREAM, 1)

    names = kinesis.kinesis_client.list_streams()['StreamNames']
    description = kinesis.kinesis_client.describe_stream(StreamName=STREAM)['StreamDescription']

    assert names.count(STREAM) == 1
    assert description['StreamStatus'] == 'ACTIVE'


def test_put_then_consume(kinesis, stream):
    kinesis.put_record(stream, "key", b"data")

    records = kinesis.consume_records(stream)

    assert len(records) >= 1
    assert records[0].data == b"data"
    assert records[0].partition_key == "key"
    assert records[0].stream_name == stream


def test_consume_rereads_from_trim_horizon(kinesis, stream):
    kinesis.put_record(stream, "key", b"data")

    first = kinesis.consume_records(stream)
    second = kinesis.consume_records(stream)

    assert first[0].sequence_number == second[0].sequence_number
    assert first[0].data == second[0].data == b"data"


def test_consume_returns_oldest_record_first(kinesis, stream):
    for payload in (b"first", b"second", b"third"):
        kinesis.put_record(stream, "key", payload)

    records = kinesis.consume_records(stream)

    assert [r.data for r in records] == [b"first"]


def test_consume_empty_stream(kinesis, stream):
    assert kinesis.consume_records(stream) == []


def test_put_to_missing_stream(kinesis):
    with pytest.raises(ProviderError) as exc_info:
        kinesis.put_record("never-created", "key", b"data")

    assert exc_info.value.kind is StreamErrorKind.RESOURCE_NOT_FOUND


def test_consume_missing_stream(kinesis):
    with pytest.raises(ProviderError) as exc_info:
        kinesis.consume_records("never-created")

    assert exc_info.value.kind is StreamErrorKind.RESOURCE_NOT_FOUND


@pytest.mark.parametrize("stream_name,partition_key", [("", "key"), (STREAM, "")])
def test_empty_inputs_are_rejected(kinesis, stream, stream_name, partition_key):
    with pytest.raises(InvalidArgumentError):
        kinesis.put_record(stream_name, partition_key, b"data")


def test_multi_shard_stream_reads_first_shard(kinesis):
    kinesis.create_stream_if_not_exists("wide", 2)

    # Only the first shard is read, so this may or may not see the record
    kinesis.put_record("wide", "key", b"data")
    records = kinesis.consume_records("wide")

    assert len(records) <= 1


def test_strict_single_shard_rejects_multi_shard_stream(aws_credentials, test_settings):
    test_settings.kinesis.strict_single_shard = True

    with mock_aws():
        client = create_stream_client(test_settings)
        client.create_stream_if_not_exists("wide", 2)

        with pytest.raises(ShardTopologyError):
            client.consume_records("wide")


def test_ensure_streams_from_settings(aws_credentials):
    settings = StreamClientSettings(
        aws={"region": "eu-west-1"},
        kinesis={"streams": [
            {"name": "orders", "shard_count": 1},
            {"name": "payments", "shard_count": 1},
        ]}
    )

    with mock_aws():
        client = create_stream_client(settings)
        client.ensure_streams(settings.kinesis.streams)
        client.ensure_streams(settings.kinesis.streams)

        names = sorted(client.kinesis_client.list_streams()['StreamNames'])

    assert names == ["orders", "payments"]


def test_stale_get_records_limit_still_returns_one_record(aws_credentials):
    settings = StreamClientSettings(
        aws={"region": "eu-west-1"},
        kinesis={"get_records_limit": 10, "waiter_delay_seconds": 1, "waiter_max_attempts": 3}
    )

    with mock_aws():
        client = create_stream_client(settings)
        client.create_stream_if_not_exists("orders", 1)
        for payload in (b"first", b"second", b"third"):
            client.put_record("orders", "key", payload)

        records = client.consume_records("orders")

    assert [r.data for r in records] == [b"first"]

"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from typing import Any, Dict

import boto3
import pytest
from botocore.stub import Stubber

from kinesis_lite.clients.kinesis_client import KinesisStreamClient
from kinesis_lite.config.settings import KinesisConfig, StreamClientSettings

TEST_REGION = "eu-west-1"
TEST_STREAM = "my-stream"
TEST_SHARD_ID = "shardId-000000000000"


@pytest.fixture
def aws_environ() -> Dict[str, str]:
    """Credential variables as the session bootstrap expects them."""
    return {
        "AWS_ACCESS_KEY_ID": "x",
        "AWS_SECRET_ACCESS_KEY": "y",
    }


@pytest.fixture
def aws_credentials(monkeypatch, aws_environ):
    """Mocked AWS credentials in the process environment."""
    for key, value in aws_environ.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)


@pytest.fixture
def test_settings() -> StreamClientSettings:
    """Create test configuration."""
    return StreamClientSettings(
        aws={"region": TEST_REGION},
        kinesis={"waiter_delay_seconds": 1, "waiter_max_attempts": 3},
        logging={"level": "DEBUG", "format": "text", "output": "stderr"}
    )


@pytest.fixture
def boto_kinesis_client():
    """Real botocore Kinesis client; requests are intercepted by a Stubber."""
    return boto3.client(
        "kinesis",
        region_name=TEST_REGION,
        aws_access_key_id="x",
        aws_secret_access_key="y"
    )


@pytest.fixture
def kinesis_stubber(boto_kinesis_client):
    with Stubber(boto_kinesis_client) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()


@pytest.fixture
def kinesis_config() -> KinesisConfig:
    return KinesisConfig(waiter_delay_seconds=1, waiter_max_attempts=1)


@pytest.fixture
def stream_client(boto_kinesis_client, kinesis_stubber, kinesis_config) -> KinesisStreamClient:
    """KinesisStreamClient bound to the stubbed botocore client."""
    return KinesisStreamClient(boto_kinesis_client, kinesis_config)


def _describe_stream_response(status: str = "ACTIVE", name: str = TEST_STREAM) -> Dict[str, Any]:
    """DescribeStream response with the members botocore requires."""
    return {
        "StreamDescription": {
            "StreamName": name,
            "StreamARN": f"arn:aws:kinesis:{TEST_REGION}:123456789012:stream/{name}",
            "StreamStatus": status,
            "Shards": [],
            "HasMoreShards": False,
            "RetentionPeriodHours": 24,
            "StreamCreationTimestamp": datetime(2024, 1, 1, tzinfo=timezone.utc),
            "EnhancedMonitoring": [{}],
        }
    }


def _shard(shard_id: str = TEST_SHARD_ID) -> Dict[str, Any]:
    return {
        "ShardId": shard_id,
        "HashKeyRange": {
            "StartingHashKey": "0",
            "EndingHashKey": "340282366920938463463374607431768211455",
        },
        "SequenceNumberRange": {
            "StartingSequenceNumber": "49590338271490256608559692538361571095921575989136588898",
        },
    }


def _kinesis_record(data: bytes = b"data", key: str = "key", seq: str = "1") -> Dict[str, Any]:
    return {
        "SequenceNumber": seq,
        "ApproximateArrivalTimestamp": datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        "Data": data,
        "PartitionKey": key,
    }


@pytest.fixture
def describe_stream_response():
    """Factory for DescribeStream responses."""
    return _describe_stream_response


@pytest.fixture
def make_shard():
    """Factory for ListShards shard entries."""
    return _shard


@pytest.fixture
def make_record():
    """Factory for GetRecords record entries."""
    return _kinesis_record

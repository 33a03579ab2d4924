"""AWS session bootstrap and Kinesis client setup."""

import logging
import os
from typing import Mapping, Optional

import boto3
from botocore.config import Config
from botocore.credentials import EnvProvider
from botocore.exceptions import (
    NoCredentialsError,
    NoRegionError,
    PartialCredentialsError,
    ProfileNotFound,
)

from ..clients.kinesis_client import KinesisStreamClient
from ..errors import ConfigurationError
from .settings import AWSConfig, CredentialSource, StreamClientSettings

logger = logging.getLogger(__name__)


class AWSClientManager:
    """Builds the Kinesis client from explicit AWS configuration."""

    def __init__(self, aws_config: AWSConfig, environ: Optional[Mapping[str, str]] = None):
        self.config = aws_config
        self._environ = os.environ if environ is None else environ
        self._kinesis_client = None

        if not aws_config.region:
            raise ConfigurationError("AWS region must be set")

        # A single attempt per call; failures are surfaced to the caller as-is
        self._boto_config = Config(
            region_name=aws_config.region,
            retries={
                'total_max_attempts': 1,
                'mode': 'standard'
            },
            connect_timeout=10,
            read_timeout=30
        )

    @property
    def kinesis_client(self):
        """Get or create Kinesis client."""
        if self._kinesis_client is None:
            self._kinesis_client = self._create_kinesis_client()
        return self._kinesis_client

    def _create_session(self) -> boto3.Session:
        if self.config.credential_source is CredentialSource.DEFAULT_CHAIN:
            return boto3.Session(region_name=self.config.region)

        credentials = EnvProvider(environ=self._environ).load()
        if credentials is None:
            raise ConfigurationError(
                "AWS credentials not found in environment: "
                "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set"
            )

        return boto3.Session(
            aws_access_key_id=credentials.access_key,
            aws_secret_access_key=credentials.secret_key,
            aws_session_token=credentials.token,
            region_name=self.config.region
        )

    def _create_kinesis_client(self):
        try:
            session = self._create_session()

            if self.config.endpoint_url:
                logger.warning(
                    f"Using endpoint override {self.config.endpoint_url}; "
                    f"TLS enforcement is disabled"
                )
                client = session.client(
                    'kinesis',
                    endpoint_url=self.config.endpoint_url,
                    use_ssl=False,
                    verify=False,
                    config=self._boto_config
                )
            else:
                client = session.client('kinesis', config=self._boto_config)

        except (NoRegionError, NoCredentialsError, PartialCredentialsError, ProfileNotFound) as e:
            raise ConfigurationError(f"Failed to configure AWS session: {e}") from e

        logger.info(
            f"Created Kinesis client in region {self.config.region} "
            f"(credentials: {self.config.credential_source.value})"
        )
        return client


def create_stream_client(
    settings: StreamClientSettings,
    environ: Optional[Mapping[str, str]] = None
) -> KinesisStreamClient:
    """
    Bootstrap a session and return a stream client bound to it.

    Args:
        settings: Loaded settings; only the aws and kinesis sections are used
        environ: Environment mapping for credential lookup (defaults to os.environ)

    Returns:
        KinesisStreamClient holding the new Kinesis client

    Raises:
        ConfigurationError: If region or credentials cannot be resolved
    """
    manager = AWSClientManager(settings.aws, environ=environ)
    return KinesisStreamClient(manager.kinesis_client, settings.kinesis)

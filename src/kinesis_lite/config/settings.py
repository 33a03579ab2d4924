"""Configuration settings using Pydantic for validation."""

import os
import re
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models import StreamIdentity


class CredentialSource(str, Enum):
    """Where the session bootstrap looks for AWS credentials."""
    ENVIRONMENT = "environment"
    DEFAULT_CHAIN = "default_chain"


class AWSConfig(BaseModel):
    """AWS session configuration."""
    region: str = Field(default="eu-west-1", description="AWS region")
    endpoint_url: Optional[str] = Field(
        default=None,
        description="Alternate endpoint, e.g. LocalStack; relaxes TLS enforcement"
    )
    credential_source: CredentialSource = Field(
        default=CredentialSource.ENVIRONMENT,
        description="environment: AWS_* variables only; default_chain: boto3 resolution chain"
    )

    @field_validator('endpoint_url')
    @classmethod
    def empty_endpoint_is_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class KinesisConfig(BaseModel):
    """Kinesis client behaviour."""
    streams: List[StreamIdentity] = Field(default_factory=list, description="Streams to provision on startup")
    waiter_delay_seconds: Optional[int] = Field(default=None, ge=1, description="StreamExists waiter delay")
    waiter_max_attempts: Optional[int] = Field(default=None, ge=1, description="StreamExists waiter attempts")
    strict_single_shard: bool = Field(
        default=False,
        description="Raise instead of warning when a consumed stream has more than one shard"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")
    output: str = Field(default="stdout", description="Log output destination")

    @field_validator('format')
    @classmethod
    def validate_format(cls, v):
        if v.lower() not in ['json', 'text']:
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class StreamClientSettings(BaseSettings):
    """Top-level settings for the stream client."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    aws: AWSConfig = Field(default_factory=AWSConfig)
    kinesis: KinesisConfig = Field(default_factory=KinesisConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def substitute_env_vars(obj: Any) -> Any:
    """
    Recursively substitute environment variables in configuration objects.

    Supports syntax:
    - ${VAR_NAME} - Required variable (raises error if not found)
    - ${VAR_NAME:-default} - Optional variable with default value

    Raises:
        ValueError: If required environment variable is not found
    """
    if isinstance(obj, dict):
        return {key: substitute_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [substitute_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        def replace_env_var(match):
            var_expr = match.group(1)

            if ':-' in var_expr:
                var_name, default_value = var_expr.split(':-', 1)
                return os.getenv(var_name.strip(), default_value)

            var_name = var_expr.strip()
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable '{var_name}' is not set")
            return value

        return re.sub(r'\$\{([^}]+)\}', replace_env_var, obj)
    else:
        return obj


def load_settings(config_file: Optional[str] = None) -> StreamClientSettings:
    """
    Load settings from a YAML config file and environment variables.

    Args:
        config_file: Path to YAML configuration file

    Returns:
        StreamClientSettings: Validated configuration object

    Raises:
        ValueError: If required environment variables are missing
        FileNotFoundError: If config file doesn't exist
    """
    if config_file and os.path.exists(config_file):
        import yaml

        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        config_data = substitute_env_vars(raw_config)
        return StreamClientSettings(**config_data)

    elif config_file:
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    return StreamClientSettings()

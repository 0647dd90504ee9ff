"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class RedisConfig(BaseSettings):
    """Redis cache configuration."""

    model_config = {"env_prefix": "PERSONA_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: str | None = None


class DynamoDBConfig(BaseSettings):
    """DynamoDB entity table configuration."""

    model_config = {"env_prefix": "PERSONA_DYNAMO_"}

    table_name: str = "persona-entities"
    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class S3Config(BaseSettings):
    """S3 document storage configuration."""

    model_config = {"env_prefix": "PERSONA_S3_"}

    bucket: str = "persona-uploads"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class NotificationConfig(BaseSettings):
    """Approval/rejection email configuration (SES)."""

    model_config = {"env_prefix": "PERSONA_NOTIFY_"}

    enabled: bool = False  # False logs notifications instead of sending
    sender: str = "no-reply@persona.local"
    sender_name: str = "Persona System"
    region: str = "us-east-1"
    endpoint_url: str | None = None


class WorkflowConfig(BaseSettings):
    """Cache lifetimes and upload limits."""

    model_config = {"env_prefix": "PERSONA_WORKFLOW_"}

    entity_cache_ttl: int = 1800
    temp_entity_ttl: int = 1800
    max_file_size: int = 10 * 1024 * 1024
    max_documents_per_upload: int = 10


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "PERSONA_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    redis: RedisConfig = RedisConfig()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    s3: S3Config = S3Config()
    notifications: NotificationConfig = NotificationConfig()
    workflow: WorkflowConfig = WorkflowConfig()

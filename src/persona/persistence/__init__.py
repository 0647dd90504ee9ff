"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from persona.core.config import AppSettings
from persona.persistence.dynamodb_backend import DynamoDBEntityStore
from persona.persistence.redis_backend import RedisCacheBackend
from persona.persistence.s3_backend import S3DocumentStore


def create_persistence(settings: AppSettings | None = None):
    """Create wired-up persistence backends from application settings.

    Returns:
        Tuple of (entity_store, cache, document_store).
    """
    if settings is None:
        settings = AppSettings()

    cache = RedisCacheBackend(
        host=settings.redis.host,
        port=settings.redis.port,
        db=settings.redis.db,
        password=settings.redis.password,
    )

    entity_store = DynamoDBEntityStore(
        table_name=settings.dynamodb.table_name,
        table_suffix=settings.dynamodb.table_suffix,
        region=settings.dynamodb.region,
        endpoint_url=settings.dynamodb.endpoint_url,
    )

    document_store = S3DocumentStore(
        bucket=settings.s3.bucket,
        region=settings.s3.region,
        endpoint_url=settings.s3.endpoint_url,
    )

    return entity_store, cache, document_store

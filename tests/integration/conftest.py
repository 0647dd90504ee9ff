"""Integration test fixtures: LocalStack DynamoDB and S3."""

from __future__ import annotations

import os

import boto3
import pytest

from persona.persistence.dynamodb_backend import create_entity_table

# Default LocalStack endpoint
LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")
TABLE_NAME = "persona-entities"
TABLE_SUFFIX = "-inttest"
BUCKET = "persona-uploads-inttest"


def _localstack_available() -> bool:
    """Check if LocalStack is reachable."""
    try:
        client = boto3.client("dynamodb", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)
        client.list_tables()
        return True
    except Exception:
        return False


skip_no_localstack = pytest.mark.skipif(
    not _localstack_available(),
    reason="LocalStack not available",
)


@pytest.fixture(scope="session")
def localstack_ddb():
    """DynamoDB resource pointing at LocalStack."""
    return boto3.resource("dynamodb", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)


@pytest.fixture(scope="session")
def localstack_s3():
    """S3 client pointing at LocalStack."""
    return boto3.client("s3", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)


@pytest.fixture(scope="session")
def entity_table(localstack_ddb):
    """Create the entity table once per session; returns its suffix."""
    create_entity_table(localstack_ddb, f"{TABLE_NAME}{TABLE_SUFFIX}")
    return TABLE_SUFFIX


@pytest.fixture(scope="session")
def upload_bucket(localstack_s3):
    existing = [b["Name"] for b in localstack_s3.list_buckets().get("Buckets", [])]
    if BUCKET not in existing:
        localstack_s3.create_bucket(Bucket=BUCKET)
    return BUCKET

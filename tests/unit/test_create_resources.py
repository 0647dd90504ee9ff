"""Tests for the resource bootstrap script."""

from __future__ import annotations

import sys
from pathlib import Path

import boto3
import pytest
from moto import mock_aws

# Make scripts/ importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "scripts"))

from create_resources import SAMPLE_ENTITIES, create_bucket, create_table, seed_sample_entities  # noqa: E402

from persona.models.entity import EntityStatus  # noqa: E402
from persona.persistence.dynamodb_backend import DynamoDBEntityStore  # noqa: E402

REGION = "us-east-1"


@pytest.fixture
def aws():
    with mock_aws():
        yield


class TestCreateTable:
    def test_creates_entity_table(self, aws):
        ddb = boto3.resource("dynamodb", region_name=REGION)
        create_table(ddb, "persona-entities-test")
        assert boto3.client("dynamodb", region_name=REGION).list_tables()["TableNames"] == [
            "persona-entities-test",
        ]

    def test_idempotent_skips_existing(self, aws):
        ddb = boto3.resource("dynamodb", region_name=REGION)
        create_table(ddb, "persona-entities-test")
        create_table(ddb, "persona-entities-test")  # should not raise


class TestCreateBucket:
    def test_creates_bucket(self, aws):
        s3 = boto3.client("s3", region_name=REGION)
        create_bucket(s3, "persona-uploads-test", REGION)
        assert [b["Name"] for b in s3.list_buckets()["Buckets"]] == ["persona-uploads-test"]

    def test_idempotent_skips_existing(self, aws):
        s3 = boto3.client("s3", region_name=REGION)
        create_bucket(s3, "persona-uploads-test", REGION)
        create_bucket(s3, "persona-uploads-test", REGION)


class TestSeedSampleEntities:
    def test_seeds_once(self, aws):
        create_table(boto3.resource("dynamodb", region_name=REGION), "persona-entities-test")
        store = DynamoDBEntityStore(table_suffix="-test", region=REGION)

        assert seed_sample_entities(store) == len(SAMPLE_ENTITIES)
        assert seed_sample_entities(store) == 0
        counts = store.count_by_status()
        assert counts == {EntityStatus.PENDING.value: 2, EntityStatus.UNDER_REVIEW.value: 1}

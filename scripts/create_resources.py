"""Create the DynamoDB entity table and S3 upload bucket, optionally with sample entities.

Usage:
    python scripts/create_resources.py --endpoint-url http://localhost:4566 --sample
"""

from __future__ import annotations

import argparse
from typing import Any

import boto3
from botocore.exceptions import ClientError

from persona.core.ids import new_entity_id, new_inquiry_id
from persona.models.entity import Entity, EntityStatus
from persona.persistence.dynamodb_backend import DynamoDBEntityStore, create_entity_table

SAMPLE_ENTITIES: list[dict[str, Any]] = [
    {"name": "Jane Smith", "identificationNumber": "ID789456123", "email": "jane.smith@example.com",
     "address": {"street": "456 Oak Ave", "city": "Los Angeles", "state": "CA",
                 "country": "USA", "postalCode": "90210"}},
    {"name": "Rahul Mehta", "identificationNumber": "ID552210987", "email": "rahul.mehta@example.com",
     "address": {"street": "12 MG Road", "city": "Pune", "state": "MH",
                 "country": "India", "postalCode": "411001"}},
    {"name": "Ana Souza", "identificationNumber": "ID330017744", "email": "ana.souza@example.com",
     "status": "UNDER_REVIEW",
     "address": {"street": "Rua Augusta 900", "city": "Sao Paulo", "state": "SP",
                 "country": "Brazil", "postalCode": "01304-001"}},
]


def create_table(ddb: Any, table_name: str) -> None:
    """Create the entity table. Skips if it already exists."""
    existing = ddb.meta.client.list_tables().get("TableNames", [])
    if table_name in existing:
        print(f"  Table {table_name} already exists, skipping")
        return
    create_entity_table(ddb, table_name)
    print(f"  Created table {table_name}")


def create_bucket(s3: Any, bucket: str, region: str) -> None:
    """Create the upload bucket. Skips if it already exists."""
    try:
        s3.head_bucket(Bucket=bucket)
        print(f"  Bucket {bucket} already exists, skipping")
        return
    except ClientError:
        pass
    kwargs: dict[str, Any] = {"Bucket": bucket}
    if region != "us-east-1":
        kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}
    s3.create_bucket(**kwargs)
    print(f"  Created bucket {bucket}")


def seed_sample_entities(store: DynamoDBEntityStore) -> int:
    """Insert the sample entities that are not already present."""
    seeded = 0
    for sample in SAMPLE_ENTITIES:
        if store.find_by_identification_number(sample["identificationNumber"]) is not None:
            continue
        entity = Entity.model_validate({
            "status": EntityStatus.PENDING,
            **sample,
            "id": new_entity_id(),
            "inquiryId": new_inquiry_id(),
            "createdBy": "seed",
        })
        store.insert(entity)
        seeded += 1
    return seeded


def main() -> None:
    parser = argparse.ArgumentParser(description="Create AWS resources for Persona")
    parser.add_argument("--endpoint-url", default=None, help="AWS endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-name", default="persona-entities", help="Entity table base name")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--bucket", default="persona-uploads", help="S3 upload bucket")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument("--sample", action="store_true", help="Insert sample entities")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    table_name = f"{args.table_name}{args.table_suffix}"
    print("Creating resources...")
    create_table(boto3.resource("dynamodb", **kwargs), table_name)
    create_bucket(boto3.client("s3", **kwargs), args.bucket, args.region)

    if args.sample:
        store = DynamoDBEntityStore(
            table_name=args.table_name,
            table_suffix=args.table_suffix,
            region=args.region,
            endpoint_url=args.endpoint_url,
        )
        print(f"  Seeded {seed_sample_entities(store)} sample entities")

    print("Done.")


if __name__ == "__main__":
    main()

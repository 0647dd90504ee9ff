"""DynamoDB backend implementing IEntityStore.

Single-table layout (PK/SK strings):

    ENTITY#<id>           / PROFILE   the entity itself
    IDNUM#<idNumber>      / UNIQUE    uniqueness guard -> entityId
    INQUIRY#<inquiryId>   / UNIQUE    uniqueness guard -> entityId

Entity writes go through TransactWriteItems so the guards and the entity row
commit together; a failed ``attribute_not_exists`` condition on a guard is the
authoritative duplicate-identifier signal.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from persona.core.exceptions import DuplicateIdentifierError, NotFoundError, StorageError
from persona.models.entity import Entity
from persona.models.query import EntityQuery

logger = logging.getLogger(__name__)

ENTITY_SK = "PROFILE"
GUARD_SK = "UNIQUE"
_GUARDED_FIELDS = (
    ("identificationNumber", "IDNUM"),
    ("inquiryId", "INQUIRY"),
)


def _decode_decimals(value: Any) -> Any:
    """Convert Decimal values in a DynamoDB item to int/float, recursively."""
    if isinstance(value, Decimal):
        return int(value) if value == int(value) else float(value)
    if isinstance(value, dict):
        return {k: _decode_decimals(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode_decimals(v) for v in value]
    return value


def _entity_pk(entity_id: str) -> str:
    return f"ENTITY#{entity_id}"


def _guard_pk(prefix: str, value: str) -> str:
    return f"{prefix}#{value}"


def _to_item(entity: Entity) -> dict[str, Any]:
    # Round-trip through JSON so floats in additionalData become Decimal.
    body = json.loads(entity.model_dump_json(by_alias=True, exclude_none=True), parse_float=Decimal)
    return {"PK": _entity_pk(entity.id), "SK": ENTITY_SK, **body}


def _from_item(item: dict[str, Any]) -> Entity:
    body = {k: v for k, v in _decode_decimals(item).items() if k not in ("PK", "SK")}
    return Entity.model_validate(body)


def create_entity_table(ddb: Any, table_name: str) -> None:
    """Create the single entity table. Skips if it already exists."""
    client = ddb.meta.client
    if table_name in client.list_tables().get("TableNames", []):
        return
    client.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )


class DynamoDBEntityStore:
    """Production IEntityStore backed by a single DynamoDB table."""

    def __init__(self, table_name: str = "persona-entities", table_suffix: str = "",
                 region: str = "us-east-1", endpoint_url: str | None = None) -> None:
        self._table_name = f"{table_name}{table_suffix}"
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)
        self._table = self._ddb.Table(self._table_name)

    @property
    def table_name(self) -> str:
        return self._table_name

    # ---- internals ----

    def _get_item(self, pk: str, sk: str) -> dict[str, Any] | None:
        try:
            resp = self._table.get_item(Key={"PK": pk, "SK": sk})
        except ClientError as exc:
            raise StorageError(f"DynamoDB GET failed for {pk!r}: {exc}") from exc
        return resp.get("Item")

    def _scan_entities(self) -> list[Entity]:
        """Read every entity row, following LastEvaluatedKey."""
        kwargs: dict[str, Any] = {"FilterExpression": Attr("SK").eq(ENTITY_SK)}
        entities: list[Entity] = []
        try:
            while True:
                resp = self._table.scan(**kwargs)
                entities.extend(_from_item(item) for item in resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    return entities
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except ClientError as exc:
            raise StorageError(f"DynamoDB SCAN failed on {self._table_name}: {exc}") from exc

    def _guard_put(self, prefix: str, value: str, entity_id: str) -> dict[str, Any]:
        return {
            "Put": {
                "TableName": self._table_name,
                "Item": {"PK": _guard_pk(prefix, value), "SK": GUARD_SK, "entityId": entity_id},
                "ConditionExpression": "attribute_not_exists(PK)",
            }
        }

    def _guard_delete(self, prefix: str, value: str) -> dict[str, Any]:
        return {
            "Delete": {
                "TableName": self._table_name,
                "Key": {"PK": _guard_pk(prefix, value), "SK": GUARD_SK},
            }
        }

    def _transact(self, items: list[dict[str, Any]], conflicts: dict[int, Exception]) -> None:
        """Run a write transaction; ``conflicts`` maps an item index to the error
        raised when that item's condition check fails."""
        try:
            self._ddb.meta.client.transact_write_items(TransactItems=items)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") != "TransactionCanceledException":
                raise StorageError(f"DynamoDB transaction failed on {self._table_name}: {exc}") from exc
            reasons = exc.response.get("CancellationReasons", [])
            for index, reason in enumerate(reasons):
                if reason.get("Code") == "ConditionalCheckFailed" and index in conflicts:
                    raise conflicts[index] from exc
            logger.warning("Entity transaction cancelled on %s: %s", self._table_name, reasons)
            if conflicts and not reasons:
                raise conflicts[min(conflicts)] from exc
            raise StorageError(f"DynamoDB transaction cancelled on {self._table_name}: {exc}") from exc

    # ---- IEntityStore methods ----

    def insert(self, entity: Entity) -> Entity:
        item = _to_item(entity)
        items: list[dict[str, Any]] = []
        conflicts: dict[int, Exception] = {}
        for field, prefix in _GUARDED_FIELDS:
            conflicts[len(items)] = DuplicateIdentifierError(field, item[field])
            items.append(self._guard_put(prefix, item[field], entity.id))
        conflicts[len(items)] = DuplicateIdentifierError("id", entity.id)
        items.append({
            "Put": {
                "TableName": self._table_name,
                "Item": item,
                "ConditionExpression": "attribute_not_exists(PK)",
            }
        })
        self._transact(items, conflicts)
        logger.debug("Inserted entity %s", entity.id)
        return entity

    def find_by_id(self, entity_id: str) -> Entity | None:
        item = self._get_item(_entity_pk(entity_id), ENTITY_SK)
        return _from_item(item) if item else None

    def find_by_identification_number(self, identification_number: str) -> Entity | None:
        guard = self._get_item(_guard_pk("IDNUM", identification_number), GUARD_SK)
        if guard is None:
            return None
        return self.find_by_id(guard["entityId"])

    def find(self, query: EntityQuery) -> tuple[list[Entity], int]:
        matched = query.order([e for e in self._scan_entities() if query.matches(e)])
        return matched[query.skip:query.skip + query.limit], len(matched)

    def update(self, entity: Entity) -> Entity:
        current = self.find_by_id(entity.id)
        if current is None:
            raise NotFoundError(f"Entity {entity.id!r} not found")

        item = _to_item(entity)
        old = _to_item(current)
        items: list[dict[str, Any]] = []
        conflicts: dict[int, Exception] = {}
        changed = [(f, p) for f, p in _GUARDED_FIELDS if item[f] != old[f]]
        # Claim the new identifier before releasing the old one.
        for field, prefix in changed:
            conflicts[len(items)] = DuplicateIdentifierError(field, item[field])
            items.append(self._guard_put(prefix, item[field], entity.id))
        for field, prefix in changed:
            items.append(self._guard_delete(prefix, old[field]))
        conflicts[len(items)] = NotFoundError(f"Entity {entity.id!r} not found")
        items.append({
            "Put": {
                "TableName": self._table_name,
                "Item": item,
                "ConditionExpression": "attribute_exists(PK)",
            }
        })
        self._transact(items, conflicts)
        return entity

    def delete(self, entity_id: str) -> bool:
        current = self.find_by_id(entity_id)
        if current is None:
            return False
        old = _to_item(current)
        items = [self._guard_delete(prefix, old[field]) for field, prefix in _GUARDED_FIELDS]
        items.append({
            "Delete": {
                "TableName": self._table_name,
                "Key": {"PK": _entity_pk(entity_id), "SK": ENTITY_SK},
            }
        })
        try:
            self._ddb.meta.client.transact_write_items(TransactItems=items)
        except ClientError as exc:
            raise StorageError(f"DynamoDB delete failed for entity {entity_id!r}: {exc}") from exc
        return True

    def count_by_status(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for entity in self._scan_entities():
            counts[entity.status.value] = counts.get(entity.status.value, 0) + 1
        return counts

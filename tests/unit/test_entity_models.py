"""Tests for entity, query and wizard models."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pydantic
import pytest

from persona.core.ids import new_inquiry_id, new_temp_entity_id
from persona.models.entity import DocumentType, EntityCreate, EntityStatus
from persona.models.query import EntityQuery, EntityStats, Pagination, SortField, SortOrder
from persona.models.wizard import InProgressEntity, WizardStep


class TestEntity:
    def test_email_is_lowercased(self, make_entity):
        assert make_entity(email="Ada@Example.COM").email == "ada@example.com"

    def test_serializes_camel_case(self, make_entity):
        data = make_entity().to_json_dict()
        assert data["identificationNumber"] == "ID-10001"
        assert data["address"]["postalCode"] == "NW1"
        assert "approvalNotes" not in data

    def test_terminal_statuses(self, make_entity):
        assert not make_entity(status=EntityStatus.PENDING).is_terminal
        assert not make_entity(status=EntityStatus.UNDER_REVIEW).is_terminal
        assert make_entity(status=EntityStatus.APPROVED).is_terminal
        assert make_entity(status=EntityStatus.REJECTED).is_terminal

    def test_full_address(self, make_entity):
        assert make_entity().full_address == "12 Analytical Way, London, Greater London, UK NW1"

    def test_rejects_overlong_notes(self, make_entity):
        with pytest.raises(pydantic.ValidationError):
            make_entity(approval_notes="x" * 501)


class TestEntityCreate:
    def test_identification_number_pattern(self):
        with pytest.raises(pydantic.ValidationError):
            EntityCreate.model_validate({
                "name": "Bo",
                "identificationNumber": "ID 1!",
                "email": "bo@example.com",
                "address": {"street": "s", "city": "c", "state": "st", "country": "co", "postalCode": "p"},
            })

    def test_accepts_camel_case_payload(self):
        body = EntityCreate.model_validate({
            "name": "  Bo Diddley ",
            "identificationNumber": "AB-12345",
            "email": "bo@example.com",
            "address": {"street": "s", "city": "c", "state": "st", "country": "co", "postalCode": "p"},
        })
        assert body.name == "Bo Diddley"
        assert body.address.postal_code == "p"


def test_document_type_from_mime_type():
    assert DocumentType.from_mime_type("image/png") is DocumentType.IMAGE
    assert DocumentType.from_mime_type("application/pdf") is DocumentType.PDF
    assert DocumentType.from_mime_type("text/csv") is DocumentType.CSV
    assert DocumentType.from_mime_type("application/vnd.ms-excel") is DocumentType.CSV
    assert DocumentType.from_mime_type("application/zip") is DocumentType.OTHER


class TestEntityQuery:
    def test_matches_status_and_search(self, make_entity):
        entity = make_entity()
        assert EntityQuery(status=EntityStatus.PENDING).matches(entity)
        assert not EntityQuery(status=EntityStatus.APPROVED).matches(entity)
        assert EntityQuery(search="LOVELACE").matches(entity)
        assert EntityQuery(search="inq-1").matches(entity)
        assert not EntityQuery(search="babbage").matches(entity)

    def test_order_by_name_ascending(self, make_entity):
        a = make_entity(id="1", name="Charlie")
        b = make_entity(id="2", name="Alice")
        query = EntityQuery(sort_by=SortField.NAME, sort_order=SortOrder.ASC)
        assert [e.name for e in query.order([a, b])] == ["Alice", "Charlie"]

    def test_order_newest_first_by_default(self, make_entity):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        old = make_entity(id="old", created_at=now)
        new = make_entity(id="new", created_at=now + timedelta(days=1))
        assert [e.id for e in EntityQuery().order([old, new])] == ["new", "old"]

    def test_missing_sort_values_sort_lowest(self, make_entity):
        decided = make_entity(id="a", approval_date=datetime(2024, 1, 1, tzinfo=timezone.utc))
        undecided = make_entity(id="b")
        query = EntityQuery(sort_by=SortField.APPROVAL_DATE, sort_order=SortOrder.ASC)
        assert [e.id for e in query.order([decided, undecided])] == ["b", "a"]

    def test_limit_is_bounded(self):
        with pytest.raises(pydantic.ValidationError):
            EntityQuery(limit=101)
        with pytest.raises(pydantic.ValidationError):
            EntityQuery(page=0)

    def test_skip(self):
        assert EntityQuery(page=3, limit=10).skip == 20


class TestPagination:
    def test_middle_page(self):
        p = Pagination.build(total_docs=25, page=2, limit=10)
        assert p.total_pages == 3
        assert p.has_prev_page and p.has_next_page
        assert (p.prev_page, p.next_page) == (1, 3)

    def test_empty_result(self):
        p = Pagination.build(total_docs=0, page=1, limit=10)
        assert p.total_pages == 0
        assert not p.has_prev_page
        assert not p.has_next_page
        assert p.next_page is None


def test_stats_from_counts():
    stats = EntityStats.from_counts({"PENDING": 2, "APPROVED": 1, "UNDER_REVIEW": 3})
    assert stats.total == 6
    assert stats.pending == 2
    assert stats.rejected == 0
    assert stats.to_json_dict()["underReview"] == 3


class TestWizardModels:
    def test_step_numbers(self):
        assert WizardStep.BASIC_INFO.number == 1
        assert WizardStep.FINAL_SUBMISSION.number == 6

    def test_entity_data_strips_bookkeeping(self):
        record = InProgressEntity(
            name="Ada",
            identification_number="ID-10001",
            started_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            step=2,
            completed_steps=[WizardStep.BASIC_INFO, WizardStep.CONTACT_INFO],
        )
        assert record.entity_data() == {"name": "Ada", "identificationNumber": "ID-10001"}


def test_generated_identifier_formats():
    assert new_temp_entity_id().startswith("temp_entity_")
    parts = new_inquiry_id().split("-")
    assert parts[0] == "INQ"
    assert parts[1].isdigit()
    assert len(parts[2]) == 9


def test_entity_dump_omits_empty_optionals(make_entity):
    data = make_entity().model_dump(by_alias=True)
    assert "profilePhoto" not in data
    assert "approvedBy" not in data
    assert data["documents"] == []
    assert data["phone"] == "555-0100"

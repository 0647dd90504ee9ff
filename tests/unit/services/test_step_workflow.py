"""Unit tests for the six-step creation wizard."""

from __future__ import annotations

import pytest

from persona.core.exceptions import DuplicateIdentifierError, SessionExpiredError, ValidationError
from persona.models.entity import Address, Document, DocumentType, EntityStatus
from persona.models.wizard import (
    AddressInfoStep,
    BasicInfoStep,
    ContactInfoStep,
    DocumentsStep,
    FinalizeStep,
    ProfilePhotoStep,
    WizardStep,
)
from persona.services.step_workflow import StepWorkflowEngine
from persona.services.wizard_sessions import WizardSessionStore, temp_entity_key

ADDRESS = Address(street="456 Oak Ave", city="LA", state="CA", country="USA", postal_code="90210")


def _doc(filename: str, mime_type: str = "application/pdf") -> Document:
    return Document(
        type=DocumentType.from_mime_type(mime_type),
        filename=filename,
        original_name=filename,
        mime_type=mime_type,
        size=12,
        path=f"documents/{filename}",
    )


@pytest.fixture
def steps(services):
    return services.steps


@pytest.fixture
def begun(steps):
    result = steps.begin(BasicInfoStep(name="Jane Smith", identification_number="ID789456123"), "actor-1")
    return result.temp_entity_id


class TestBegin:
    def test_creates_temp_record(self, steps, cache):
        result = steps.begin(BasicInfoStep(name="Jane Smith", identification_number="ID789456123"))
        assert result.temp_entity_id.startswith("temp_entity_")
        assert result.step == 1
        assert result.next_step == 2
        assert result.completed_steps == [WizardStep.BASIC_INFO]
        assert result.entity_data == {"name": "Jane Smith", "identificationNumber": "ID789456123"}
        assert cache.ttl(temp_entity_key(result.temp_entity_id)) == 1800

    def test_duplicate_identification_number(self, steps, cache, store, make_entity):
        store.insert(make_entity(identification_number="ID789456123"))
        with pytest.raises(DuplicateIdentifierError):
            steps.begin(BasicInfoStep(name="Jane Smith", identification_number="ID789456123"))
        assert cache._store == {}

    def test_uses_injected_id_factory(self, services):
        engine = StepWorkflowEngine(
            sessions=WizardSessionStore(services.cache),
            repository=services.repository,
            id_factory=lambda: "temp_entity_fixed",
        )
        result = engine.begin(BasicInfoStep(name="Jane Smith", identification_number="ID789456123"))
        assert result.temp_entity_id == "temp_entity_fixed"


class TestIntermediateSteps:
    def test_contact_merges_fields(self, steps, begun):
        result = steps.contact(begun, ContactInfoStep(email="jane@x.com", phone="555-0101"))
        assert result.step == 2
        assert result.entity_data["email"] == "jane@x.com"
        assert result.entity_data["name"] == "Jane Smith"

    def test_each_step_restarts_ttl(self, steps, begun, cache, clock):
        clock.advance(1700)
        steps.contact(begun, ContactInfoStep(email="jane@x.com"))
        clock.advance(1700)
        assert steps.progress(begun).current_step == 2

    def test_unknown_temp_id_is_session_expired(self, steps, cache):
        with pytest.raises(SessionExpiredError):
            steps.contact("temp_entity_missing", ContactInfoStep(email="jane@x.com"))
        assert cache.get(temp_entity_key("temp_entity_missing")) is None

    def test_expired_record(self, steps, begun, clock):
        clock.advance(1800)
        with pytest.raises(SessionExpiredError):
            steps.address(begun, AddressInfoStep(address=ADDRESS))

    def test_steps_may_be_skipped(self, steps, begun):
        result = steps.address(begun, AddressInfoStep(address=ADDRESS))
        assert result.step == 3
        assert result.completed_steps == [WizardStep.BASIC_INFO, WizardStep.ADDRESS_INFO]

    def test_repeating_step_appends_tag_again(self, steps, begun):
        steps.contact(begun, ContactInfoStep(email="jane@x.com"))
        steps.contact(begun, ContactInfoStep(email="jane@y.com"))
        progress = steps.progress(begun)
        assert progress.completed_steps == [
            WizardStep.BASIC_INFO, WizardStep.CONTACT_INFO, WizardStep.CONTACT_INFO,
        ]
        assert progress.entity_data["email"] == "jane@y.com"

    def test_earlier_step_moves_step_back(self, steps, begun):
        steps.address(begun, AddressInfoStep(address=ADDRESS))
        steps.contact(begun, ContactInfoStep(email="jane@x.com"))
        result = steps.contact(begun, ContactInfoStep(email="jane@y.com"))
        progress = steps.progress(begun)
        assert result.step == 2
        assert progress.current_step == 2
        assert progress.next_step == 3
        assert progress.completed_steps == [
            WizardStep.BASIC_INFO, WizardStep.ADDRESS_INFO,
            WizardStep.CONTACT_INFO, WizardStep.CONTACT_INFO,
        ]


class TestProgressAndCancel:
    def test_progress(self, steps, begun):
        steps.contact(begun, ContactInfoStep(email="jane@x.com"))
        steps.address(begun, AddressInfoStep(address=ADDRESS))
        progress = steps.progress(begun)
        assert progress.current_step == 3
        assert progress.total_steps == 6
        assert progress.progress_percent == 50
        assert progress.next_step == 4

    def test_cancel_removes_record(self, steps, begun):
        steps.cancel(begun)
        with pytest.raises(SessionExpiredError):
            steps.progress(begun)

    def test_cancel_unknown_is_noop(self, steps):
        steps.cancel("temp_entity_never_existed")


class TestFinalize:
    def test_minimal_flow_creates_pending_entity(self, steps, begun, store):
        steps.contact(begun, ContactInfoStep(email="jane@x.com"))
        steps.address(begun, AddressInfoStep(address=ADDRESS))
        result = steps.finalize(begun, FinalizeStep())

        entity = result.entity
        assert entity.status is EntityStatus.PENDING
        assert entity.inquiry_id.startswith("INQ-")
        assert entity.documents == []
        assert entity.profile_photo is None
        assert entity.created_by == "actor-1"
        assert result.submitted_steps == [s.value for s in WizardStep]
        assert store.find_by_id(entity.id) == entity
        with pytest.raises(SessionExpiredError):
            steps.progress(begun)

    def test_full_flow_is_union_of_inputs(self, steps, begun):
        photo = _doc("profilePhoto-1.png", "image/png")
        docs = [_doc("documents-1.pdf"), _doc("documents-2.csv", "text/csv")]
        steps.contact(begun, ContactInfoStep(email="Jane@X.com", phone="555-0101"))
        steps.address(begun, AddressInfoStep(address=ADDRESS))
        steps.photo(begun, ProfilePhotoStep(profile_photo_data=photo))
        steps.documents(begun, DocumentsStep(documents=docs))
        entity = steps.finalize(begun, FinalizeStep(additional_data={"referrer": "partner"})).entity

        assert entity.name == "Jane Smith"
        assert entity.identification_number == "ID789456123"
        assert entity.email == "jane@x.com"
        assert entity.phone == "555-0101"
        assert entity.address == ADDRESS
        assert entity.profile_photo == photo
        assert entity.documents == docs
        assert entity.additional_data == {"referrer": "partner"}

    def test_missing_required_fields(self, steps, begun):
        with pytest.raises(ValidationError) as excinfo:
            steps.finalize(begun)
        assert "email" in str(excinfo.value)
        assert "address" in str(excinfo.value)
        # record survives so the caller can fill the gaps
        assert steps.progress(begun).current_step == 1

    def test_duplicate_raced_in_after_begin(self, steps, begun, store, make_entity):
        steps.contact(begun, ContactInfoStep(email="jane@x.com"))
        steps.address(begun, AddressInfoStep(address=ADDRESS))
        store.insert(make_entity(id="other", identification_number="ID789456123"))
        with pytest.raises(DuplicateIdentifierError):
            steps.finalize(begun)
        assert steps.progress(begun).current_step == 3

    def test_unknown_temp_id(self, steps):
        with pytest.raises(SessionExpiredError):
            steps.finalize("temp_entity_missing")

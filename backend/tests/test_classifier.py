"""
Tests for change-event classification.
"""
import pytest

from ops_notifier.models.schemas import WebhookPayload
from ops_notifier.services.classifier import classify


def payload(**values) -> WebhookPayload:
    return WebhookPayload.model_validate(values)


class TestProjectChanges:

    @pytest.mark.unit
    def test_insert_is_project_created(self):
        event = classify(payload(
            type="INSERT",
            table="projects",
            record={"id": 42, "name": "Pad Relaunch", "manager": "Lee"},
        ))

        assert event.type == "project_created"
        assert event.data["name"] == "Pad Relaunch"

    @pytest.mark.unit
    def test_update_into_completed(self):
        event = classify(payload(
            type="UPDATE",
            table="projects",
            record={"id": 7, "name": "Serum", "status": "completed", "updated_at": "2024-05-02T10:00:00Z"},
            old_record={"id": 7, "status": "in_progress"},
        ))

        assert event.type == "project_completed"
        assert event.data["completed_date"] == "2024-05-02"

    @pytest.mark.unit
    def test_completed_with_null_completed_date(self):
        event = classify(payload(
            type="UPDATE",
            table="projects",
            record={"id": 7, "status": "completed", "completed_date": None, "updated_at": "2024-05-02T10:00:00Z"},
            old_record={"id": 7, "status": "in_progress"},
        ))

        assert event.type == "project_completed"
        assert event.data["completed_date"] == "2024-05-02"

    @pytest.mark.unit
    def test_completed_keeps_explicit_completed_date(self):
        event = classify(payload(
            type="UPDATE",
            table="projects",
            record={"id": 7, "status": "completed", "completed_date": "2024-05-01", "updated_at": "2024-05-02T10:00:00Z"},
            old_record={"status": "in_progress"},
        ))

        assert event.data["completed_date"] == "2024-05-01"

    @pytest.mark.unit
    def test_other_status_change(self):
        event = classify(payload(
            type="UPDATE",
            table="projects",
            record={"id": 3, "name": "Toner", "status": "on_hold"},
            old_record={"id": 3, "status": "pending"},
        ))

        assert event.type == "project_status_changed"
        assert event.data["old_status"] == "pending"
        assert event.data["new_status"] == "on_hold"

    @pytest.mark.unit
    def test_unchanged_status_is_not_notifiable(self):
        assert classify(payload(
            type="UPDATE",
            table="projects",
            record={"id": 3, "status": "pending", "name": "Renamed"},
            old_record={"id": 3, "status": "pending", "name": "Toner"},
        )) is None

    @pytest.mark.unit
    def test_update_without_status_is_not_notifiable(self):
        assert classify(payload(
            type="UPDATE",
            table="projects",
            record={"id": 3, "name": "Renamed"},
            old_record={"id": 3, "status": "pending"},
        )) is None

    @pytest.mark.unit
    def test_completed_to_completed_is_not_notifiable(self):
        assert classify(payload(
            type="UPDATE",
            table="projects",
            record={"id": 7, "status": "completed"},
            old_record={"id": 7, "status": "completed"},
        )) is None

    @pytest.mark.unit
    def test_delete_is_not_notifiable(self):
        assert classify(payload(
            type="DELETE",
            table="projects",
            old_record={"id": 3, "status": "pending"},
        )) is None


class TestSampleChanges:

    @pytest.mark.unit
    def test_insert_is_sample_created(self):
        event = classify(payload(
            type="INSERT",
            table="samples",
            record={"id": "s-1", "name": "Cream A"},
        ))

        assert event.type == "sample_created"

    @pytest.mark.unit
    def test_sample_update_is_not_notifiable(self):
        assert classify(payload(
            type="UPDATE",
            table="samples",
            record={"id": "s-1", "status": "done"},
            old_record={"id": "s-1", "status": "new"},
        )) is None


class TestTableResolution:

    @pytest.mark.unit
    def test_table_inside_record(self):
        event = classify(payload(
            type="INSERT",
            record={"table": "samples", "id": "s-2", "name": "Toner B"},
        ))

        assert event.type == "sample_created"

    @pytest.mark.unit
    def test_unknown_table(self):
        assert classify(payload(type="INSERT", table="brands", record={"id": 1})) is None

    @pytest.mark.unit
    def test_missing_table(self):
        assert classify(payload(type="INSERT", record={"id": 1})) is None

    @pytest.mark.unit
    def test_record_is_not_mutated(self):
        record = {"id": 7, "status": "completed", "updated_at": "2024-05-02T10:00:00Z"}
        original = dict(record)

        classify(payload(type="UPDATE", table="projects", record=record, old_record={"status": "pending"}))

        assert record == original

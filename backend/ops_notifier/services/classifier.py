"""
Change-event classification.

Turns a database webhook payload into the notification it should
produce, or None when the change is not something anyone is notified
about. Stateless and side-effect free.
"""
from typing import Optional

from ops_notifier.models.enums import ChangeType, NotificationType, ProjectStatus, SourceTable
from ops_notifier.models.schemas import NotificationEvent, WebhookPayload


def classify(payload: WebhookPayload) -> Optional[NotificationEvent]:
    """
    Map a change event to a notification.

    Rules:
    - INSERT on projects -> project_created
    - UPDATE on projects into "completed" -> project_completed
    - UPDATE on projects with any other status change -> project_status_changed
    - INSERT on samples -> sample_created
    - anything else -> None
    """
    record = payload.record or {}
    table = payload.source_table

    if table == SourceTable.PROJECTS.value:
        if payload.type == ChangeType.INSERT.value:
            return NotificationEvent(type=NotificationType.PROJECT_CREATED.value, data=dict(record))

        if payload.type == ChangeType.UPDATE.value:
            return _classify_project_update(record, payload.old_record or {})

    if table == SourceTable.SAMPLES.value and payload.type == ChangeType.INSERT.value:
        return NotificationEvent(type=NotificationType.SAMPLE_CREATED.value, data=dict(record))

    return None


def _classify_project_update(record: dict, old_record: dict) -> Optional[NotificationEvent]:
    new_status = record.get("status")
    old_status = old_record.get("status")

    # Partial updates without a status column never count as a transition
    if new_status is None or new_status == old_status:
        return None

    completed = ProjectStatus.COMPLETED.value
    if new_status == completed:
        data = dict(record)
        # Full rows carry completed_date even when it is null
        if not data.get("completed_date"):
            data["completed_date"] = _date_part(record.get("updated_at"))
        return NotificationEvent(type=NotificationType.PROJECT_COMPLETED.value, data=data)

    data = {
        **record,
        "old_status": old_status,
        "new_status": new_status,
    }
    return NotificationEvent(type=NotificationType.PROJECT_STATUS_CHANGED.value, data=data)


def _date_part(timestamp: Optional[str]) -> Optional[str]:
    if not timestamp:
        return None
    return str(timestamp)[:10]

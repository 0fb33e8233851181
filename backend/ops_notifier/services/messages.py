"""
Message Composer for NAVER WORKS notifications.

Maps a notification type and its payload to bot message content.
Pure: no I/O, no clock, and no failure path. Unknown types render a
generic text message.
"""
from datetime import date
from typing import Any, Callable, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ops_notifier.models.enums import NotificationType
from ops_notifier.models.schemas import MessageAction, MessageContent


UNASSIGNED = "미지정"
FALLBACK_TEXT = "알림이 도착했습니다."
PROJECT_ACTION_LABEL = "프로젝트 보기"
SAMPLE_ACTION_LABEL = "샘플 보기"


# ==========================================
# PAYLOAD VIEWS
# The portal sends both snake_case rows and camelCase form data.
# ==========================================

class _PayloadView(BaseModel):
    """Lenient view over a payload dict: every known field is an optional string."""
    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def stringify(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)


class ProjectView(_PayloadView):
    id: Optional[str] = Field(None, validation_alias=AliasChoices("id", "projectId"))
    name: Optional[str] = None
    manager: Optional[str] = None
    due_date: Optional[str] = Field(
        None, validation_alias=AliasChoices("due_date", "dueDate", "target_date", "deadline")
    )
    priority: Optional[str] = None
    completed_date: Optional[str] = Field(
        None, validation_alias=AliasChoices("completed_date", "completedDate")
    )
    old_status: Optional[str] = Field(
        None, validation_alias=AliasChoices("old_status", "previousStatus")
    )
    new_status: Optional[str] = Field(
        None, validation_alias=AliasChoices("new_status", "currentStatus", "status")
    )
    changed_by: Optional[str] = Field(
        None, validation_alias=AliasChoices("changed_by", "changedBy")
    )
    reason: Optional[str] = None


class SampleView(_PayloadView):
    id: Optional[str] = Field(None, validation_alias=AliasChoices("id", "sampleId"))
    name: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("name", "productName", "product_name", "labNumber", "lab_number"),
    )
    project: Optional[str] = Field(
        None, validation_alias=AliasChoices("project", "project_name", "projectName")
    )
    brand: Optional[str] = None
    round: Optional[str] = Field(None, validation_alias=AliasChoices("round", "round_number"))


def _format_date(value: Optional[str]) -> Optional[str]:
    """Trim ISO timestamps to their date part; leave anything else untouched."""
    if not value:
        return value
    try:
        return date.fromisoformat(value[:10]).isoformat()
    except ValueError:
        return value


def _entity_uri(base_url: str, collection: str, entity_id: Optional[str]) -> str:
    base = base_url.rstrip("/")
    if not entity_id:
        return f"{base}/{collection}"
    return f"{base}/{collection}/{entity_id}"


# ==========================================
# TEMPLATES
# ==========================================

class MessageTemplates:
    """Message template definitions using simple string formatting."""

    @classmethod
    def project_created(cls, data: dict, base_url: str) -> MessageContent:
        project = ProjectView.model_validate(data)
        lines = [
            "📋 새 프로젝트가 등록되었습니다",
            "",
            f"프로젝트명: {project.name or UNASSIGNED}",
            f"담당자: {project.manager or UNASSIGNED}",
        ]
        if project.due_date:
            lines.append(f"마감일: {_format_date(project.due_date)}")
        if project.priority:
            lines.append(f"우선순위: {project.priority}")

        return cls._project_message(lines, project, base_url)

    @classmethod
    def project_completed(cls, data: dict, base_url: str) -> MessageContent:
        project = ProjectView.model_validate(data)
        lines = [
            "✅ 프로젝트가 완료되었습니다",
            "",
            f"프로젝트명: {project.name or UNASSIGNED}",
            f"담당자: {project.manager or UNASSIGNED}",
            f"완료일: {_format_date(project.completed_date) or UNASSIGNED}",
        ]
        return cls._project_message(lines, project, base_url)

    @classmethod
    def project_status_changed(cls, data: dict, base_url: str) -> MessageContent:
        project = ProjectView.model_validate(data)
        lines = [
            "🔄 프로젝트 상태가 변경되었습니다",
            "",
            f"프로젝트명: {project.name or UNASSIGNED}",
            f"이전 상태: {project.old_status or UNASSIGNED}",
            f"현재 상태: {project.new_status or UNASSIGNED}",
        ]
        if project.changed_by:
            lines.append(f"변경자: {project.changed_by}")

        return cls._project_message(lines, project, base_url)

    @classmethod
    def sample_created(cls, data: dict, base_url: str) -> MessageContent:
        sample = SampleView.model_validate(data)
        lines = [
            "🧪 새 샘플이 등록되었습니다",
            "",
            f"샘플명: {sample.name or UNASSIGNED}",
        ]
        if sample.project:
            lines.append(f"프로젝트: {sample.project}")
        else:
            lines.append(f"브랜드: {sample.brand or UNASSIGNED}")
        if sample.round:
            lines.append(f"차수: {sample.round}차")

        return MessageContent.button_template(
            "\n".join(lines),
            [MessageAction(label=SAMPLE_ACTION_LABEL, uri=_entity_uri(base_url, "samples", sample.id))],
        )

    @classmethod
    def urgent_project(cls, data: dict, base_url: str) -> MessageContent:
        project = ProjectView.model_validate(data)
        lines = [
            "🚨 긴급 프로젝트 알림",
            "",
            f"프로젝트명: {project.name or UNASSIGNED}",
            f"사유: {project.reason or UNASSIGNED}",
        ]
        if project.due_date:
            lines.append(f"마감일: {_format_date(project.due_date)}")

        return cls._project_message(lines, project, base_url)

    @staticmethod
    def _project_message(lines: list[str], project: ProjectView, base_url: str) -> MessageContent:
        return MessageContent.button_template(
            "\n".join(lines),
            [MessageAction(label=PROJECT_ACTION_LABEL, uri=_entity_uri(base_url, "projects", project.id))],
        )


_TEMPLATES: dict[NotificationType, Callable[[dict, str], MessageContent]] = {
    NotificationType.PROJECT_CREATED: MessageTemplates.project_created,
    NotificationType.PROJECT_COMPLETED: MessageTemplates.project_completed,
    NotificationType.PROJECT_STATUS_CHANGED: MessageTemplates.project_status_changed,
    NotificationType.SAMPLE_CREATED: MessageTemplates.sample_created,
    NotificationType.URGENT_PROJECT: MessageTemplates.urgent_project,
}


def compose(
    event_type: Union[NotificationType, str],
    payload: Optional[dict[str, Any]],
    base_url: str,
) -> MessageContent:
    """
    Build the message content for a notification.

    Args:
        event_type: A NotificationType or its string value
        payload: Domain fields (name, manager, dates, statuses, ...)
        base_url: Portal URL used for the "view" button

    Returns:
        MessageContent; a generic text message for unrecognized types
    """
    try:
        notification_type = NotificationType(event_type)
    except ValueError:
        return MessageContent.plain(FALLBACK_TEXT)

    return _TEMPLATES[notification_type](payload or {}, base_url)

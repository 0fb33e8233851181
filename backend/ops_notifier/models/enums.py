"""
Enum types shared by the webhook boundary and the message pipeline.
Table and status values must stay in sync with the portal database.
"""
from enum import Enum


class ChangeType(str, Enum):
    """
    Row change kinds sent by Supabase database webhooks.
    """
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class SourceTable(str, Enum):
    """Portal tables that can trigger a notification."""
    PROJECTS = "projects"
    SAMPLES = "samples"


class ProjectStatus(str, Enum):
    """
    Project status values.
    Matches the portal's project form: pending, in_progress, completed, on_hold.
    """
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"


class NotificationType(str, Enum):
    """Kinds of notification the composer knows how to render."""
    PROJECT_CREATED = "project_created"
    PROJECT_COMPLETED = "project_completed"
    PROJECT_STATUS_CHANGED = "project_status_changed"
    SAMPLE_CREATED = "sample_created"
    URGENT_PROJECT = "urgent_project"


class ContentType(str, Enum):
    """NAVER WORKS message content types."""
    TEXT = "text"
    BUTTON_TEMPLATE = "button_template"

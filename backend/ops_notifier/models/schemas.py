"""
Pydantic schemas for data validation and serialization.
Covers inbound webhook/notify bodies and the outbound NAVER WORKS message shape.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ops_notifier.utils.sanitize import sanitize_payload
from .enums import ContentType


# ==========================================
# INBOUND: DATABASE WEBHOOK
# ==========================================

class WebhookPayload(BaseModel):
    """
    Change event posted by a Supabase database webhook.

    Supabase puts the table name at the top level; the portal's own
    client puts it inside ``record``. Both are accepted.
    """
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(..., description="INSERT, UPDATE or DELETE")
    table: Optional[str] = None
    db_schema: Optional[str] = Field(None, alias="schema")
    record: Optional[dict[str, Any]] = None
    old_record: Optional[dict[str, Any]] = None

    @property
    def source_table(self) -> Optional[str]:
        """Table the change happened on."""
        if self.table:
            return self.table
        return (self.record or {}).get("table")


class NotificationEvent(BaseModel):
    """A classified notification, consumed once by the pipeline."""
    model_config = ConfigDict(frozen=True)

    type: str
    data: dict[str, Any] = Field(default_factory=dict)


# ==========================================
# INBOUND: DIRECT NOTIFY API
# ==========================================

class NotifyRequest(BaseModel):
    """Request body for sending a notification to users directly."""
    type: str = Field(..., description="Notification type, e.g. urgent_project")
    data: dict[str, Any] = Field(default_factory=dict, description="Message fields")
    recipients: Optional[list[EmailStr]] = Field(
        None,
        description="Recipient emails. Defaults to NOTIFICATION_USERS"
    )

    @field_validator("data")
    @classmethod
    def sanitize_data(cls, value: dict[str, Any]) -> dict[str, Any]:
        return sanitize_payload(value)


# ==========================================
# RESPONSES
# ==========================================

class WebhookResponse(BaseModel):
    """Response body for webhook and notify endpoints."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


# ==========================================
# OUTBOUND: NAVER WORKS MESSAGE CONTENT
# ==========================================

class MessageAction(BaseModel):
    """A button on a button_template message."""
    model_config = ConfigDict(frozen=True)

    type: str = "uri"
    label: str
    uri: str


class MessageContent(BaseModel):
    """
    Bot message content in the NAVER WORKS wire shape.

    ``text`` messages carry ``text``; ``button_template`` messages carry
    ``contentText`` and ``actions``.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: ContentType
    text: Optional[str] = None
    content_text: Optional[str] = Field(None, alias="contentText")
    actions: Optional[tuple[MessageAction, ...]] = None

    @classmethod
    def plain(cls, text: str) -> "MessageContent":
        return cls(type=ContentType.TEXT, text=text)

    @classmethod
    def button_template(cls, content_text: str, actions: list[MessageAction]) -> "MessageContent":
        return cls(
            type=ContentType.BUTTON_TEMPLATE,
            content_text=content_text,
            actions=tuple(actions),
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON object expected under ``content``."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

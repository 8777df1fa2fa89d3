"""
Support ticket models.
"""
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import Field, field_validator

from .base import DocumentModel, parse_timestamp


TicketCategory = Literal["technical", "feature_request", "content_issue", "performance", "bug", "other"]
TicketPriority = Literal["low", "medium", "high", "critical"]
TicketStatus = Literal["new", "in_progress", "resolved", "closed"]

TICKET_CATEGORIES: tuple[str, ...] = (
    "technical", "feature_request", "content_issue", "performance", "bug", "other",
)
CLOSED_STATUSES: tuple[str, ...] = ("resolved", "closed")


class Ticket(DocumentModel):
    """A support ticket raised against an agent."""
    agent_id: str = Field(alias="agentId")
    title: str
    description: str = ""
    category: TicketCategory = "other"
    priority: TicketPriority = "medium"
    status: TicketStatus = "new"
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    user_id: Optional[str] = Field(default=None, alias="userId")
    user_email: Optional[str] = Field(default=None, alias="userEmail")
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo")
    resolution_notes: Optional[str] = Field(default=None, alias="resolutionNotes")
    resolved_at: Optional[datetime] = Field(default=None, alias="resolvedAt")
    tags: list[str] = Field(default_factory=list)

    @field_validator("created_at", "updated_at", "resolved_at", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v: Any) -> str:
        return v if v in TICKET_CATEGORIES else "other"

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_STATUSES


class TicketActivity(DocumentModel):
    """Compact row for the recent-activity feed."""
    title: str
    status: TicketStatus
    category: str = "other"
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class KnowledgeGap(DocumentModel):
    """A question the agent could not answer."""
    question: str = ""
    count: int = 0
    filled: bool = False
    first_asked: Optional[datetime] = Field(default=None, alias="firstAsked")
    last_asked: Optional[datetime] = Field(default=None, alias="lastAsked")

    @field_validator("first_asked", "last_asked", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator("count", mode="before")
    @classmethod
    def default_count(cls, v: Any) -> int:
        return v or 0

"""
Analytics models - per-agent input records and the aggregated report.
"""
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .base import DocumentModel, parse_timestamp


TimeRange = Literal["daily", "weekly", "monthly"]


# ---------------------------------------------------------------------------
# Inputs (read-only documents under users/{uid}/agents/{aid}/...)
# ---------------------------------------------------------------------------


class DailyStat(DocumentModel):
    """
    Per-day aggregate counters, one document per ``YYYY-MM-DD``.

    ``date`` is read from the stored field only; queries range-filter on it.
    """
    date: str = ""
    total_sessions: int = Field(default=0, alias="totalSessions")
    total_messages: int = Field(default=0, alias="totalMessages")
    categories: dict[str, int] = Field(default_factory=dict)
    sentiments: dict[str, int] = Field(default_factory=dict)

    @field_validator("total_sessions", "total_messages", mode="before")
    @classmethod
    def default_zero(cls, v: Any) -> int:
        return v or 0

    @field_validator("categories", "sentiments", mode="before")
    @classmethod
    def default_counters(cls, v: Any) -> dict[str, int]:
        return dict(v or {})


class SessionDetail(DocumentModel):
    """Behavioural record of one widget session."""
    anonymous_user_id: Optional[str] = Field(default=None, alias="anonymousUserId")
    start_time: Optional[datetime] = Field(default=None, alias="startTime")
    timezone: Optional[str] = None
    country: Optional[str] = None
    device: Optional[str] = None
    referrer: Optional[str] = None
    time_on_page_before_chat: float = Field(default=0, alias="timeOnPageBeforeChat", description="ms")
    session_duration: float = Field(default=0, alias="sessionDuration", description="ms")
    scroll_depth: float = Field(default=0, alias="scrollDepth", description="percent")
    is_return_visitor: bool = Field(default=False, alias="isReturnVisitor")
    message_count: int = Field(default=0, alias="messageCount")

    @field_validator("start_time", mode="before")
    @classmethod
    def parse_start(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator(
        "time_on_page_before_chat", "session_duration", "scroll_depth", "message_count",
        mode="before",
    )
    @classmethod
    def default_zero(cls, v: Any) -> Any:
        return v or 0

    @field_validator("is_return_visitor", mode="before")
    @classmethod
    def default_false(cls, v: Any) -> bool:
        return bool(v)


class Conversation(DocumentModel):
    """An analysed conversation."""
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    anonymous_user_id: Optional[str] = Field(default=None, alias="anonymousUserId")
    last_message_time: Optional[datetime] = Field(default=None, alias="lastMessageTime")
    category: Optional[str] = None
    sentiment: Optional[str] = None
    urgency: Optional[str] = None
    topic: Optional[str] = None
    resolved: bool = False
    message_count: int = Field(default=0, alias="messageCount")
    summary: Optional[str] = None

    @field_validator("last_message_time", mode="before")
    @classmethod
    def parse_last_message(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator("sentiment", mode="before")
    @classmethod
    def sentiment_as_text(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("resolved", mode="before")
    @classmethod
    def default_resolved(cls, v: Any) -> bool:
        return bool(v)

    @field_validator("message_count", mode="before")
    @classmethod
    def default_messages(cls, v: Any) -> int:
        return v or 0


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


class TimeBucket(BaseModel):
    """Counts for one interval of a time series."""
    opened: int = 0
    resolved: int = 0


class CategoryCount(BaseModel):
    category: str
    count: int = 0


class SentimentCount(BaseModel):
    score: int = Field(ge=1, le=10)
    count: int = 0


class UrgencyCount(BaseModel):
    urgency: str
    count: int = 0


class TopicCount(BaseModel):
    topic: str
    count: int = 0


class LocationCount(BaseModel):
    country: str = Field(description="ISO 3166-1 alpha-2 code")
    count: int = Field(default=0, description="Unique anonymous users")


class AnalyticsSummary(BaseModel):
    """Headline numbers for the dashboard cards."""
    total_sessions: int = 0
    resolution_rate: int = Field(default=0, description="Percent")
    open_tickets: int = 0
    resolved_today: int = 0
    avg_response_time: str = "0m"


class DetailedMetrics(BaseModel):
    """Per-session behavioural averages."""
    avg_time_on_page_before_chat: float = Field(default=0.0, description="ms")
    avg_session_duration: float = Field(default=0.0, description="ms")
    avg_scroll_depth: float = Field(default=0.0, description="percent")
    return_visitor_rate: float = Field(default=0.0, description="percent")
    avg_messages_per_session: float = 0.0
    session_count: int = 0


class RecentSession(BaseModel):
    """Row for the recent sessions table."""
    id: Optional[str] = None
    anonymous_user_id: Optional[str] = None
    started_at: Optional[datetime] = None
    country: Optional[str] = None
    device: Optional[str] = None
    referrer: Optional[str] = None
    message_count: int = 0
    session_duration: float = 0.0


class AnalyticsReport(BaseModel):
    """
    Complete analytics payload for one agent and time range.
    Every chart field is complete over its labels so consumers can index by
    position.
    """
    time_range: TimeRange = "daily"
    chart_data: dict[str, TimeBucket] = Field(default_factory=dict)
    category_data: list[CategoryCount] = Field(default_factory=list)
    sentiment_data: list[SentimentCount] = Field(default_factory=list)
    urgency_data: list[UrgencyCount] = Field(default_factory=list)
    topic_data: list[TopicCount] = Field(default_factory=list)
    location_data: list[LocationCount] = Field(default_factory=list)
    summary: AnalyticsSummary = Field(default_factory=AnalyticsSummary)
    detailed_metrics: DetailedMetrics = Field(default_factory=DetailedMetrics)
    recent_sessions: list[RecentSession] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.summary.total_sessions == 0 and not self.recent_sessions


class TicketSummary(BaseModel):
    total_tickets: int = 0
    resolution_rate: int = 0
    open_tickets: int = 0
    resolved_today: int = 0


class TicketAnalytics(BaseModel):
    """Time series and breakdown for the ticket dashboard."""
    time_range: TimeRange = "daily"
    chart_data: dict[str, TimeBucket] = Field(default_factory=dict)
    category_data: list[CategoryCount] = Field(default_factory=list)
    summary: TicketSummary = Field(default_factory=TicketSummary)

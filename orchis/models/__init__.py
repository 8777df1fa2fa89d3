"""
Pydantic models for the Orchis console.
All document shapes and report contracts are defined here.
"""

from .base import DocumentModel
from .tool import ToolListing, ToolSubmission
from .content import BlogPost, RoadmapItem, ChangelogEntry, ContactMessage, WaitlistSignup
from .ticket import Ticket, TicketActivity, KnowledgeGap
from .analytics import (
    DailyStat,
    SessionDetail,
    Conversation,
    TimeBucket,
    AnalyticsReport,
    TicketAnalytics,
)
from .search import ScoredTool, SearchResults, BrowsePage
from .photo import Photo

__all__ = [
    "DocumentModel",
    # Directory
    "ToolListing",
    "ToolSubmission",
    # Content
    "BlogPost",
    "RoadmapItem",
    "ChangelogEntry",
    "ContactMessage",
    "WaitlistSignup",
    # Tickets
    "Ticket",
    "TicketActivity",
    "KnowledgeGap",
    # Analytics
    "DailyStat",
    "SessionDetail",
    "Conversation",
    "TimeBucket",
    "AnalyticsReport",
    "TicketAnalytics",
    # Search
    "ScoredTool",
    "SearchResults",
    "BrowsePage",
    # Media
    "Photo",
]

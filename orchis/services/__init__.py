"""Services: fetch from the managed backend, shape through the pipeline, write back."""

from .analytics import AnalyticsService
from .tickets import TicketService
from .dashboard import DashboardData, DashboardService
from .likes import LikeRegistry
from .tools import ToolDirectory
from .checkout import CheckoutSession, FeaturedCheckout, tier_for
from .content import BlogService, InboxService, RoadmapService

__all__ = [
    "AnalyticsService",
    "TicketService",
    "DashboardData",
    "DashboardService",
    "LikeRegistry",
    "ToolDirectory",
    "CheckoutSession",
    "FeaturedCheckout",
    "tier_for",
    "BlogService",
    "InboxService",
    "RoadmapService",
]

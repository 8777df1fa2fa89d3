"""
Dashboard service - concurrent reads for the agent overview page.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from ..models.analytics import AnalyticsReport, TimeRange
from ..models.ticket import TicketActivity
from .analytics import AnalyticsService
from .tickets import TicketService


logger = logging.getLogger(__name__)


class DashboardData(BaseModel):
    """Everything the overview page renders for one agent."""
    analytics: AnalyticsReport
    recent_activity: list[TicketActivity] = Field(default_factory=list)


class DashboardService:
    """Fans out the independent dashboard reads and joins them."""

    def __init__(
        self,
        analytics: Optional[AnalyticsService] = None,
        tickets: Optional[TicketService] = None,
        max_workers: int = 2,
    ):
        self.analytics = analytics or AnalyticsService()
        self.tickets = tickets or TicketService()
        self.max_workers = max_workers

    def load(
        self,
        agent_id: Optional[str],
        user_id: Optional[str],
        time_range: TimeRange = "daily",
        now: Optional[datetime] = None,
    ) -> DashboardData:
        now = now or datetime.now(timezone.utc)
        if not agent_id:
            return DashboardData(analytics=self.analytics.aggregator.empty_report(time_range, now))

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            analytics_future = pool.submit(self.analytics.get_analytics, agent_id, time_range, user_id, now)
            activity_future = pool.submit(self.tickets.get_recent_activity, agent_id)

            try:
                report = analytics_future.result()
            except Exception as e:
                logger.error(f"Analytics load failed: {e}")
                report = self.analytics.aggregator.empty_report(time_range, now)

            try:
                activity = activity_future.result()
            except Exception as e:
                logger.error(f"Recent activity load failed: {e}")
                activity = []

        return DashboardData(analytics=report, recent_activity=activity)

"""
Analytics service - loads agent records and aggregates them.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from ..client.firestore import DocumentStore, agent_path
from ..models.analytics import AnalyticsReport, Conversation, DailyStat, SessionDetail, TimeRange
from ..models.ticket import KnowledgeGap
from ..pipeline.analytics import AnalyticsAggregator, TimeBuckets


logger = logging.getLogger(__name__)


class AnalyticsService:
    """
    Fetches daily stats, session details and conversations for an agent and
    feeds them to the aggregator. Any fetch failure yields the empty report.
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        aggregator: Optional[AnalyticsAggregator] = None,
    ):
        self.store = store or DocumentStore()
        self.aggregator = aggregator or AnalyticsAggregator()

    def _fetch(
        self,
        user_id: str,
        agent_id: str,
        since: datetime,
    ) -> tuple[list[DailyStat], list[SessionDetail], list[Conversation]]:
        stats = self.store.get_documents(
            agent_path(user_id, agent_id, "dailyStats"),
            filters=[("date", ">=", since.strftime("%Y-%m-%d"))],
        )
        sessions = self.store.get_documents(
            agent_path(user_id, agent_id, "sessionDetails"),
            filters=[("startTime", ">=", since)],
        )
        conversations = self.store.get_documents(
            agent_path(user_id, agent_id, "conversations"),
            filters=[("lastMessageTime", ">=", since)],
        )
        return (
            [DailyStat.model_validate(d) for d in stats],
            [SessionDetail.model_validate(d) for d in sessions],
            [Conversation.model_validate(d) for d in conversations],
        )

    def get_analytics(
        self,
        agent_id: Optional[str],
        time_range: TimeRange = "daily",
        user_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AnalyticsReport:
        """
        Analytics report for one agent.

        Returns the empty-state report when no user or agent is given or when
        loading fails.
        """
        now = now or datetime.now(timezone.utc)
        if not user_id or not agent_id:
            return self.aggregator.empty_report(time_range, now)

        since = TimeBuckets(time_range, now).start
        try:
            stats, sessions, conversations = self._fetch(user_id, agent_id, since)
        except Exception as e:
            logger.error(f"Error fetching analytics for agent {agent_id}: {e}")
            return self.aggregator.empty_report(time_range, now)

        logger.info(
            f"Loaded {len(stats)} daily stats, {len(sessions)} sessions, "
            f"{len(conversations)} conversations for agent {agent_id}"
        )
        return self.aggregator.aggregate(time_range, stats, sessions, conversations, user_id=user_id, now=now)

    def get_knowledge_gaps(self, agent_id: Optional[str], user_id: Optional[str]) -> list[KnowledgeGap]:
        """Unanswered questions, most asked first."""
        if not user_id or not agent_id:
            return []
        try:
            docs = self.store.get_documents(
                agent_path(user_id, agent_id, "knowledgeGaps"),
                filters=[("filled", "!=", True)],
            )
        except Exception as e:
            logger.error(f"Error fetching knowledge gaps: {e}")
            return []

        gaps = [KnowledgeGap.model_validate(d) for d in docs]
        gaps.sort(key=lambda g: g.count, reverse=True)
        return gaps

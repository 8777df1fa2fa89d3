"""Pure data-shaping modules: analytics, search ranking, roadmap transitions."""

from .analytics import AnalyticsAggregator, TimeBuckets, build_ticket_analytics, calculate_detailed_metrics
from .search import rank_tools, score_tool, sort_for_browse
from .roadmap import changelog_for_transition

__all__ = [
    "AnalyticsAggregator",
    "TimeBuckets",
    "build_ticket_analytics",
    "calculate_detailed_metrics",
    "rank_tools",
    "score_tool",
    "sort_for_browse",
    "changelog_for_transition",
]

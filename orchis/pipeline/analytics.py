"""
Analytics aggregator - turns raw agent records into complete chart series.

Every series and histogram is pre-populated over all of its labels before
records are counted, so charts never see gaps or missing categories.
"""
import logging
import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from ..config import get_config
from ..models.analytics import (
    AnalyticsReport,
    AnalyticsSummary,
    CategoryCount,
    Conversation,
    DailyStat,
    DetailedMetrics,
    LocationCount,
    RecentSession,
    SentimentCount,
    SessionDetail,
    TicketAnalytics,
    TicketSummary,
    TimeBucket,
    TimeRange,
    TopicCount,
    UrgencyCount,
)
from ..models.ticket import TICKET_CATEGORIES, Ticket
from .locations import country_for_timezone


logger = logging.getLogger(__name__)


CATEGORIES: tuple[str, ...] = (
    "support", "sales", "technical", "billing", "feedback", "general", "other",
)
URGENCIES: tuple[str, ...] = ("low", "medium", "high")
TOPICS: tuple[str, ...] = (
    "pricing", "features", "integration", "onboarding", "account", "troubleshooting", "other",
)
SENTIMENT_SCALE: tuple[int, ...] = tuple(range(1, 11))
SENTIMENT_SCORES: dict[str, int] = {
    "positive": 8,
    "negative": 3,
    "neutral": 5,
    "frustrated": 2,
    "confused": 4,
}
NEUTRAL_SCORE = 5

RANGE_DAYS: dict[str, int] = {"weekly": 7, "monthly": 30}


def sentiment_score(label: Optional[str]) -> int:
    """Map a sentiment label (or a 1-10 score) onto the 1-10 scale."""
    if label is None:
        return NEUTRAL_SCORE
    key = str(label).strip().lower()
    if key in SENTIMENT_SCORES:
        return SENTIMENT_SCORES[key]
    if key.isdigit() and 1 <= int(key) <= 10:
        return int(key)
    return NEUTRAL_SCORE


def _normalize_label(label: Optional[str], known: tuple[str, ...], fallback: str) -> str:
    key = (label or "").strip().lower().replace(" ", "_")
    return key if key in known else fallback


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class TimeBuckets:
    """
    The gap-free bucket grid for a time range, anchored at ``now``.

    ``daily`` is the trailing 24 hours bucketed by hour (``HH:00``) ending with
    the current hour; ``weekly`` and ``monthly`` are the trailing 7 and 30 days
    bucketed by date (``YYYY-MM-DD``) ending today.
    """

    def __init__(self, time_range: str, now: datetime):
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        self.now = now
        self.tz = now.tzinfo

        if time_range in RANGE_DAYS:
            self.time_range = time_range
            self.step = timedelta(days=1)
            anchor = now.replace(hour=0, minute=0, second=0, microsecond=0)
            count = RANGE_DAYS[time_range]
        else:
            if time_range != "daily":
                logger.warning(f"Unknown time range {time_range!r}, using daily")
            self.time_range = "daily"
            self.step = timedelta(hours=1)
            anchor = now.replace(minute=0, second=0, microsecond=0)
            count = 24

        self.starts = [anchor - self.step * i for i in range(count - 1, -1, -1)]
        self.start = self.starts[0]
        self.end = anchor + self.step

    @property
    def is_hourly(self) -> bool:
        return self.time_range == "daily"

    def label(self, moment: datetime) -> str:
        if self.is_hourly:
            return f"{moment.hour:02d}:00"
        return moment.strftime("%Y-%m-%d")

    def labels(self) -> list[str]:
        return [self.label(s) for s in self.starts]

    def empty_series(self) -> dict[str, TimeBucket]:
        return {label: TimeBucket() for label in self.labels()}

    def localize(self, moment: datetime) -> datetime:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(self.tz)

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        return self.start <= self.localize(moment) < self.end

    def key_for(self, moment: Optional[datetime]) -> Optional[str]:
        """Bucket label for ``moment``, ``None`` when outside the window."""
        if not self.contains(moment):
            return None
        return self.label(self.localize(moment))

    def dates(self) -> set[str]:
        """Calendar dates touched by the window."""
        return {s.strftime("%Y-%m-%d") for s in self.starts}

    def today_labels(self) -> set[str]:
        today = self.now.date()
        return {self.label(s) for s in self.starts if s.date() == today}


def calculate_detailed_metrics(sessions: list[SessionDetail]) -> DetailedMetrics:
    """
    Average behavioural metrics over sessions in a single pass.
    An empty list yields all zeros.
    """
    n = len(sessions)
    if n == 0:
        return DetailedMetrics()

    time_on_page = 0.0
    duration = 0.0
    scroll = 0.0
    returning = 0
    messages = 0
    for s in sessions:
        time_on_page += s.time_on_page_before_chat
        duration += s.session_duration
        scroll += s.scroll_depth
        returning += 1 if s.is_return_visitor else 0
        messages += s.message_count

    return DetailedMetrics(
        avg_time_on_page_before_chat=round(time_on_page / n, 1),
        avg_session_duration=round(duration / n, 1),
        avg_scroll_depth=round(scroll / n, 1),
        return_visitor_rate=round(returning / n * 100, 1),
        avg_messages_per_session=round(messages / n, 1),
        session_count=n,
    )


def session_country(session: SessionDetail) -> Optional[str]:
    """Explicit country code if recorded, otherwise derived from the timezone."""
    if session.country:
        return session.country.strip().upper()
    return country_for_timezone(session.timezone)


def count_unique_users_by_country(sessions: Iterable[SessionDetail]) -> list[LocationCount]:
    """Unique anonymous users per country, most visitors first."""
    users: dict[str, set[str]] = {}
    for session in sessions:
        country = session_country(session)
        if not country:
            continue
        visitor = session.anonymous_user_id or session.id
        if not visitor:
            continue
        users.setdefault(country, set()).add(visitor)

    counts = [LocationCount(country=c, count=len(ids)) for c, ids in users.items()]
    counts.sort(key=lambda lc: (-lc.count, lc.country))
    return counts


class AnalyticsAggregator:
    """
    Pure aggregation of daily stats, session details and conversations into
    an ``AnalyticsReport``. Wall-clock ``now`` is injectable for tests.
    """

    def __init__(
        self,
        resolution_ratio: Optional[float] = None,
        response_time: Optional[str] = None,
        recent_limit: Optional[int] = None,
    ):
        config = get_config().analytics
        self.resolution_ratio = (
            config.placeholder_resolution_ratio if resolution_ratio is None else resolution_ratio
        )
        self.response_time = response_time or config.placeholder_response_time
        self.recent_limit = config.recent_sessions_limit if recent_limit is None else recent_limit

    def aggregate(
        self,
        time_range: TimeRange,
        daily_stats: list[DailyStat],
        sessions: list[SessionDetail],
        conversations: list[Conversation],
        user_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AnalyticsReport:
        """
        Build the analytics report for one time range.

        Args:
            time_range: ``daily``, ``weekly`` or ``monthly``
            daily_stats: Per-day aggregate counters
            sessions: Session detail records
            conversations: Analysed conversations
            user_id: Owner of the data; without it the empty report is returned
            now: Anchor for bucket boundaries (defaults to current UTC time)

        Returns:
            AnalyticsReport with complete series and histograms
        """
        buckets = TimeBuckets(time_range, now or datetime.now(timezone.utc))

        if not user_id:
            daily_stats, sessions, conversations = [], [], []

        window_dates = buckets.dates()
        stats_in_range = [s for s in daily_stats if s.date in window_dates]
        sessions_in_range = [s for s in sessions if buckets.contains(s.start_time)]
        conversations_in_range = [c for c in conversations if buckets.contains(c.last_message_time)]

        chart_data = self._build_series(buckets, stats_in_range, sessions_in_range)
        summary = self._build_summary(buckets, chart_data)

        recent = sorted(sessions_in_range, key=lambda s: s.start_time, reverse=True)

        report = AnalyticsReport(
            time_range=buckets.time_range,
            chart_data=chart_data,
            category_data=self._category_histogram(stats_in_range, conversations_in_range),
            sentiment_data=self._sentiment_histogram(stats_in_range, conversations_in_range),
            urgency_data=self._urgency_histogram(conversations_in_range),
            topic_data=self._topic_histogram(conversations_in_range),
            location_data=count_unique_users_by_country(sessions_in_range),
            summary=summary,
            detailed_metrics=calculate_detailed_metrics(sessions_in_range),
            recent_sessions=[self._recent_row(s) for s in recent[: self.recent_limit]],
        )

        logger.debug(
            f"Aggregated {buckets.time_range} analytics: {summary.total_sessions} sessions, "
            f"{len(conversations_in_range)} conversations"
        )
        return report

    def empty_report(self, time_range: TimeRange = "daily", now: Optional[datetime] = None) -> AnalyticsReport:
        """The all-zero report with the same shape as a populated one."""
        return self.aggregate(time_range, [], [], [], user_id=None, now=now)

    def _build_series(
        self,
        buckets: TimeBuckets,
        daily_stats: list[DailyStat],
        sessions: list[SessionDetail],
    ) -> dict[str, TimeBucket]:
        """Fill the pre-populated grid; day buckets prefer the daily counters."""
        series = buckets.empty_series()

        if not buckets.is_hourly and daily_stats:
            for stat in daily_stats:
                if stat.date in series:
                    series[stat.date].opened += stat.total_sessions
        else:
            for session in sessions:
                key = buckets.key_for(session.start_time)
                if key is not None:
                    series[key].opened += 1

        # TODO: replace the placeholder ratio with per-session resolution once
        # the conversation analyser writes a resolved flag into dailyStats.
        for bucket in series.values():
            bucket.resolved = int(bucket.opened * self.resolution_ratio)
        return series

    def _build_summary(self, buckets: TimeBuckets, series: dict[str, TimeBucket]) -> AnalyticsSummary:
        total = sum(b.opened for b in series.values())
        resolved = sum(b.resolved for b in series.values())
        today = buckets.today_labels()
        resolved_today = sum(b.resolved for label, b in series.items() if label in today)

        return AnalyticsSummary(
            total_sessions=total,
            resolution_rate=_round_half_up(resolved / total * 100) if total else 0,
            open_tickets=total - resolved,
            resolved_today=resolved_today,
            # TODO: measure first-response latency from conversation timestamps.
            avg_response_time=self.response_time if total else "0m",
        )

    def _category_histogram(
        self,
        daily_stats: list[DailyStat],
        conversations: list[Conversation],
    ) -> list[CategoryCount]:
        counts: Counter[str] = Counter({c: 0 for c in CATEGORIES})
        if daily_stats:
            for stat in daily_stats:
                for label, n in stat.categories.items():
                    counts[_normalize_label(label, CATEGORIES, "other")] += n or 0
        else:
            for conv in conversations:
                counts[_normalize_label(conv.category, CATEGORIES, "other")] += 1
        return [CategoryCount(category=c, count=counts[c]) for c in CATEGORIES]

    def _sentiment_histogram(
        self,
        daily_stats: list[DailyStat],
        conversations: list[Conversation],
    ) -> list[SentimentCount]:
        counts: Counter[int] = Counter({score: 0 for score in SENTIMENT_SCALE})
        if daily_stats:
            for stat in daily_stats:
                for label, n in stat.sentiments.items():
                    counts[sentiment_score(label)] += n or 0
        else:
            for conv in conversations:
                counts[sentiment_score(conv.sentiment)] += 1
        return [SentimentCount(score=s, count=counts[s]) for s in SENTIMENT_SCALE]

    def _urgency_histogram(self, conversations: list[Conversation]) -> list[UrgencyCount]:
        counts: Counter[str] = Counter({u: 0 for u in URGENCIES})
        for conv in conversations:
            counts[_normalize_label(conv.urgency, URGENCIES, "low")] += 1
        return [UrgencyCount(urgency=u, count=counts[u]) for u in URGENCIES]

    def _topic_histogram(self, conversations: list[Conversation]) -> list[TopicCount]:
        counts: Counter[str] = Counter({t: 0 for t in TOPICS})
        for conv in conversations:
            counts[_normalize_label(conv.topic, TOPICS, "other")] += 1
        return [TopicCount(topic=t, count=counts[t]) for t in TOPICS]

    def _recent_row(self, session: SessionDetail) -> RecentSession:
        return RecentSession(
            id=session.id,
            anonymous_user_id=session.anonymous_user_id,
            started_at=session.start_time,
            country=session_country(session),
            device=session.device,
            referrer=session.referrer,
            message_count=session.message_count,
            session_duration=session.session_duration,
        )


def build_ticket_analytics(
    tickets: list[Ticket],
    time_range: TimeRange = "daily",
    now: Optional[datetime] = None,
) -> TicketAnalytics:
    """
    Bucket tickets by creation time into a gap-free opened/resolved series.
    Unlike session analytics, resolution here is the ticket's real status.
    """
    buckets = TimeBuckets(time_range, now or datetime.now(timezone.utc))
    series = buckets.empty_series()
    categories: Counter[str] = Counter({c: 0 for c in TICKET_CATEGORIES})
    today = buckets.now.date()

    total = 0
    resolved = 0
    resolved_today = 0
    for ticket in tickets:
        key = buckets.key_for(ticket.created_at)
        if key is None:
            continue
        total += 1
        series[key].opened += 1
        categories[ticket.category] += 1
        if ticket.is_closed:
            resolved += 1
            series[key].resolved += 1
            closed_at = ticket.resolved_at or ticket.updated_at or ticket.created_at
            if buckets.localize(closed_at).date() == today:
                resolved_today += 1

    return TicketAnalytics(
        time_range=buckets.time_range,
        chart_data=series,
        category_data=[CategoryCount(category=c, count=categories[c]) for c in TICKET_CATEGORIES],
        summary=TicketSummary(
            total_tickets=total,
            resolution_rate=_round_half_up(resolved / total * 100) if total else 0,
            open_tickets=total - resolved,
            resolved_today=resolved_today,
        ),
    )

"""
Tests for the analytics aggregator.
Every series and histogram must be complete, whatever the input.
"""
import pytest
from datetime import datetime, timedelta, timezone

from orchis.models.analytics import Conversation, DailyStat, SessionDetail
from orchis.models.ticket import Ticket
from orchis.pipeline.analytics import (
    CATEGORIES,
    TOPICS,
    URGENCIES,
    AnalyticsAggregator,
    TimeBuckets,
    build_ticket_analytics,
    calculate_detailed_metrics,
    count_unique_users_by_country,
    sentiment_score,
)


NOW = datetime(2024, 5, 15, 14, 30, tzinfo=timezone.utc)


@pytest.fixture
def aggregator() -> AnalyticsAggregator:
    return AnalyticsAggregator(resolution_ratio=0.8, response_time="2.3h", recent_limit=10)


def make_session(session_id: str, minutes_ago: int, **kwargs) -> SessionDetail:
    return SessionDetail(id=session_id, start_time=NOW - timedelta(minutes=minutes_ago), **kwargs)


class TestTimeBuckets:
    """Tests for the bucket grid."""

    def test_daily_has_24_hour_labels(self):
        labels = TimeBuckets("daily", NOW).labels()

        assert len(labels) == 24
        assert labels[0] == "15:00"
        assert labels[-1] == "14:00"
        assert all(label.endswith(":00") for label in labels)
        assert len(set(labels)) == 24

    def test_weekly_has_7_dates_ending_today(self):
        labels = TimeBuckets("weekly", NOW).labels()

        assert labels == [
            "2024-05-09", "2024-05-10", "2024-05-11", "2024-05-12",
            "2024-05-13", "2024-05-14", "2024-05-15",
        ]

    def test_monthly_has_30_dates(self):
        labels = TimeBuckets("monthly", NOW).labels()

        assert len(labels) == 30
        assert labels[0] == "2024-04-16"
        assert labels[-1] == "2024-05-15"

    def test_unknown_range_falls_back_to_daily(self):
        buckets = TimeBuckets("yearly", NOW)

        assert buckets.time_range == "daily"
        assert len(buckets.labels()) == 24

    def test_key_for_outside_window(self):
        buckets = TimeBuckets("daily", NOW)

        assert buckets.key_for(NOW - timedelta(days=2)) is None
        assert buckets.key_for(NOW) == "14:00"
        assert buckets.key_for(None) is None


class TestSentimentScore:
    """Tests for sentiment label mapping."""

    @pytest.mark.parametrize("label,expected", [
        ("positive", 8),
        ("negative", 3),
        ("neutral", 5),
        ("frustrated", 2),
        ("confused", 4),
        ("Positive ", 8),
        ("ecstatic", 5),
        (None, 5),
        ("7", 7),
        ("11", 5),
    ])
    def test_mapping(self, label, expected):
        assert sentiment_score(label) == expected


class TestEmptyState:
    """Without a user the report has the full shape and no numbers."""

    def test_no_user_returns_zeroed_report(self, aggregator):
        sessions = [make_session("s1", 5, anonymous_user_id="u1", timezone="America/New_York")]
        report = aggregator.aggregate("daily", [], sessions, [], user_id=None, now=NOW)

        assert len(report.chart_data) == 24
        assert all(b.opened == 0 and b.resolved == 0 for b in report.chart_data.values())
        assert [c.category for c in report.category_data] == list(CATEGORIES)
        assert all(c.count == 0 for c in report.category_data)
        assert [s.score for s in report.sentiment_data] == list(range(1, 11))
        assert [u.urgency for u in report.urgency_data] == list(URGENCIES)
        assert [t.topic for t in report.topic_data] == list(TOPICS)
        assert report.location_data == []
        assert report.recent_sessions == []
        assert report.summary.total_sessions == 0
        assert report.summary.resolution_rate == 0
        assert report.summary.open_tickets == 0
        assert report.summary.resolved_today == 0
        assert report.summary.avg_response_time == "0m"
        assert report.detailed_metrics.session_count == 0
        assert report.is_empty

    def test_empty_report_matches_populated_shape(self, aggregator):
        empty = aggregator.empty_report("weekly", NOW)
        populated = aggregator.aggregate(
            "weekly", [DailyStat(date="2024-05-15", total_sessions=4)], [], [], user_id="u1", now=NOW,
        )

        assert list(empty.chart_data) == list(populated.chart_data)
        assert set(empty.model_dump()) == set(populated.model_dump())
        assert len(empty.category_data) == len(populated.category_data)

    def test_histograms_complete_without_conversations(self, aggregator):
        report = aggregator.aggregate("daily", [], [], [], user_id="u1", now=NOW)

        assert [(c.category, c.count) for c in report.category_data] == [(c, 0) for c in CATEGORIES]


class TestTimeSeries:
    """Tests for bucket filling and summary scalars."""

    def test_hourly_series_from_sessions(self, aggregator):
        sessions = [
            make_session("s1", 25),                # 14:05
            make_session("s2", 20),                # 14:10
            make_session("s3", 90),                # 13:00
            make_session("s4", 60 * 48),           # two days ago
        ]
        report = aggregator.aggregate("daily", [], sessions, [], user_id="u1", now=NOW)

        assert report.chart_data["14:00"].opened == 2
        assert report.chart_data["14:00"].resolved == 1
        assert report.chart_data["13:00"].opened == 1
        assert report.chart_data["13:00"].resolved == 0
        assert sum(b.opened for b in report.chart_data.values()) == 3

        summary = report.summary
        assert summary.total_sessions == 3
        assert summary.resolution_rate == 33
        assert summary.open_tickets == 2
        assert summary.resolved_today == 1
        assert summary.avg_response_time == "2.3h"

    def test_day_series_from_daily_stats(self, aggregator):
        stats = [
            DailyStat(date="2024-05-15", total_sessions=10),
            DailyStat(date="2024-05-10", total_sessions=5),
            DailyStat(date="2024-04-01", total_sessions=99),
        ]
        report = aggregator.aggregate("weekly", stats, [], [], user_id="u1", now=NOW)

        assert report.chart_data["2024-05-15"].opened == 10
        assert report.chart_data["2024-05-15"].resolved == 8
        assert report.chart_data["2024-05-10"].opened == 5
        assert report.chart_data["2024-05-11"].opened == 0
        assert report.summary.total_sessions == 15
        assert report.summary.resolved_today == 8

    def test_daily_stat_date_comes_from_field_only(self, aggregator):
        keyed_only = DailyStat.model_validate({"id": "2024-05-15", "totalSessions": 3})
        dated = DailyStat.model_validate({"id": "x", "date": "2024-05-15", "totalSessions": 2})

        report = aggregator.aggregate("weekly", [keyed_only, dated], [], [], user_id="u1", now=NOW)

        assert keyed_only.date == ""
        assert dated.date == "2024-05-15"
        assert report.chart_data["2024-05-15"].opened == 2


class TestHistograms:
    """Tests for categorical histograms."""

    def test_daily_stat_counters_merge(self, aggregator):
        stats = [
            DailyStat(
                date="2024-05-15",
                categories={"support": 3, "Billing": 2, "weird": 1},
                sentiments={"positive": 4, "frustrated": 1, "mystery": 2},
            ),
            DailyStat(date="2024-05-14", categories={"support": 1}),
        ]
        report = aggregator.aggregate("weekly", stats, [], [], user_id="u1", now=NOW)
        categories = {c.category: c.count for c in report.category_data}
        sentiments = {s.score: s.count for s in report.sentiment_data}

        assert categories["support"] == 4
        assert categories["billing"] == 2
        assert categories["other"] == 1
        assert categories["sales"] == 0
        assert sentiments[8] == 4
        assert sentiments[2] == 1
        assert sentiments[5] == 2

    def test_conversations_used_without_daily_stats(self, aggregator):
        conversations = [
            Conversation(
                id="c1",
                last_message_time=NOW - timedelta(days=1),
                category="sales",
                sentiment="negative",
                urgency="HIGH",
                topic="pricing",
            ),
            Conversation(id="c2", last_message_time=NOW - timedelta(days=2), urgency="whenever"),
            Conversation(id="c3", last_message_time=NOW - timedelta(days=20), category="sales"),
        ]
        report = aggregator.aggregate("weekly", [], [], conversations, user_id="u1", now=NOW)

        assert {c.category: c.count for c in report.category_data}["sales"] == 1
        assert {c.category: c.count for c in report.category_data}["other"] == 1
        assert {s.score: s.count for s in report.sentiment_data}[3] == 1
        assert {s.score: s.count for s in report.sentiment_data}[5] == 1
        assert [(u.urgency, u.count) for u in report.urgency_data] == [("low", 1), ("medium", 0), ("high", 1)]
        assert {t.topic: t.count for t in report.topic_data}["pricing"] == 1
        assert {t.topic: t.count for t in report.topic_data}["other"] == 1


class TestLocations:
    """Tests for unique-visitor location counting."""

    def test_same_visitor_counted_once(self):
        sessions = [
            make_session("s1", 5, anonymous_user_id="anon-1", timezone="America/New_York"),
            make_session("s2", 10, anonymous_user_id="anon-1", timezone="America/New_York"),
        ]

        counts = count_unique_users_by_country(sessions)

        assert [(c.country, c.count) for c in counts] == [("US", 1)]

    def test_sorted_and_unresolvable_skipped(self):
        sessions = [
            make_session("s1", 5, anonymous_user_id="a", timezone="America/New_York"),
            make_session("s2", 5, anonymous_user_id="b", timezone="America/New_York"),
            make_session("s3", 5, anonymous_user_id="c", timezone="Europe/London"),
            make_session("s4", 5, anonymous_user_id="d", country="tr"),
            make_session("s5", 5, anonymous_user_id="e", timezone="Mars/Base"),
            make_session("s6", 5, anonymous_user_id="f"),
        ]

        counts = count_unique_users_by_country(sessions)

        assert [(c.country, c.count) for c in counts] == [("US", 2), ("GB", 1), ("TR", 1)]

    def test_session_id_used_without_anonymous_id(self):
        sessions = [
            make_session("s1", 5, timezone="Asia/Tokyo"),
            make_session("s2", 5, timezone="Asia/Tokyo"),
        ]

        assert count_unique_users_by_country(sessions)[0].count == 2


class TestDetailedMetrics:
    """Tests for per-session averages."""

    def test_empty_sessions_are_zero_not_nan(self):
        metrics = calculate_detailed_metrics([])

        assert metrics.avg_time_on_page_before_chat == 0
        assert metrics.avg_session_duration == 0
        assert metrics.avg_scroll_depth == 0
        assert metrics.return_visitor_rate == 0
        assert metrics.avg_messages_per_session == 0
        assert metrics.session_count == 0

    def test_averages(self):
        sessions = [
            make_session("s1", 5, time_on_page_before_chat=1000, session_duration=60000,
                         scroll_depth=50, is_return_visitor=True, message_count=2),
            make_session("s2", 5, time_on_page_before_chat=3000, session_duration=120000,
                         scroll_depth=100, is_return_visitor=False, message_count=5),
        ]

        metrics = calculate_detailed_metrics(sessions)

        assert metrics.avg_time_on_page_before_chat == 2000
        assert metrics.avg_session_duration == 90000
        assert metrics.avg_scroll_depth == 75
        assert metrics.return_visitor_rate == 50
        assert metrics.avg_messages_per_session == 3.5
        assert metrics.session_count == 2

    def test_null_fields_default_to_zero(self):
        session = SessionDetail.model_validate({"id": "s1", "scrollDepth": None, "messageCount": None})

        assert calculate_detailed_metrics([session]).avg_scroll_depth == 0


class TestRecentSessions:
    """Tests for the recent sessions table."""

    def test_capped_and_newest_first(self, aggregator):
        sessions = [make_session(f"s{i}", i * 10, anonymous_user_id=f"u{i}") for i in range(12)]

        report = aggregator.aggregate("daily", [], sessions, [], user_id="u1", now=NOW)

        assert len(report.recent_sessions) == 10
        assert [r.id for r in report.recent_sessions[:3]] == ["s0", "s1", "s2"]


class TestTicketAnalytics:
    """Tests for the ticket time series."""

    def test_series_uses_real_status(self):
        tickets = [
            Ticket(agent_id="a1", title="Broken", category="bug", status="resolved",
                   created_at=NOW - timedelta(hours=1), resolved_at=NOW - timedelta(minutes=10)),
            Ticket(agent_id="a1", title="Question", category="whatever",
                   created_at=NOW - timedelta(hours=2)),
            Ticket(agent_id="a1", title="Old", created_at=NOW - timedelta(days=3)),
        ]

        analytics = build_ticket_analytics(tickets, "daily", NOW)

        assert len(analytics.chart_data) == 24
        assert analytics.chart_data["13:00"].opened == 1
        assert analytics.chart_data["13:00"].resolved == 1
        assert analytics.chart_data["12:00"].opened == 1
        assert analytics.chart_data["12:00"].resolved == 0
        assert analytics.summary.total_tickets == 2
        assert analytics.summary.resolution_rate == 50
        assert analytics.summary.open_tickets == 1
        assert analytics.summary.resolved_today == 1
        categories = {c.category: c.count for c in analytics.category_data}
        assert categories["bug"] == 1
        assert categories["other"] == 1
        assert len(analytics.category_data) == 6

    def test_no_tickets(self):
        analytics = build_ticket_analytics([], "weekly", NOW)

        assert len(analytics.chart_data) == 7
        assert analytics.summary.resolution_rate == 0

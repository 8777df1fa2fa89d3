"""
Analytics panel component - charts and tables for an agent report.
"""
import streamlit as st

from ...models.analytics import AnalyticsReport
from ...models.ticket import KnowledgeGap, TicketActivity


def render_summary(report: AnalyticsReport):
    """Headline metric cards."""
    summary = report.summary
    col1, col2, col3, col4, col5 = st.columns(5)
    col1.metric("Sessions", summary.total_sessions)
    col2.metric("Resolution rate", f"{summary.resolution_rate}%")
    col3.metric("Open", summary.open_tickets)
    col4.metric("Resolved today", summary.resolved_today)
    col5.metric("Avg response", summary.avg_response_time)


def render_analytics_panel(report: AnalyticsReport):
    """Render the full analytics report."""
    render_summary(report)

    if report.is_empty:
        st.markdown('<div class="empty-state">No sessions in this period yet</div>', unsafe_allow_html=True)

    st.markdown("#### Conversations over time")
    st.bar_chart(
        [{"period": label, "opened": b.opened, "resolved": b.resolved} for label, b in report.chart_data.items()],
        x="period",
        y=["opened", "resolved"],
    )

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("#### Categories")
        st.bar_chart([c.model_dump() for c in report.category_data], x="category", y="count")
        st.markdown("#### Urgency")
        st.bar_chart([u.model_dump() for u in report.urgency_data], x="urgency", y="count")
    with col2:
        st.markdown("#### Sentiment (1-10)")
        st.bar_chart([s.model_dump() for s in report.sentiment_data], x="score", y="count")
        st.markdown("#### Topics")
        st.bar_chart([t.model_dump() for t in report.topic_data], x="topic", y="count")

    st.markdown("#### Visitors by country")
    if report.location_data:
        st.dataframe(
            [{"Country": loc.country, "Unique visitors": loc.count} for loc in report.location_data],
            use_container_width=True,
            hide_index=True,
        )
    else:
        st.caption("No location data")

    render_detailed_metrics(report)
    render_recent_sessions(report)


def render_detailed_metrics(report: AnalyticsReport):
    metrics = report.detailed_metrics
    st.markdown("#### Session behaviour")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Time before chat", f"{metrics.avg_time_on_page_before_chat / 1000:.1f}s")
    col2.metric("Session length", f"{metrics.avg_session_duration / 1000:.1f}s")
    col3.metric("Scroll depth", f"{metrics.avg_scroll_depth:.0f}%")
    col4.metric("Return visitors", f"{metrics.return_visitor_rate:.0f}%")


def render_recent_sessions(report: AnalyticsReport):
    st.markdown("#### Recent sessions")
    if not report.recent_sessions:
        st.caption("No recent sessions")
        return
    st.dataframe(
        [
            {
                "Started": s.started_at.strftime("%Y-%m-%d %H:%M") if s.started_at else "",
                "Visitor": s.anonymous_user_id or "",
                "Country": s.country or "",
                "Device": s.device or "",
                "Messages": s.message_count,
            }
            for s in report.recent_sessions
        ],
        use_container_width=True,
        hide_index=True,
    )


def render_recent_activity(activity: list[TicketActivity]):
    st.markdown("#### Recent ticket activity")
    if not activity:
        st.caption("No ticket activity")
        return
    for item in activity:
        st.markdown(f"- **{item.title}** · {item.status} · {item.category}")


def render_knowledge_gaps(gaps: list[KnowledgeGap]):
    st.markdown("#### Unanswered questions")
    if not gaps:
        st.caption("Your agent has answered everything so far")
        return
    for gap in gaps:
        st.markdown(f"- {gap.question} *(asked {gap.count}×)*")

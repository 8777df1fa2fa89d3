"""
Orchis Console - admin dashboard.

Agent analytics, tool directory search and moderation, roadmap upkeep.
Admin pages require a verified Firebase ID token.
"""
import logging

import streamlit as st

from orchis.client import AdminAuthenticator
from orchis.config import get_config
from orchis.errors import AdminAuthError, OrchisError
from orchis.models.content import RoadmapItem
from orchis.models.tool import ToolListing
from orchis.pipeline.search import SORT_OPTIONS, category_to_slug
from orchis.services import (
    AnalyticsService,
    DashboardService,
    RoadmapService,
    TicketService,
    ToolDirectory,
)

from orchis.ui.styles import inject_custom_css
from orchis.ui.components import (
    render_analytics_panel,
    render_knowledge_gaps,
    render_recent_activity,
    render_search_results,
    render_tool_card,
    render_tool_list,
)


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

PAGES = ["Analytics", "Tools", "Moderation", "Roadmap"]
TIME_RANGES = {"Last 24 hours": "daily", "Last 7 days": "weekly", "Last 30 days": "monthly"}


def init_session_state():
    """Initialize session state variables."""
    defaults = {
        "admin": None,
        "directory": None,
        "dashboard": None,
        "roadmap": None,
        "page": "Analytics",
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value

    if st.session_state.directory is None:
        st.session_state.directory = ToolDirectory()
    if st.session_state.dashboard is None:
        st.session_state.dashboard = DashboardService(AnalyticsService(), TicketService())
    if st.session_state.roadmap is None:
        st.session_state.roadmap = RoadmapService()


def main():
    """Main application entry point."""
    config = get_config()

    st.set_page_config(
        page_title=config.ui.page_title,
        page_icon=config.ui.page_icon,
        layout="wide",
    )
    inject_custom_css()
    init_session_state()

    render_header()

    if st.session_state.admin is None:
        render_login()
        return

    with st.sidebar:
        st.caption(f"Signed in as {st.session_state.admin.email or st.session_state.admin.uid}")
        st.session_state.page = st.radio("Page", PAGES, index=PAGES.index(st.session_state.page))
        if st.button("Sign out", use_container_width=True):
            st.session_state.admin = None
            st.rerun()

    page = st.session_state.page
    if page == "Analytics":
        render_analytics_page()
    elif page == "Tools":
        render_tools_page()
    elif page == "Moderation":
        render_moderation_page()
    elif page == "Roadmap":
        render_roadmap_page()


def render_header():
    st.markdown("""
    <div class="app-header">
        <h1>Orchis Console</h1>
        <p class="subtitle">Agents, analytics and the tool directory</p>
    </div>
    """, unsafe_allow_html=True)


def render_login():
    """Exchange a Firebase ID token for an admin session."""
    st.markdown("### Admin sign-in")
    token = st.text_input("Firebase ID token", type="password")
    if st.button("Sign in", type="primary"):
        try:
            st.session_state.admin = AdminAuthenticator().verify(token)
            st.rerun()
        except AdminAuthError as e:
            st.error(str(e))


def render_analytics_page():
    st.markdown("### Agent analytics")
    col1, col2, col3 = st.columns([2, 2, 1])
    user_id = col1.text_input("Owner user id", value=st.session_state.admin.uid)
    agent_id = col2.text_input("Agent id")
    range_label = col3.selectbox("Range", list(TIME_RANGES))
    time_range = TIME_RANGES[range_label]

    if not agent_id:
        st.info("Enter an agent id to load its analytics")
        return

    with st.spinner("Loading analytics..."):
        data = st.session_state.dashboard.load(agent_id, user_id, time_range)

    render_analytics_panel(data.analytics)

    col1, col2 = st.columns(2)
    with col1:
        render_recent_activity(data.recent_activity)
    with col2:
        gaps = st.session_state.dashboard.analytics.get_knowledge_gaps(agent_id, user_id)
        render_knowledge_gaps(gaps)


def render_tools_page():
    directory = st.session_state.directory
    st.markdown("### Tool directory")

    query = st.text_input("Search tools", placeholder="e.g. writing assistant")
    if query:
        with st.spinner("Searching..."):
            results = directory.search(query)
        st.caption(f"{results.total} results")

        col1, col2 = st.columns([3, 1])
        with col1:
            render_search_results(results.results)
        with col2:
            st.markdown("#### Featured")
            render_tool_list(results.featured, "No featured tools")
            st.markdown("#### Popular")
            render_tool_list(results.popular, "Nothing else to show")
            st.markdown("#### Related")
            render_tool_list(results.related, "No related tools")
        return

    col1, col2 = st.columns(2)
    sort = col2.selectbox("Sort", list(SORT_OPTIONS), format_func=SORT_OPTIONS.get)
    page = directory.browse(None, sort)
    options = ["All"] + page.categories
    category = col1.selectbox(
        "Category",
        options,
        format_func=lambda c: c if c == "All" else f"{c} ({page.category_counts.get(c, 0)})",
    )
    if category != "All":
        page = directory.browse(category_to_slug(category), sort)
    render_tool_list(page.tools)


def render_moderation_page():
    directory = st.session_state.directory
    admin = st.session_state.admin

    st.markdown("### Moderation")
    stats = directory.admin_stats()
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total", stats["total"])
    col2.metric("Approved", stats["approved"])
    col3.metric("Pending", stats["pending"])
    col4.metric("Featured", stats["featured"])

    def approve(tool: ToolListing):
        directory.set_status(tool.id, "approved", admin)
        st.toast(f"Approved {tool.name}")

    def verify(tool: ToolListing):
        directory.set_status(tool.id, "verified", admin)
        st.toast(f"Verified {tool.name}")

    pending = directory.pending_tools()
    st.markdown(f"#### Pending review ({len(pending)})")
    if not pending:
        st.info("Nothing waiting for review")
    for tool in pending:
        render_tool_card(tool, actions={"Approve": approve, "Verify": verify})

    st.markdown("---")
    if st.button("Run Product Hunt import"):
        with st.spinner("Scraping..."):
            try:
                result = directory.trigger_scrape(admin)
                st.success(f"Import finished: {result}")
            except OrchisError as e:
                st.error(f"Import failed: {e}")


def render_roadmap_page():
    roadmap = st.session_state.roadmap
    st.markdown("### Roadmap")

    for item in roadmap.list_items():
        with st.expander(f"{item.priority}. {item.title} · {item.status}"):
            st.markdown(item.description or "*No description*")
            statuses = ["upcoming", "in_progress", "completed", "cancelled"]
            new_status = st.selectbox(
                "Status", statuses, index=statuses.index(item.status), key=f"status_{item.id}"
            )
            if new_status != item.status and st.button("Save", key=f"save_{item.id}"):
                updated = item.model_copy(update={"status": new_status})
                try:
                    entries = roadmap.save_item(updated)
                except Exception as e:
                    st.error(f"Could not save: {e}")
                else:
                    if entries:
                        st.toast("Marked completed and added to the changelog")
                    st.rerun()

    with st.form("new_roadmap_item"):
        st.markdown("#### Add item")
        title = st.text_input("Title")
        description = st.text_area("Description")
        priority = st.number_input("Priority", min_value=1, value=1)
        if st.form_submit_button("Add") and title:
            roadmap.save_item(RoadmapItem(title=title, description=description, priority=priority))
            st.rerun()

    st.markdown("#### Changelog")
    for entry in roadmap.list_changelog():
        st.markdown(f"- **{entry.title}** ({entry.version}, {entry.type})")


if __name__ == "__main__":
    main()

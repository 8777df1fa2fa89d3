"""
Tool card component - displays directory listings.
"""
import html

import streamlit as st
from typing import Callable, Optional

from ...models.search import ScoredTool
from ...models.tool import ToolListing


def render_tool_list(tools: list[ToolListing], empty_message: str = "No tools to show"):
    """Render plain listing cards."""
    if not tools:
        st.info(empty_message)
        return

    for tool in tools:
        render_tool_card(tool)


def render_search_results(results: list[ScoredTool]):
    """Render ranked search results with their scores."""
    if not results:
        st.info("No tools matched your search")
        return

    for scored in results:
        render_tool_card(scored.tool, score=scored.score)


def tool_card_html(tool: ToolListing, score: Optional[int] = None) -> str:
    """Card markup; submitted text is escaped before it reaches the page."""
    tags_html = ""
    if tool.is_featured:
        tags_html += f'<span class="tag tag-featured">★ Featured ${tool.featured_price:,.0f}</span>'
    if not tool.is_public:
        tags_html += f'<span class="tag tag-status">{html.escape(tool.status)}</span>'
    for category in tool.categories[:3]:
        tags_html += f'<span class="tag">{html.escape(category)}</span>'

    score_html = f'<span class="score-badge">{score} pts</span>' if score is not None else ""
    card_class = "tool-card featured" if tool.is_featured else "tool-card"

    return f"""
    <div class="{card_class}">
        <div class="card-header">
            <span class="name">{html.escape(tool.name or 'Untitled')}</span>
            {score_html}
        </div>
        <div class="tagline">{html.escape(tool.tagline or '')}</div>
        <div>{tags_html}</div>
    </div>
    """


def render_tool_card(
    tool: ToolListing,
    score: Optional[int] = None,
    actions: Optional[dict[str, Callable[[ToolListing], None]]] = None,
):
    """
    Render a single tool card.

    Args:
        tool: Listing to display
        score: Relevance score badge, for search results
        actions: Button label -> callback, for moderation views
    """
    st.markdown(tool_card_html(tool, score), unsafe_allow_html=True)

    with st.expander("Details", expanded=False):
        if tool.description:
            st.markdown(tool.description)
        col1, col2 = st.columns(2)
        col1.metric("Upvotes", tool.upvotes_count)
        col2.metric("Pricing", tool.pricing_model or "n/a")
        if tool.website_url:
            st.markdown(f"[Visit website]({tool.website_url})")

        if actions:
            cols = st.columns(len(actions))
            for col, (label, callback) in zip(cols, actions.items()):
                col.button(
                    label,
                    key=f"{label}_{tool.id}",
                    on_click=callback,
                    args=(tool,),
                    use_container_width=True,
                )

"""UI components package."""

from .analytics_panel import (
    render_analytics_panel,
    render_knowledge_gaps,
    render_recent_activity,
)
from .tool_card import render_search_results, render_tool_card, render_tool_list, tool_card_html

__all__ = [
    "render_analytics_panel",
    "render_knowledge_gaps",
    "render_recent_activity",
    "render_search_results",
    "render_tool_card",
    "render_tool_list",
    "tool_card_html",
]

"""
Search models - scored tools and the assembled search page payload.
"""
from typing import Optional

from pydantic import BaseModel, Field

from .tool import ToolListing


class ScoredTool(BaseModel):
    """A tool with its relevance score for a query."""
    tool: ToolListing
    score: int = Field(ge=0)


class SearchResults(BaseModel):
    """Everything the search page shows for one query."""
    query: str
    results: list[ScoredTool] = Field(default_factory=list)
    featured: list[ToolListing] = Field(default_factory=list)
    popular: list[ToolListing] = Field(default_factory=list)
    related: list[ToolListing] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    def shown_ids(self) -> set[str]:
        """Ids already displayed in the main results or the featured strip."""
        ids = {s.tool.id for s in self.results if s.tool.id}
        ids.update(t.id for t in self.featured if t.id)
        return ids


class BrowsePage(BaseModel):
    """Filtered and sorted public listings plus category facets."""
    tools: list[ToolListing] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    category_counts: dict[str, int] = Field(default_factory=dict)
    selected_category: Optional[str] = None
    sort: str = "createdAt_desc"

"""
Tool search and browse ranking - in-memory scoring over fetched listings.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Iterable, Optional

from ..models.search import ScoredTool
from ..models.tool import ToolListing


logger = logging.getLogger(__name__)


# (full phrase weight, per word weight)
NAME_WEIGHTS = (5, 3)
TAGLINE_WEIGHTS = (3, 2)
DESCRIPTION_WEIGHTS = (2, 1)
CATEGORY_WEIGHTS = (3, 2)
TAG_WEIGHTS = (2, 1)

# URL slug -> canonical category name
CATEGORY_SLUGS: dict[str, Optional[str]] = {
    "all": None,
    "ai": "AI & Machine Learning",
    "productivity": "Productivity",
    "design": "Design",
    "development": "Development",
    "marketing": "Marketing",
    "analytics": "Analytics",
    "communication": "Communication",
    "finance": "Finance",
    "ecommerce": "E-commerce",
    "education": "Education",
    "health": "Health",
    "entertainment": "Entertainment",
    "security": "Security",
    "social": "Social Media",
    "content": "Content Creation",
    "support": "Customer Support",
    "utilities": "Utilities",
}

SORT_OPTIONS: dict[str, str] = {
    "createdAt_desc": "Latest",
    "createdAt_asc": "Oldest",
    "name_asc": "Name A-Z",
    "name_desc": "Name Z-A",
}
DEFAULT_SORT = "createdAt_desc"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _field_score(text: Optional[str], phrase: str, words: list[str], weights: tuple[int, int]) -> int:
    if not text:
        return 0
    text = text.lower()
    phrase_weight, word_weight = weights
    score = phrase_weight if phrase in text else 0
    score += sum(word_weight for word in words if word in text)
    return score


def score_tool(tool: ToolListing, query: str) -> int:
    """
    Relevance of ``tool`` for ``query`` by weighted substring matches.

    Each field adds its phrase weight when it contains the whole query and its
    word weight for every query word it contains. Categories and tags are
    scored one entry at a time.
    """
    phrase = (query or "").strip().lower()
    if not phrase:
        return 0
    words = phrase.split()

    score = _field_score(tool.name, phrase, words, NAME_WEIGHTS)
    score += _field_score(tool.tagline, phrase, words, TAGLINE_WEIGHTS)
    score += _field_score(tool.description, phrase, words, DESCRIPTION_WEIGHTS)
    for category in tool.categories:
        score += _field_score(category, phrase, words, CATEGORY_WEIGHTS)
    for tag in tool.tags:
        score += _field_score(tag, phrase, words, TAG_WEIGHTS)
    return score


def _rank_key(scored: ScoredTool) -> tuple[int, bool, float]:
    tool = scored.tool
    featured_price = tool.featured_price if tool.is_featured else 0
    return (-scored.score, not tool.is_featured, -featured_price)


def rank_tools(tools: Iterable[ToolListing], query: str) -> list[ScoredTool]:
    """
    Score and sort tools for a query.

    Zero-score tools are dropped. Ties on score put featured tools first,
    then higher featured price; remaining ties keep input order.
    """
    scored = []
    for tool in tools:
        score = score_tool(tool, query)
        if score > 0:
            scored.append(ScoredTool(tool=tool, score=score))

    scored.sort(key=_rank_key)
    logger.debug(f"Ranked {len(scored)} matches for {query!r}")
    return scored


def featured_tools(tools: Iterable[ToolListing]) -> list[ToolListing]:
    """Featured listings, highest payment first."""
    featured = [t for t in tools if t.is_featured]
    featured.sort(key=lambda t: t.featured_price, reverse=True)
    return featured


def popular_tools(candidates: Iterable[ToolListing], exclude_ids: set[str], limit: int = 5) -> list[ToolListing]:
    """Most upvoted candidates not already shown."""
    remaining = [t for t in candidates if t.id not in exclude_ids]
    remaining.sort(key=lambda t: t.upvotes_count, reverse=True)
    return remaining[:limit]


def related_tools(candidates: Iterable[ToolListing], exclude_ids: set[str], limit: int = 6) -> list[ToolListing]:
    """Candidates from the same category, minus anything already shown."""
    return [t for t in candidates if t.id not in exclude_ids][:limit]


# ---------------------------------------------------------------------------
# Browse
# ---------------------------------------------------------------------------


def is_valid_category(category: object) -> bool:
    """Reject junk category values that leak in from scraped submissions."""
    if not isinstance(category, str):
        return False
    trimmed = category.strip()
    if len(trimmed) < 2:
        return False
    if trimmed.isdigit():
        return False
    if "undefined" in trimmed or "null" in trimmed:
        return False
    if not re.search(r"[a-zA-Z]", trimmed):
        return False
    return True


def category_to_slug(category: str) -> str:
    slug = category.lower()
    slug = re.sub(r"[&\s]+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def slug_to_category(slug: Optional[str], available: Iterable[str]) -> Optional[str]:
    """Resolve a URL slug via the fixed mapping, then the dynamic categories."""
    if not slug:
        return None
    if slug in CATEGORY_SLUGS:
        return CATEGORY_SLUGS[slug]
    for category in available:
        if category_to_slug(category) == slug:
            return category
    return None


def count_categories(tools: Iterable[ToolListing]) -> dict[str, int]:
    """Listing count per valid category, sorted by name."""
    counts: dict[str, int] = {}
    invalid = set()
    for tool in tools:
        for category in tool.categories:
            if is_valid_category(category):
                counts[category] = counts.get(category, 0) + 1
            else:
                invalid.add(category)
    if invalid:
        logger.debug(f"Ignored invalid categories: {sorted(invalid)}")
    return dict(sorted(counts.items()))


def sort_for_browse(tools: Iterable[ToolListing], sort: str = DEFAULT_SORT) -> list[ToolListing]:
    """Featured first, then the selected order."""
    if sort not in SORT_OPTIONS:
        sort = DEFAULT_SORT

    ordered = list(tools)
    if sort.startswith("createdAt"):
        ordered.sort(key=lambda t: t.created_at or _EPOCH, reverse=sort.endswith("desc"))
    else:
        ordered.sort(key=lambda t: (t.name or "").lower(), reverse=sort.endswith("desc"))

    # Stable sort keeps the selected order within each group
    ordered.sort(key=lambda t: not t.is_featured)
    return ordered


def filter_by_category(tools: Iterable[ToolListing], category: Optional[str]) -> list[ToolListing]:
    if not category:
        return list(tools)
    return [t for t in tools if category in t.categories]

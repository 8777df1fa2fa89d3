"""
Content models - blog posts, roadmap items, changelog entries and inbound forms.
"""
import math
import re
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import Field, field_validator

from .base import DocumentModel, parse_timestamp


RoadmapStatus = Literal["upcoming", "in_progress", "completed", "cancelled"]

WORDS_PER_MINUTE = 200


def generate_slug(title: str) -> str:
    """Build a URL slug from a post title."""
    slug = (title or "").lower()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def estimate_read_time(content: str) -> int:
    """Minutes to read ``content`` at 200 words per minute, at least one."""
    words = len((content or "").split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


class BlogPost(DocumentModel):
    """A blog post in the ``blogPosts`` collection."""
    title: str
    slug: str = ""
    excerpt: str = ""
    content: str = ""
    category: str = "insights"
    keywords: str = ""
    featured: bool = False
    published: bool = False
    featured_image: Optional[dict[str, Any]] = Field(default=None, alias="featuredImage")
    read_time: int = Field(default=1, alias="readTime")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    def model_post_init(self, __context: Any) -> None:
        """Derive the slug when missing."""
        if not self.slug:
            self.slug = generate_slug(self.title)


class RoadmapItem(DocumentModel):
    """A public roadmap entry under ``admin/roadmap/items``."""
    title: str
    description: str = ""
    status: RoadmapStatus = "upcoming"
    priority: int = Field(default=1, description="Lower sorts first")
    expected_date: Optional[datetime] = Field(default=None, alias="expectedDate")
    category: str = "feature"

    @field_validator("expected_date", mode="before")
    @classmethod
    def parse_expected_date(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, v: Any) -> int:
        if v in (None, ""):
            return 1
        return int(v)


class ChangelogEntry(DocumentModel):
    """A release note under ``admin/changelog/items``."""
    title: str
    description: str = ""
    version: str = "1.0.0"
    type: str = "minor"
    features: list[str] = Field(default_factory=list)
    published: bool = True
    source: Optional[str] = None
    roadmap_id: Optional[str] = Field(default=None, alias="roadmapId")


class ContactMessage(DocumentModel):
    """Contact form submission."""
    name: str
    email: str
    subject: str = ""
    message: str


class WaitlistSignup(DocumentModel):
    """Early-access waitlist entry."""
    email: str
    plan: Optional[str] = None

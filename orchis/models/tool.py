"""
Tool listing models - directory entries and their lifecycle.
"""
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import Field, field_validator

from .base import DocumentModel, parse_timestamp


ToolStatus = Literal["pending", "approved", "verified"]

PUBLIC_STATUSES: tuple[str, ...] = ("approved", "verified")


class ToolListing(DocumentModel):
    """A tool in the directory as stored in the ``tools`` collection."""
    name: str = ""
    tagline: Optional[str] = None
    description: Optional[str] = None
    website_url: Optional[str] = Field(default=None, alias="websiteUrl")
    logo_url: Optional[str] = Field(default=None, alias="logoUrl")
    screenshot_url: Optional[str] = Field(default=None, alias="screenshotUrl")
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    pricing_model: Optional[str] = Field(default=None, alias="pricingModel")
    is_featured: bool = Field(default=False, alias="isFeatured")
    featured_price: float = Field(default=0, alias="featuredPrice")
    upvotes_count: int = Field(default=0, alias="upvotesCount")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    status: ToolStatus = "pending"
    slug: Optional[str] = None
    submitter_email: Optional[str] = Field(default=None, alias="submitterEmail")
    source: Optional[str] = None

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator("categories", "tags", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> list[str]:
        """Stored lists occasionally hold nulls or a single string."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(item) for item in v if item is not None]

    @field_validator("featured_price", "upvotes_count", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Any:
        return 0 if v is None else v

    @property
    def is_public(self) -> bool:
        """Approved and verified listings are visible in the directory."""
        return self.status in PUBLIC_STATUSES


class ToolSubmission(DocumentModel):
    """Form data for a new tool, before moderation."""
    name: str
    tagline: str = ""
    description: str = ""
    website_url: str = Field(alias="websiteUrl")
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    platforms: list[str] = Field(default_factory=list)
    pricing_model: Optional[str] = Field(default=None, alias="pricingModel")
    pricing_details: Optional[str] = Field(default=None, alias="pricingDetails")
    features: list[str] = Field(default_factory=list)
    use_cases: list[str] = Field(default_factory=list, alias="useCases")
    integrations: list[str] = Field(default_factory=list)
    target_audience: Optional[str] = Field(default=None, alias="targetAudience")
    submitter_email: Optional[str] = Field(default=None, alias="submitterEmail")
    is_featured: bool = Field(default=False, alias="isFeatured")

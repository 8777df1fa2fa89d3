"""
Configuration and environment handling for the Orchis console.
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()


def _split_csv(value: str) -> list[str]:
    return [part.strip().lower() for part in value.split(",") if part.strip()]


class FirebaseConfig(BaseModel):
    """Managed backend (Firestore, Functions, Storage) configuration."""
    project_id: str = Field(default_factory=lambda: os.getenv("FIREBASE_PROJECT_ID", ""))
    credentials_path: Optional[str] = Field(
        default_factory=lambda: os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
    )
    storage_bucket: str = Field(default_factory=lambda: os.getenv("FIREBASE_STORAGE_BUCKET", ""))
    functions_region: str = Field(default_factory=lambda: os.getenv("FUNCTIONS_REGION", "us-central1"))
    request_timeout: float = Field(default=30.0, description="Seconds per callable function request")

    @property
    def functions_base_url(self) -> str:
        return f"https://{self.functions_region}-{self.project_id}.cloudfunctions.net"


class UnsplashConfig(BaseModel):
    """Unsplash photo API configuration."""
    access_key: str = Field(default_factory=lambda: os.getenv("UNSPLASH_ACCESS_KEY", ""))
    api_url: str = Field(default="https://api.unsplash.com")
    per_page: int = Field(default=20)
    timeout: float = Field(default=15.0)


class StripeConfig(BaseModel):
    """Hosted checkout configuration."""
    checkout_base_url: str = Field(default="https://checkout.stripe.com/c/pay")
    min_featured_amount: int = Field(default=19, description="Lowest accepted featured payment, USD")


class AnalyticsConfig(BaseModel):
    """Analytics aggregation settings."""
    recent_sessions_limit: int = Field(default=10)
    placeholder_resolution_ratio: float = Field(
        default=0.8,
        description="Share of sessions reported as resolved until the backend measures it",
    )
    placeholder_response_time: str = Field(default="2.3h")


class SearchConfig(BaseModel):
    """Tool directory search settings."""
    min_tracked_term_length: int = Field(default=2)
    popular_candidates: int = Field(default=50, description="Newest tools considered for the popular list")
    popular_limit: int = Field(default=5)
    related_candidates: int = Field(default=8)
    related_limit: int = Field(default=6)


class AdminConfig(BaseModel):
    """Admin access configuration."""
    admin_emails: list[str] = Field(
        default_factory=lambda: _split_csv(os.getenv("ADMIN_EMAILS", ""))
    )


class UIConfig(BaseModel):
    """UI configuration."""
    page_title: str = Field(default="Orchis Console")
    page_icon: str = Field(default="🌸")
    theme_primary_color: str = Field(default="#F97316")  # orange-500
    theme_accent_color: str = Field(default="#A3E635")   # lime-400


class Config(BaseModel):
    """Main configuration."""
    firebase: FirebaseConfig = Field(default_factory=FirebaseConfig)
    unsplash: UnsplashConfig = Field(default_factory=UnsplashConfig)
    stripe: StripeConfig = Field(default_factory=StripeConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)
    ui: UIConfig = Field(default_factory=UIConfig)

    # Paths
    cache_dir: Path = Field(default=Path(".cache"))

    # Feature flags
    enable_search_tracking: bool = Field(default=True)
    enable_screenshots: bool = Field(default=True)


# Singleton config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the singleton config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config

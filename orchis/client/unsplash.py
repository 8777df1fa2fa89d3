"""
Unsplash API client for the blog image picker.
"""
import logging
from typing import Any, Optional

import requests
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from ..config import UnsplashConfig, get_config
from ..errors import UnsplashError
from ..models.photo import Photo


logger = logging.getLogger(__name__)


class UnsplashClient:
    """
    Keyword search and curated photo lists.
    Read requests are retried on transport errors.
    """

    # Picker category -> search terms
    CATEGORY_QUERIES = {
        "business": "business office professional",
        "technology": "technology computer software",
        "people": "people team collaboration",
        "abstract": "abstract geometric pattern",
        "nature": "nature landscape minimal",
    }

    def __init__(self, config: Optional[UnsplashConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or get_config().unsplash
        self.session = session or requests.Session()
        if not self.config.access_key:
            logger.warning("No Unsplash access key configured")

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Client-ID {self.config.access_key}"}

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            f"Retry attempt {retry_state.attempt_number}"
        ),
    )
    def _get(self, path: str, params: dict[str, Any]) -> Any:
        resp = self.session.get(
            f"{self.config.api_url}{path}",
            params=params,
            headers=self.headers,
            timeout=self.config.timeout,
        )
        if not resp.ok:
            raise UnsplashError(resp.status_code, resp.reason or "")
        return resp.json()

    def search_photos(self, query: str, page: int = 1, per_page: Optional[int] = None) -> list[Photo]:
        """Landscape photos matching ``query``."""
        data = self._get("/search/photos", {
            "query": query,
            "page": page,
            "per_page": per_page or self.config.per_page,
            "orientation": "landscape",
        })
        return [Photo.from_api(p) for p in data.get("results", [])]

    def get_featured_photos(self, page: int = 1, per_page: Optional[int] = None) -> list[Photo]:
        """Popular landscape photos."""
        data = self._get("/photos", {
            "page": page,
            "per_page": per_page or self.config.per_page,
            "order_by": "popular",
            "orientation": "landscape",
        })
        return [Photo.from_api(p) for p in data]

    def get_photos_by_category(self, category: str, page: int = 1, per_page: Optional[int] = None) -> list[Photo]:
        query = self.CATEGORY_QUERIES.get(category, category)
        return self.search_photos(query, page, per_page)

    def trigger_download(self, download_url: str) -> None:
        """
        Report a photo download, as the API terms require when a photo is used.
        Failures are logged and ignored.
        """
        if not download_url:
            return
        try:
            self.session.get(download_url, headers=self.headers, timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.error(f"Error triggering download: {e}")

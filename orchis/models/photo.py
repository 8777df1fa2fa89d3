"""
Stock photo model for the blog image picker.
"""
from typing import Any

from pydantic import BaseModel


class Photo(BaseModel):
    """A photo returned by the Unsplash API, flattened for display."""
    id: str
    url: str
    small_url: str
    thumb_url: str
    description: str = "Unsplash image"
    author: str = ""
    author_url: str = ""
    download_url: str = ""

    @classmethod
    def from_api(cls, photo: dict[str, Any]) -> "Photo":
        """Flatten an Unsplash photo object."""
        urls = photo.get("urls") or {}
        user = photo.get("user") or {}
        return cls(
            id=photo["id"],
            url=urls.get("regular", ""),
            small_url=urls.get("small", ""),
            thumb_url=urls.get("thumb", ""),
            description=photo.get("description") or photo.get("alt_description") or "Unsplash image",
            author=user.get("name", ""),
            author_url=(user.get("links") or {}).get("html", ""),
            download_url=(photo.get("links") or {}).get("download_location", ""),
        )

    def to_featured_image(self) -> dict[str, Any]:
        """Stored ``featuredImage`` shape of a blog post."""
        return {
            "id": self.id,
            "url": self.url,
            "smallUrl": self.small_url,
            "thumbUrl": self.thumb_url,
            "description": self.description,
            "author": self.author,
            "authorUrl": self.author_url,
            "downloadUrl": self.download_url,
        }

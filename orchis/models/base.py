"""
Base document model shared by every Firestore-backed shape.
"""
from datetime import datetime, timezone
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict


D = TypeVar("D", bound="DocumentModel")


def parse_timestamp(v: Any) -> Optional[datetime]:
    """
    Parse a stored timestamp into an aware datetime.

    Accepts datetimes (Firestore returns aware UTC values), ISO strings
    ("Z" suffix included), epoch milliseconds, and Firestore-style
    ``{"seconds": ...}`` maps. Naive values are taken as UTC.
    """
    if v is None or v == "":
        return None
    if isinstance(v, datetime):
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)
    if isinstance(v, (int, float)):
        return datetime.fromtimestamp(v / 1000, tz=timezone.utc)
    if isinstance(v, str):
        try:
            parsed = datetime.fromisoformat(v.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    if isinstance(v, dict) and "seconds" in v:
        return datetime.fromtimestamp(float(v["seconds"]), tz=timezone.utc)
    return None


class DocumentModel(BaseModel):
    """
    Pydantic model for a document-store record.

    Stored documents use camelCase keys; fields declare them as aliases and
    also accept their snake_case names.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None

    @classmethod
    def from_document(cls: type[D], doc_id: Optional[str], data: dict[str, Any]) -> D:
        """Build a model from a document id and its stored data."""
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> dict[str, Any]:
        """Serialize to stored (camelCase) form without the id."""
        return self.model_dump(by_alias=True, exclude={"id"})

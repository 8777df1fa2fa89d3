"""
Roadmap status transitions and the changelog entries they produce.
"""
from typing import Callable, Optional

from ..models.content import ChangelogEntry, RoadmapItem


TransitionHook = Callable[[Optional[RoadmapItem], RoadmapItem], Optional[ChangelogEntry]]


def changelog_for_transition(
    previous: Optional[RoadmapItem],
    updated: RoadmapItem,
) -> Optional[ChangelogEntry]:
    """
    Changelog entry for an item that has just reached ``completed``.

    Returns ``None`` unless the status moves into ``completed``; re-saving an
    already completed item produces nothing.
    """
    if updated.status != "completed":
        return None
    if previous is not None and previous.status == "completed":
        return None

    return ChangelogEntry(
        title=updated.title,
        description=updated.description,
        features=[updated.title],
        source="roadmap",
        roadmap_id=updated.id or (previous.id if previous else None),
    )


def sort_roadmap(items: list[RoadmapItem]) -> list[RoadmapItem]:
    """Priority ascending; lower numbers ship first."""
    return sorted(items, key=lambda item: item.priority)

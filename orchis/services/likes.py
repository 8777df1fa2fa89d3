"""
Local like registry.

Remembers which tools this machine has liked so the directory does not count
the same visitor twice. It is a convenience, not a security boundary.
"""
import json
import logging
import random
import string
import time
from pathlib import Path
from typing import Optional

from ..config import get_config


logger = logging.getLogger(__name__)


def generate_machine_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"user_{int(time.time() * 1000)}_{suffix}"


class LikeRegistry:
    """JSON file holding ``machineId`` and ``likedTools``."""

    FILENAME = "likes.json"

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else get_config().cache_dir / self.FILENAME
        self._machine_id: Optional[str] = None
        self._liked: set[str] = set()
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable like registry {self.path}: {e}")
            return
        self._machine_id = data.get("machineId")
        self._liked = set(data.get("likedTools") or [])

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"machineId": self.machine_id, "likedTools": sorted(self._liked)}
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    @property
    def machine_id(self) -> str:
        if not self._machine_id:
            self._machine_id = generate_machine_id()
            self._save()
        return self._machine_id

    @property
    def liked_tools(self) -> set[str]:
        return set(self._liked)

    def is_liked(self, tool_id: str) -> bool:
        return tool_id in self._liked

    def add(self, tool_id: str) -> None:
        self._liked.add(tool_id)
        self._save()

    def remove(self, tool_id: str) -> None:
        self._liked.discard(tool_id)
        self._save()

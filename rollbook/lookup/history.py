"""Recent roll number searches, kept as an explicit state object."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class SearchEntry:
    roll_number: str
    timestamp: datetime
    found: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roll_number": self.roll_number,
            "timestamp": self.timestamp.isoformat(),
            "found": self.found,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SearchEntry":
        return cls(
            roll_number=str(payload["roll_number"]).upper(),
            timestamp=datetime.fromisoformat(payload["timestamp"]),
            found=bool(payload.get("found", False)),
        )


@dataclass
class SearchHistory:
    """Most-recent-first list of searches, capped at ``limit`` entries."""

    limit: int = 5
    entries: List[SearchEntry] = field(default_factory=list)

    def add(self, roll_number: str, found: bool, *, when: Optional[datetime] = None) -> SearchEntry:
        """Record a search; repeating a roll number moves it to the front."""

        entry = SearchEntry(
            roll_number=roll_number.strip().upper(),
            timestamp=when or datetime.now(timezone.utc),
            found=found,
        )
        remaining = [item for item in self.entries if item.roll_number != entry.roll_number]
        self.entries = [entry, *remaining][: self.limit]
        return entry

    def clear(self) -> None:
        self.entries = []

    def roll_numbers(self) -> List[str]:
        return [entry.roll_number for entry in self.entries]

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = [entry.to_dict() for entry in self.entries]
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: Path, *, limit: int = 5) -> "SearchHistory":
        """Read a saved history; a missing or unreadable file starts empty."""

        history = cls(limit=limit)
        if not path.exists():
            return history
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            history.entries = [SearchEntry.from_dict(item) for item in raw][:limit]
        except (ValueError, KeyError, TypeError) as exc:
            LOGGER.warning("Ignoring unreadable search history %s: %s", path, exc)
        return history


__all__ = ["SearchEntry", "SearchHistory"]

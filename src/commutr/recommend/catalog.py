"""
Candidate catalog: immutable video candidates and JSON catalog loading.

Candidates come from an external catalog/search collaborator. The core never
mutates them. JSON uses camelCase keys:

    {"id", "url", "title", "durationSec", "topicTags", "creatorId",
     "publishedAt", "level"}
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

LEVELS = ("beginner", "intermediate", "advanced")


class CatalogError(Exception):
    """Raised when a catalog file is missing or malformed."""
    pass


@dataclass(frozen=True)
class Candidate:
    """Immutable playable unit of content."""

    id: str
    url: str
    title: str
    duration_sec: int
    topic_tags: Tuple[str, ...] = field(default_factory=tuple)
    creator_id: Optional[str] = None
    published_at: Optional[str] = None  # ISO 8601
    level: Optional[str] = None  # beginner / intermediate / advanced

    def __post_init__(self):
        if not self.id:
            raise ValueError("Candidate id must be non-empty")
        if isinstance(self.duration_sec, bool) or not isinstance(self.duration_sec, int):
            raise ValueError(f"Candidate {self.id} duration must be whole seconds: {self.duration_sec!r}")
        if self.duration_sec <= 0:
            raise ValueError(f"Candidate {self.id} has non-positive duration: {self.duration_sec}")
        if self.published_at is not None and not isinstance(self.published_at, str):
            raise ValueError(f"Candidate {self.id} publishedAt must be an ISO string: {self.published_at!r}")
        # A bare string is one tag, not a sequence of characters
        tags = self.topic_tags
        if isinstance(tags, str):
            tags = (tags,)
        tags = tuple(tags)
        if not all(isinstance(tag, str) for tag in tags):
            raise ValueError(f"Candidate {self.id} has non-string topic tags: {tags!r}")
        object.__setattr__(self, "topic_tags", tags)

    def has_topic(self, topic: str) -> bool:
        """Case-insensitive exact match against any topic tag."""
        wanted = topic.lower()
        return any(tag.lower() == wanted for tag in self.topic_tags)

    @property
    def published_timestamp(self) -> Optional[float]:
        """Publication time as POSIX seconds, or None if undated/unparseable."""
        return parse_timestamp(self.published_at)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Candidate":
        """
        Build a candidate from its JSON form.

        Accepts camelCase keys and the snake_case / legacy ``duration``
        spellings found in older catalog exports.

        Raises:
            KeyError: If id, url, title or duration are missing.
            ValueError: If duration is not a positive whole number of seconds,
                or a field has the wrong type.
        """
        duration = data.get("durationSec", data.get("duration_sec", data.get("duration")))
        if duration is None:
            raise KeyError("durationSec")
        if isinstance(duration, float):
            if not duration.is_integer():
                raise ValueError(f"durationSec must be whole seconds, got {duration}")
            duration = int(duration)
        elif not isinstance(duration, bool):
            duration = int(duration)

        return cls(
            id=str(data["id"]),
            url=data["url"],
            title=data["title"],
            duration_sec=duration,
            topic_tags=data.get("topicTags", data.get("topic_tags")) or (),
            creator_id=data.get("creatorId", data.get("creator_id")),
            published_at=data.get("publishedAt", data.get("published_at")),
            level=data.get("level"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict (optional fields omitted when unset)."""
        out: Dict[str, Any] = {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "durationSec": self.duration_sec,
        }
        if self.topic_tags:
            out["topicTags"] = list(self.topic_tags)
        if self.creator_id:
            out["creatorId"] = self.creator_id
        if self.published_at:
            out["publishedAt"] = self.published_at
        if self.level:
            out["level"] = self.level
        return out


def parse_timestamp(value: Optional[str]) -> Optional[float]:
    """
    Parse an ISO-8601 timestamp into POSIX seconds.

    A trailing "Z" is accepted. Naive timestamps are treated as UTC.
    Returns None for missing or unparseable values.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable publishedAt: {value}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def filter_by_topic(candidates: Iterable[Candidate], topic: str) -> List[Candidate]:
    """Keep candidates tagged with topic (case-insensitive)."""
    return [c for c in candidates if c.has_topic(topic)]


def candidates_from_dicts(rows: Iterable[Any]) -> List[Candidate]:
    """
    Convert raw JSON rows to candidates, skipping invalid rows.

    Args:
        rows: Iterable of decoded JSON objects

    Returns:
        Valid candidates in input order
    """
    out: List[Candidate] = []
    for idx, row in enumerate(rows):
        if not isinstance(row, dict):
            logger.warning(f"Skipping catalog row {idx}: not an object")
            continue
        try:
            out.append(Candidate.from_dict(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping catalog row {idx} ({row.get('id', '?')}): {e}")
    return out


def load_catalog(path: str) -> List[Candidate]:
    """
    Load candidates from a JSON catalog file.

    Args:
        path: Path to a JSON array of candidate objects

    Returns:
        List of Candidate objects

    Raises:
        CatalogError: If the file is missing, unreadable, or not a JSON array.
    """
    catalog_path = Path(path)
    if not catalog_path.exists():
        raise CatalogError(f"Catalog file not found: {catalog_path}")

    try:
        with open(catalog_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"Failed to read catalog {catalog_path}: {e}") from e

    if not isinstance(raw, list):
        raise CatalogError(f"Catalog {catalog_path} must be a JSON array, got {type(raw).__name__}")

    candidates = candidates_from_dicts(raw)
    logger.info(f"Loaded {len(candidates)} candidates from {catalog_path}")
    return candidates

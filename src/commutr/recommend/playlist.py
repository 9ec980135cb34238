"""
Initial Playlist Generation.

Builds the first playlist of a commute session from a candidate pool:
- Difficulty pre-filter (falls back to the whole pool when nothing matches)
- One synchronous call to the Candidate Selector
- Output: playlist.m3u and playlist.json
"""

import json
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Dict, Any, Optional, Tuple

from .catalog import Candidate
from .selector import DEFAULT_OVERBOOK_PCT, select_videos

logger = logging.getLogger(__name__)

PLAYLIST_ID_PREFIX = "pl_"


@dataclass(frozen=True)
class Playlist:
    """Result of an initial playlist build."""

    id: str
    topic: str
    difficulty: Optional[str]
    target_duration_sec: int
    total_duration_sec: int
    videos: Tuple[Candidate, ...] = field(default_factory=tuple)
    strategy: str = ""

    @property
    def under_filled(self) -> bool:
        """True when the selection falls short of the requested duration."""
        return self.total_duration_sec < self.target_duration_sec

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "topic": self.topic,
            "difficulty": self.difficulty,
            "targetDurationSec": self.target_duration_sec,
            "totalDurationSec": self.total_duration_sec,
            "underFilled": self.under_filled,
            "strategy": self.strategy,
            "videos": [v.to_dict() for v in self.videos],
        }


def make_playlist_id(topic: str, now_ms: Optional[int] = None) -> str:
    """pl_<epoch-ms>_<topic slug>"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    slug = re.sub(r"\s+", "-", topic.strip().lower())
    return f"{PLAYLIST_ID_PREFIX}{now_ms}_{slug}"


def _difficulty_pool(candidates: List[Candidate], difficulty: Optional[str]) -> List[Candidate]:
    """Prefer candidates at the requested level; use everything if none match."""
    if not difficulty:
        return candidates

    matched = [c for c in candidates if c.level == difficulty]
    if not matched:
        logger.warning(f"No candidates at difficulty {difficulty}; using full pool")
        return candidates
    return matched


def build_playlist(
    candidates: List[Candidate],
    topic: str,
    target_duration_sec: int,
    difficulty: Optional[str] = None,
    overbook_pct: float = DEFAULT_OVERBOOK_PCT,
    playlist_id: Optional[str] = None,
) -> Optional[Playlist]:
    """
    Build the initial playlist for a commute.

    Args:
        candidates: Candidate pool from the catalog/search collaborator
        topic: Topic filter (case-insensitive tag match)
        target_duration_sec: Commute length in seconds
        difficulty: Preferred level, or None for any
        overbook_pct: Allowed overshoot fraction
        playlist_id: Explicit ID (auto-generated if None)

    Returns:
        Playlist, or None if nothing could be selected
    """
    if not candidates:
        logger.error("Empty candidate pool; cannot build playlist")
        return None

    pool = _difficulty_pool(candidates, difficulty)

    logger.info(
        f"Building playlist for {topic!r} "
        f"(target: {target_duration_sec}s, difficulty: {difficulty or 'any'}, pool: {len(pool)})"
    )

    result = select_videos(pool, target_duration_sec, topic=topic, overbook_pct=overbook_pct)
    if not result.items:
        logger.error(f"No videos selected for {topic!r} (strategy={result.strategy})")
        return None

    playlist = Playlist(
        id=playlist_id or make_playlist_id(topic),
        topic=topic,
        difficulty=difficulty,
        target_duration_sec=target_duration_sec,
        total_duration_sec=result.total_sec,
        videos=result.items,
        strategy=result.strategy,
    )

    if playlist.under_filled:
        logger.warning(
            f"Playlist {playlist.id} under-filled: "
            f"{playlist.total_duration_sec}s of {target_duration_sec}s"
        )

    logger.info(
        f"✅ Playlist built: {len(playlist.videos)} videos, "
        f"{playlist.total_duration_sec}s ({playlist.total_duration_sec/60:.1f}min)"
    )
    return playlist


def write_m3u(playlist: Playlist, output_path: Path) -> bool:
    """
    Write M3U playlist file of video URLs.

    Args:
        playlist: Built playlist
        output_path: Output M3U file path

    Returns:
        True if successful, False otherwise
    """
    try:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write("#EXTM3U\n")
            for video in playlist.videos:
                f.write(f"#EXTINF:{video.duration_sec},{video.title}\n")
                f.write(f"{video.url}\n")
        logger.info(f"Wrote playlist: {output_path}")
        return True
    except OSError as e:
        logger.error(f"Failed to write M3U: {e}")
        return False


def write_playlist_json(playlist: Playlist, output_path: Path) -> bool:
    """
    Write playlist JSON (playlist fields plus generation timestamp).

    Returns:
        True if successful, False otherwise
    """
    try:
        doc = playlist.to_dict()
        doc["generatedAt"] = datetime.now(timezone.utc).isoformat()
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(doc, f, indent=2)
        logger.info(f"Wrote playlist JSON: {output_path}")
        return True
    except OSError as e:
        logger.error(f"Failed to write playlist JSON: {e}")
        return False


def export_playlist(playlist: Playlist, output_dir: str = "data/playlists") -> Optional[Tuple[str, str]]:
    """
    Write both the M3U and JSON form of a playlist.

    Returns:
        Tuple of (m3u_path, json_path) or None if either write failed
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    m3u_path = output_path / f"{playlist.id}.m3u"
    json_path = output_path / f"{playlist.id}.json"

    if not write_m3u(playlist, m3u_path):
        return None
    if not write_playlist_json(playlist, json_path):
        return None

    return (str(m3u_path), str(json_path))

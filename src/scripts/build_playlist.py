#!/usr/bin/env python3
"""
Build Commute Playlist Script

Usage: python src/scripts/build_playlist.py [topic] [minutes]

- Loads config and the candidate catalog
- Resolves the vibe preset (default difficulty when none is configured)
- Outputs: data/playlists/<playlist id>.m3u and .json
"""

import sys
import logging
from pathlib import Path

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from commutr.config import Config
from commutr.recommend.catalog import load_catalog
from commutr.recommend.playlist import build_playlist, export_playlist
from commutr.recommend.vibes import resolve_vibe

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def main():
    """Main playlist build entrypoint."""
    try:
        logger.info("🚆 Starting playlist build...")

        config = Config.load()
        logger.info(f"Config loaded: {config}")

        topic = config.get("playlist", "topic")
        minutes = config.get("playlist", "target_duration_minutes")
        if len(sys.argv) > 1:
            topic = sys.argv[1]
        if len(sys.argv) > 2:
            try:
                minutes = float(sys.argv[2])
            except ValueError:
                logger.warning(f"Invalid minutes argument: {sys.argv[2]}")

        vibe = resolve_vibe(config.get("playlist", "vibe"))
        difficulty = config.get("playlist", "difficulty") or vibe.default_difficulty
        logger.info(f"Vibe: {vibe.title} ({vibe.energy} energy), difficulty: {difficulty}")

        candidates = load_catalog(config.get("catalog", "path"))

        playlist = build_playlist(
            candidates,
            topic=topic,
            target_duration_sec=int(minutes * 60),
            difficulty=difficulty,
            overbook_pct=config.get("selection", "overbook_pct"),
        )
        if playlist is None:
            logger.error(f"No playlist could be built for {topic!r}")
            logger.info(f"Try one of: {', '.join(vibe.suggested_topics)}")
            return 1

        outputs = export_playlist(playlist, config.get("playlist", "output_dir"))
        if outputs is None:
            return 1

        m3u_path, json_path = outputs
        for i, video in enumerate(playlist.videos, 1):
            logger.info(f"  {i:2d}. {video.title} ({video.duration_sec}s)")
        logger.info(f"✅ Playlist: {m3u_path}")
        logger.info(f"✅ Playlist JSON: {json_path}")
        return 0

    except KeyboardInterrupt:
        logger.warning("Build interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Build failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

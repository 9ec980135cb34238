#!/usr/bin/env python3
"""
Simulate Commute Script

Plays an initial playlist end to end without a real player:
- Publishes PLAY / COMPLETE (and the occasional SKIP) on the event bus
- Top-Up Controller keeps the queue filled as the commute clock runs down

Set COMMUTR_RECOMMEND=http to top up via the recommend endpoint instead of
the local catalog. Set COMMUTR_SKIP_EVERY=N to skip every Nth video.
"""

import asyncio
import os
import sys
import logging
from pathlib import Path

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from commutr.config import Config
from commutr.player.events import EventBus, PlayerEvent
from commutr.player.fetch import HttpCandidateFetcher, LocalCandidateFetcher
from commutr.player.time_tracker import RemainingTimeTracker
from commutr.player.topup import TopUpConfig, TopUpController
from commutr.recommend.catalog import load_catalog
from commutr.recommend.playlist import build_playlist
from commutr.recommend.vibes import resolve_vibe

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

SKIP_AFTER_SECONDS = 60


async def simulate(config: Config) -> int:
    """Run one commute; returns number of videos played."""
    topic = config.get("playlist", "topic")
    target_sec = int(config.get("playlist", "target_duration_minutes") * 60)
    vibe = resolve_vibe(config.get("playlist", "vibe"))
    difficulty = config.get("playlist", "difficulty") or vibe.default_difficulty
    skip_every = int(os.getenv("COMMUTR_SKIP_EVERY", "0"))

    candidates = load_catalog(config.get("catalog", "path"))
    playlist = build_playlist(
        candidates,
        topic=topic,
        target_duration_sec=target_sec,
        difficulty=difficulty,
        overbook_pct=config.get("selection", "overbook_pct"),
    )
    if playlist is None:
        return 0

    if os.getenv("COMMUTR_RECOMMEND", "local") == "http":
        fetcher = HttpCandidateFetcher.from_config(config)
    else:
        fetcher = LocalCandidateFetcher(candidates, config.get("selection", "overbook_pct"))

    queue = list(playlist.videos)
    played = []

    def append_to_queue(items):
        queue.extend(items)
        logger.info(f"Queue topped up: +{len(items)} ({', '.join(c.id for c in items)})")

    hooks = TopUpConfig(
        get_queue_ids=lambda: [c.id for c in played + queue],
        get_topic=lambda: topic,
        append_to_queue=append_to_queue,
    )

    bus = EventBus()
    tracker = RemainingTimeTracker(target_sec)
    controller = TopUpController.from_config(bus, tracker, fetcher, config)
    stop = controller.start(hooks)

    try:
        while queue and tracker.remaining() > 0:
            video = queue.pop(0)
            played.append(video)
            bus.publish(PlayerEvent.play(video.id))

            if skip_every and len(played) % skip_every == 0:
                # Skipped videos do not count against the commute
                logger.info(f"⏭  Skipped {video.title}")
                bus.publish(PlayerEvent.skip(video.id, min(SKIP_AFTER_SECONDS, video.duration_sec)))
            else:
                logger.info(f"▶  {video.title} ({video.duration_sec}s)")
                bus.publish(PlayerEvent.complete(video.id, video.duration_sec))

            await controller.wait_idle()
            logger.info(f"   Remaining: {tracker.remaining():.0f}s, queued: {len(queue)}")
    finally:
        stop()

    return len(played)


def main():
    """Main simulation entrypoint."""
    try:
        logger.info("🚆 Starting commute simulation...")

        config = Config.load()
        logger.info(f"Config loaded: {config}")

        played = asyncio.run(simulate(config))
        if played == 0:
            logger.error("Nothing to play")
            return 1

        logger.info(f"✅ Commute finished: {played} videos played")
        return 0

    except KeyboardInterrupt:
        logger.warning("Simulation interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Simulation failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
Top-Up Controller: keep the playback queue filled while commute time remains.

Listens on the session's EventBus:
- COMPLETE: add consumed time, then check remaining
- SKIP: check remaining (consumed time unchanged)
- PLAY / PAUSE / ERROR: ignored

When remaining() is above the tiny-remainder threshold (30s by default) the
controller asks the candidate fetcher for more items and appends them to the
queue. Fetch failures are logged and swallowed; the queue is left unchanged.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Set

from .events import EventBus, PlayerEvent, PlayerEventType
from .fetch import FetchRequest
from .time_tracker import RemainingTimeTracker
from ..recommend.catalog import Candidate

logger = logging.getLogger(__name__)

TINY_REMAINDER_THRESHOLD = 30


@dataclass(frozen=True)
class TopUpConfig:
    """Hooks into the queue owner."""

    get_queue_ids: Callable[[], List[str]]
    get_topic: Callable[[], Optional[str]]
    append_to_queue: Callable[[List[Candidate]], None]


class TopUpController:
    """
    Requests replenishment candidates in response to playback events.

    The event handler does its bookkeeping synchronously and never waits on
    the fetch. The fetch runs as a task on the running asyncio loop, or on a
    daemon thread of its own when the event is published outside a loop. In
    the thread case append_to_queue is called from that thread.
    """

    def __init__(
        self,
        bus: EventBus,
        tracker: RemainingTimeTracker,
        fetcher,
        threshold_seconds: float = TINY_REMAINDER_THRESHOLD,
    ):
        """
        Args:
            bus: Session event bus to subscribe to
            tracker: Session remaining-time tracker
            fetcher: Object with async fetch(FetchRequest) -> List[Candidate]
            threshold_seconds: No top-up at or below this many seconds remaining
        """
        self.bus = bus
        self.tracker = tracker
        self.fetcher = fetcher
        self.threshold_seconds = threshold_seconds
        self._pending: Set[asyncio.Task] = set()
        self._threads: Set[threading.Thread] = set()
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, bus: EventBus, tracker: RemainingTimeTracker, fetcher, config) -> "TopUpController":
        threshold = config["topup"].get("threshold_seconds", TINY_REMAINDER_THRESHOLD)
        return cls(bus, tracker, fetcher, threshold_seconds=threshold)

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending) + len(self._threads)

    def start(self, config: TopUpConfig) -> Callable[[], None]:
        """
        Subscribe to playback events.

        Args:
            config: Queue owner hooks

        Returns:
            Stop function. Unsubscribes immediately; safe to call repeatedly.
            Fetches already in flight still append when they resolve.
        """

        def handle_event(event: PlayerEvent) -> None:
            self._handle_event(event, config)

        unsubscribe = self.bus.subscribe(handle_event)
        logger.info(f"Top-up controller started (threshold: {self.threshold_seconds}s)")

        stopped = False

        def stop() -> None:
            nonlocal stopped
            if stopped:
                return
            stopped = True
            unsubscribe()
            logger.info("Top-up controller stopped")

        return stop

    def _handle_event(self, event: PlayerEvent, config: TopUpConfig) -> None:
        if event.type not in (PlayerEventType.COMPLETE, PlayerEventType.SKIP):
            return

        if event.type == PlayerEventType.COMPLETE:
            self.tracker.add_consumed(event.duration_sec or 0)

        remaining = self.tracker.remaining()
        if remaining <= self.threshold_seconds:
            logger.debug(
                f"{event.type.value} on {event.video_id}: {remaining}s left, "
                f"at or below {self.threshold_seconds}s; no top-up"
            )
            return

        request = FetchRequest(
            remaining_seconds=remaining,
            exclude_ids=list(config.get_queue_ids()),
            topic=config.get_topic(),
        )
        logger.debug(
            f"{event.type.value} on {event.video_id}: requesting top-up "
            f"({remaining}s left, {len(request.exclude_ids)} excluded)"
        )
        self._schedule(request, config.append_to_queue)

    def _schedule(self, request: FetchRequest, append_to_queue: Callable[[List[Candidate]], None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            task = loop.create_task(self._top_up(request, append_to_queue))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            return

        thread = threading.Thread(
            target=self._run_in_thread,
            args=(request, append_to_queue),
            name="commutr-topup",
            daemon=True,
        )
        with self._lock:
            self._threads.add(thread)
        thread.start()

    def _run_in_thread(self, request: FetchRequest, append_to_queue: Callable[[List[Candidate]], None]) -> None:
        try:
            asyncio.run(self._top_up(request, append_to_queue))
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    async def _top_up(self, request: FetchRequest, append_to_queue: Callable[[List[Candidate]], None]) -> None:
        try:
            items = await self.fetcher.fetch(request)
        except Exception as e:
            logger.error(f"Top-up recommendation failed: {e}")
            return

        if not items:
            logger.debug("Top-up returned no items")
            return

        try:
            append_to_queue(items)
        except Exception as e:
            logger.error(f"Failed to append top-up items: {e}", exc_info=True)
            return
        logger.info(f"Topped up queue with {len(items)} videos ({sum(i.duration_sec for i in items)}s)")

    def join(self, timeout: Optional[float] = None) -> None:
        """
        Block until top-ups started outside an asyncio loop have finished.

        Args:
            timeout: Per-thread timeout in seconds (None waits indefinitely)
        """
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout)

    async def wait_idle(self) -> None:
        """Wait for every in-flight top-up (tasks and threads) to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
        if self._threads:
            await asyncio.get_running_loop().run_in_executor(None, self.join)

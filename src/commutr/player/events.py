"""
Player Event Bus: synchronous publish/subscribe for playback events.

Each playback session owns its own EventBus. publish() runs every handler
subscribed at the time of the call, in subscription order, before returning.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class PlayerEventType(str, Enum):
    PLAY = "PLAY"
    PAUSE = "PAUSE"
    SKIP = "SKIP"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"


@dataclass(frozen=True)
class PlayerEvent:
    """
    Transient playback event.

    PLAY / PAUSE / SKIP carry at_sec (playback position), COMPLETE carries
    duration_sec (seconds consumed), ERROR carries message.
    """

    type: PlayerEventType
    video_id: str
    at_sec: Optional[float] = None
    duration_sec: Optional[float] = None
    message: Optional[str] = None

    @classmethod
    def play(cls, video_id: str, at_sec: float = 0.0) -> "PlayerEvent":
        return cls(PlayerEventType.PLAY, video_id, at_sec=at_sec)

    @classmethod
    def pause(cls, video_id: str, at_sec: float) -> "PlayerEvent":
        return cls(PlayerEventType.PAUSE, video_id, at_sec=at_sec)

    @classmethod
    def skip(cls, video_id: str, at_sec: float) -> "PlayerEvent":
        return cls(PlayerEventType.SKIP, video_id, at_sec=at_sec)

    @classmethod
    def complete(cls, video_id: str, duration_sec: float) -> "PlayerEvent":
        return cls(PlayerEventType.COMPLETE, video_id, duration_sec=duration_sec)

    @classmethod
    def error(cls, video_id: str, message: str) -> "PlayerEvent":
        return cls(PlayerEventType.ERROR, video_id, message=message)


PlayerEventHandler = Callable[[PlayerEvent], None]
Unsubscribe = Callable[[], None]


class EventBus:
    """Minimal synchronous pub/sub for PlayerEvents."""

    def __init__(self):
        self._handlers: List[Tuple[object, PlayerEventHandler]] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: PlayerEventHandler) -> Unsubscribe:
        """
        Register a handler.

        Returns:
            Function that removes this subscription. Calling it more than
            once is a no-op.
        """
        # Token per subscription so the same callable can subscribe twice
        entry = (object(), handler)
        self._handlers.append(entry)

        def unsubscribe() -> None:
            try:
                self._handlers.remove(entry)
            except ValueError:
                pass  # already unsubscribed

        return unsubscribe

    def publish(self, event: PlayerEvent) -> None:
        """
        Deliver event to every current subscriber, in subscription order.

        A handler that raises is logged; the remaining handlers still run.
        """
        # Snapshot so handlers may (un)subscribe while we dispatch
        for _, handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in player event handler for {event.type.value}: {e}", exc_info=True)

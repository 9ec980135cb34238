"""
Player Session Module: Keep the playback queue topped up.

- Synchronous event bus for playback events
- Per-session remaining-time tracking
- Top-up controller requests more candidates on COMPLETE / SKIP
"""

__all__ = ["events", "time_tracker", "topup", "fetch"]

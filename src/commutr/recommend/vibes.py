"""
Vibe presets: map a commuter's mood to difficulty and topic suggestions.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VibePreset:
    """Mood preset used to seed a playlist request."""

    key: str
    title: str
    energy: str  # low / medium / high
    default_difficulty: str
    suggested_topics: Tuple[str, ...]
    description: str


VIBE_PRESETS: Dict[str, VibePreset] = {
    "focused": VibePreset(
        key="focused",
        title="Focused",
        energy="medium",
        default_difficulty="intermediate",
        suggested_topics=("python", "react", "productivity", "writing"),
        description="Dialed-in mindset. Serve structured, skill-building content.",
    ),
    "energized": VibePreset(
        key="energized",
        title="Energized",
        energy="high",
        default_difficulty="intermediate",
        suggested_topics=("fitness", "public speaking", "leadership", "design"),
        description="High-energy commute. Lean on engaging, dynamic lessons.",
    ),
    "curious": VibePreset(
        key="curious",
        title="Curious",
        energy="medium",
        default_difficulty="beginner",
        suggested_topics=("history", "cooking", "photography", "spanish"),
        description="Open to new things. Suggest approachable, discovery-friendly topics.",
    ),
    "unwinding": VibePreset(
        key="unwinding",
        title="Unwinding",
        energy="low",
        default_difficulty="beginner",
        suggested_topics=("mindfulness", "yoga", "storytelling", "music theory"),
        description="Wind-down mode. Offer lighter, reflective learning sessions.",
    ),
}

DEFAULT_VIBE = "focused"


def resolve_vibe(key: Optional[str] = None) -> VibePreset:
    """
    Look up a vibe preset by key (case-insensitive).

    Unknown or missing keys fall back to the "focused" preset.
    """
    if not key:
        return VIBE_PRESETS[DEFAULT_VIBE]

    preset = VIBE_PRESETS.get(key.strip().lower())
    if preset is None:
        logger.debug(f"Unknown vibe {key!r}; using {DEFAULT_VIBE}")
        return VIBE_PRESETS[DEFAULT_VIBE]
    return preset


def bump_difficulty(current: str, mastery_score: float) -> str:
    """
    Raise difficulty one level once mastery is high enough.

    beginner -> intermediate at score >= 5
    intermediate -> advanced at score >= 8
    advanced stays advanced
    """
    if current == "advanced":
        return "advanced"
    if current == "intermediate" and mastery_score >= 8:
        return "advanced"
    if current == "beginner" and mastery_score >= 5:
        return "intermediate"
    return current

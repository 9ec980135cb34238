"""
Candidate Selector: Multi-strategy greedy fill for a commute time budget.

- Greedy fill per strategy (no backtracking or branch-and-bound)
- Strategies: longest-first, shortest-first, creator-aware, recency-first
- Total never exceeds remaining_seconds * (1 + overbook_pct)
- Winner: most total duration, then most distinct creators, then newest average
- Output: SelectionResult(items, total_sec, strategy)

This is a bounded heuristic. It may under-fill when a tighter combination
exists that none of the strategies discovers.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Any, Iterable, List, Optional, Set, Tuple

from .catalog import Candidate

logger = logging.getLogger(__name__)

DEFAULT_OVERBOOK_PCT = 0.03

STRATEGY_EMPTY = "empty"
STRATEGY_NO_MATCHES = "no-matches"
STRATEGY_NO_FIT = "no-fit"


@dataclass(frozen=True)
class SelectionResult:
    """Selected candidates, their total duration, and the winning strategy."""

    items: Tuple[Candidate, ...] = field(default_factory=tuple)
    total_sec: int = 0
    strategy: str = STRATEGY_EMPTY

    def fill_rate(self, target_seconds: float) -> float:
        """Ratio of selected duration to the requested budget."""
        if target_seconds <= 0:
            return 0.0
        return self.total_sec / target_seconds

    def ids(self) -> List[str]:
        return [item.id for item in self.items]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "items": [item.to_dict() for item in self.items],
            "totalSec": self.total_sec,
            "strategy": self.strategy,
        }


class SelectionConstraints:
    """Request-scoped selection constraints."""

    def __init__(
        self,
        remaining_seconds: float,
        exclude_ids: Optional[Iterable[str]] = None,
        topic: Optional[str] = None,
        overbook_pct: float = DEFAULT_OVERBOOK_PCT,
    ):
        """
        Args:
            remaining_seconds: Target duration; <= 0 yields an empty result
            exclude_ids: Identifiers that must not be selected
            topic: Optional topic tag filter (case-insensitive)
            overbook_pct: Fraction by which the total may exceed the target
        """
        self.remaining_seconds = remaining_seconds
        self.exclude_ids: Set[str] = set(exclude_ids or ())
        self.topic = topic
        self.overbook_pct = overbook_pct

    @classmethod
    def from_config(
        cls,
        config,
        remaining_seconds: float,
        exclude_ids: Optional[Iterable[str]] = None,
        topic: Optional[str] = None,
    ) -> "SelectionConstraints":
        """Build constraints taking the overbook tolerance from config["selection"]."""
        overbook_pct = config["selection"].get("overbook_pct", DEFAULT_OVERBOOK_PCT)
        return cls(remaining_seconds, exclude_ids=exclude_ids, topic=topic, overbook_pct=overbook_pct)

    @property
    def max_duration(self) -> float:
        return self.remaining_seconds * (1 + self.overbook_pct)

    def __repr__(self) -> str:
        return (
            f"SelectionConstraints(remaining={self.remaining_seconds}, "
            f"excluded={len(self.exclude_ids)}, topic={self.topic!r}, "
            f"overbook={self.overbook_pct})"
        )


# ---------------------------------------------------------------------------
# Ordering strategies
# ---------------------------------------------------------------------------


def longest_first(candidates: List[Candidate]) -> List[Candidate]:
    return sorted(candidates, key=lambda c: -c.duration_sec)


def shortest_first(candidates: List[Candidate]) -> List[Candidate]:
    return sorted(candidates, key=lambda c: c.duration_sec)


def creator_aware(candidates: List[Candidate]) -> List[Candidate]:
    """Items with a known creator first, then by duration descending."""
    return sorted(candidates, key=lambda c: (0 if c.creator_id else 1, -c.duration_sec))


def recency_first(candidates: List[Candidate]) -> List[Candidate]:
    """Newest publication first; undated items last; then by duration descending."""
    def key(c: Candidate):
        ts = c.published_timestamp
        return (ts is None, -(ts or 0.0), -c.duration_sec)

    return sorted(candidates, key=key)


# Order matters: on a full tie the earlier strategy wins.
STRATEGIES: List[Tuple[str, Callable[[List[Candidate]], List[Candidate]]]] = [
    ("longest-first", longest_first),
    ("shortest-first", shortest_first),
    ("creator-aware", creator_aware),
    ("recency-first", recency_first),
]


def greedy_fill(ordered: List[Candidate], max_duration: float, strategy: str) -> SelectionResult:
    """
    Walk candidates in order, accepting each one that still fits.

    Args:
        ordered: Candidates in strategy order
        max_duration: Hard cap on the running total
        strategy: Label recorded on the result

    Returns:
        SelectionResult for this strategy (possibly empty)
    """
    items: List[Candidate] = []
    total = 0

    for candidate in ordered:
        if total + candidate.duration_sec <= max_duration:
            items.append(candidate)
            total += candidate.duration_sec

    return SelectionResult(items=tuple(items), total_sec=total, strategy=strategy)


def count_unique_creators(items: Iterable[Candidate]) -> int:
    return len({c.creator_id for c in items if c.creator_id})


def average_recency(items: Iterable[Candidate]) -> float:
    """Mean publication timestamp over dated items (0.0 when none are dated)."""
    stamps = [c.published_timestamp for c in items]
    stamps = [ts for ts in stamps if ts is not None]
    if not stamps:
        return 0.0
    return sum(stamps) / len(stamps)


def _rank(result: SelectionResult) -> Tuple[int, int, float]:
    return (result.total_sec, count_unique_creators(result.items), average_recency(result.items))


def pick_best(results: List[SelectionResult]) -> SelectionResult:
    """
    Pick the winning selection.

    Tie-breakers, applied in order: total duration, distinct creators,
    average publication timestamp. Empty results never win.
    """
    non_empty = [r for r in results if r.items]
    if not non_empty:
        return SelectionResult(strategy=STRATEGY_NO_FIT)
    # max() keeps the first of equal keys, so strategy order settles full ties
    return max(non_empty, key=_rank)


def _filter_pool(
    candidates: List[Candidate],
    exclude_ids: Set[str],
    topic: Optional[str],
) -> List[Candidate]:
    """Apply topic filter, exclusions and de-duplication, keeping input order."""
    pool = candidates
    if topic:
        pool = [c for c in pool if c.has_topic(topic)]

    seen: Set[str] = set()
    filtered = []
    for candidate in pool:
        if candidate.id in exclude_ids:
            continue
        if candidate.id in seen:
            logger.debug(f"Dropping duplicate candidate {candidate.id}")
            continue
        seen.add(candidate.id)
        filtered.append(candidate)

    return filtered


def select_videos(
    candidates: List[Candidate],
    remaining_seconds: float,
    exclude_ids: Optional[Iterable[str]] = None,
    topic: Optional[str] = None,
    overbook_pct: float = DEFAULT_OVERBOOK_PCT,
) -> SelectionResult:
    """
    Select candidates that fit within remaining_seconds.

    Args:
        candidates: Candidate pool (input order settles de-duplication)
        remaining_seconds: Target duration in seconds
        exclude_ids: Identifiers to drop from the pool
        topic: Optional topic filter (case-insensitive exact tag match)
        overbook_pct: Allowed overshoot fraction (default 0.03)

    Returns:
        SelectionResult. Degenerate input yields an empty result with
        strategy "empty", "no-matches" or "no-fit"; nothing is raised.
    """
    if remaining_seconds <= 0 or not candidates:
        logger.debug(f"Empty selection (remaining={remaining_seconds}, pool={len(candidates)})")
        return SelectionResult(strategy=STRATEGY_EMPTY)

    pool = _filter_pool(list(candidates), set(exclude_ids or ()), topic)
    if not pool:
        logger.debug(f"No candidates left after filtering (topic={topic!r})")
        return SelectionResult(strategy=STRATEGY_NO_MATCHES)

    max_duration = remaining_seconds * (1 + overbook_pct)

    results = [greedy_fill(order(pool), max_duration, name) for name, order in STRATEGIES]
    for r in results:
        logger.debug(
            f"Strategy {r.strategy}: {len(r.items)} items, {r.total_sec}s, "
            f"{count_unique_creators(r.items)} creators"
        )

    best = pick_best(results)

    logger.info(
        f"Selected {len(best.items)} of {len(pool)} candidates: "
        f"{best.total_sec}s / {remaining_seconds}s "
        f"({best.fill_rate(remaining_seconds) * 100:.1f}% fill, strategy={best.strategy})"
    )
    return best


def select_with_constraints(candidates: List[Candidate], constraints: SelectionConstraints) -> SelectionResult:
    """Run select_videos with a SelectionConstraints object."""
    return select_videos(
        candidates,
        constraints.remaining_seconds,
        exclude_ids=constraints.exclude_ids,
        topic=constraints.topic,
        overbook_pct=constraints.overbook_pct,
    )

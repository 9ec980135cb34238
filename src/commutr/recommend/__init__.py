"""
Recommendation Module: Fit educational videos to a commute time budget.

- Multi-strategy greedy fill (no backtracking)
- Overbook tolerance caps the total (default 3%)
- Ties broken by creator diversity, then recency
- Output: selected items, total duration, winning strategy
"""

__all__ = ["catalog", "selector", "playlist", "vibes"]

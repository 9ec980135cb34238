"""
Candidate fetchers used by the Top-Up Controller.

A fetcher takes a FetchRequest and returns replenishment candidates:
- HttpCandidateFetcher: POSTs to a remote recommend endpoint (httpx)
- LocalCandidateFetcher: runs the selector in-process over a fixed pool

Both raise TopUpUnavailable when no replenishment can be produced.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from ..recommend.catalog import Candidate, candidates_from_dicts
from ..recommend.selector import DEFAULT_OVERBOOK_PCT, select_videos

logger = logging.getLogger(__name__)


class TopUpUnavailable(Exception):
    """Raised when replenishment candidates cannot be fetched."""
    pass


@dataclass(frozen=True)
class FetchRequest:
    """Replenishment request sent to the candidate-fetch collaborator."""

    remaining_seconds: float
    exclude_ids: List[str] = field(default_factory=list)
    topic: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Wire body: {remainingSeconds, excludeIds, topic}"""
        return {
            "remainingSeconds": self.remaining_seconds,
            "excludeIds": list(self.exclude_ids),
            "topic": self.topic,
        }


class HttpCandidateFetcher:
    """Fetch replenishment candidates from a remote recommend endpoint."""

    def __init__(
        self,
        base_url: str,
        path: str = "/api/recommend",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Server root, e.g. "http://localhost:3000"
            path: Recommend endpoint path
            timeout: Client timeout in seconds
            transport: Optional httpx transport (used for testing)
        """
        self.url = base_url.rstrip("/") + path
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_config(cls, config) -> "HttpCandidateFetcher":
        topup = config["topup"]
        return cls(
            base_url=topup.get("recommend_url", "http://localhost:3000"),
            path=topup.get("recommend_path", "/api/recommend"),
            timeout=float(topup.get("request_timeout_seconds", 10)),
        )

    async def fetch(self, request: FetchRequest) -> List[Candidate]:
        """
        POST the request and parse the returned items.

        Raises:
            TopUpUnavailable: On transport failure, non-success status, or a
                body that is not {"items": [...]}.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, json=request.to_payload())
        except httpx.HTTPError as e:
            raise TopUpUnavailable(f"Recommend request failed: {e}") from e

        if not response.is_success:
            raise TopUpUnavailable(
                f"Recommend request returned {response.status_code} {response.reason_phrase}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TopUpUnavailable(f"Recommend response is not JSON: {e}") from e

        items = data.get("items") if isinstance(data, dict) else None
        if items is None:
            logger.debug("Recommend response had no items")
            return []
        if not isinstance(items, list):
            raise TopUpUnavailable("Recommend response items is not a list")

        return candidates_from_dicts(items)


class LocalCandidateFetcher:
    """Serve replenishment requests from an in-memory candidate pool."""

    def __init__(self, candidates: List[Candidate], overbook_pct: float = DEFAULT_OVERBOOK_PCT):
        self.candidates = list(candidates)
        self.overbook_pct = overbook_pct

    async def fetch(self, request: FetchRequest) -> List[Candidate]:
        result = select_videos(
            self.candidates,
            request.remaining_seconds,
            exclude_ids=request.exclude_ids,
            topic=request.topic,
            overbook_pct=self.overbook_pct,
        )
        return list(result.items)

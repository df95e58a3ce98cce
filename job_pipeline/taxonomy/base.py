"""Base classes for taxonomy lookups."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import settings
from ..exceptions import TaxonomyError
from ..models import StageModel

logger = logging.getLogger(__name__)


class TaxonomyCandidate(StageModel):
    """A `{code, label}` search hit, plus what a selection needs to be recorded."""

    code: str
    label: str
    taxonomy: str
    version: Optional[str] = None
    parent_code: Optional[str] = None
    country: Optional[str] = None


class TaxonomySource(ABC):
    """Abstract base class for a taxonomy search capability."""

    name: str

    @abstractmethod
    def search(self, query: str, limit: int = 10) -> List[TaxonomyCandidate]:
        """Return candidates matching `query`, best first."""
        raise NotImplementedError


def filter_candidates(candidates: Sequence[TaxonomyCandidate], query: str, limit: int) -> List[TaxonomyCandidate]:
    """Case-insensitive substring match on label or country."""
    q = query.strip().lower()
    hits = [
        c
        for c in candidates
        if q in c.label.lower() or q in (c.country or "").lower()
    ]
    return hits[: max(limit, 0)]


class HttpTaxonomySource(TaxonomySource):
    """Query a remote endpoint and fall back to a bundled mock catalog on failure.

    Subclasses implement `_fetch` and set `fallback`. With `use_fallback=False`
    failures surface as `TaxonomyError` instead.
    """

    fallback: Sequence[TaxonomyCandidate] = ()

    def __init__(
        self,
        base_url: str,
        timeout_s: Optional[float] = None,
        use_fallback: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.use_fallback = use_fallback
        self._timeout = timeout_s if timeout_s is not None else settings.http_timeout_s
        self._transport = transport

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            with httpx.Client(
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._transport,
                headers={"Accept": "application/json"},
            ) as client:
                resp = client.get(url, params=params)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPError as exc:
            raise TaxonomyError(self.name, str(exc)) from exc
        except ValueError as exc:
            raise TaxonomyError(self.name, f"invalid JSON body: {exc}") from exc

    @abstractmethod
    def _fetch(self, query: str, limit: int) -> List[TaxonomyCandidate]:
        raise NotImplementedError

    def _recover(self, exc: TaxonomyError, query: str, limit: int) -> List[TaxonomyCandidate]:
        if not self.use_fallback:
            raise exc
        logger.warning("%s; serving mock data", exc.message)
        return filter_candidates(self.fallback, query, limit)

    def search(self, query: str, limit: int = 10) -> List[TaxonomyCandidate]:
        """Search the remote taxonomy. Queries under the minimum length return []."""
        if not query or len(query.strip()) < settings.taxonomy_min_query_length:
            return []
        try:
            return self._fetch(query.strip(), limit)
        except TaxonomyError as exc:
            return self._recover(exc, query, limit)

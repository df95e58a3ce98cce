"""VSIC (Vietnam Standard Industrial Classification) industry search.

Served by a self-hosted endpoint: `/search?q=&version=&limit=` and
`/children?code=&version=`, both answering `{"results": [...], "total": n}`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..exceptions import TaxonomyError
from .base import HttpTaxonomySource, TaxonomyCandidate

VSIC_TAXONOMY = "VSIC_INDUSTRY"
DEFAULT_VSIC_VERSION = "2018"
SEARCH_LIMIT = 15


def _industry(code: str, label: str, parent_code: Optional[str] = None) -> TaxonomyCandidate:
    return TaxonomyCandidate(
        code=code,
        label=label,
        taxonomy=VSIC_TAXONOMY,
        version=DEFAULT_VSIC_VERSION,
        parent_code=parent_code,
    )


MOCK_VSIC_INDUSTRIES = (
    _industry("62", "Computer programming, consultancy and related activities"),
    _industry("62.01", "Computer programming activities", parent_code="62"),
    _industry("62.02", "Computer consultancy activities", parent_code="62"),
    _industry("63", "Information service activities"),
    _industry("64", "Financial service activities"),
    _industry("72", "Scientific research and development"),
)


class VsicIndustrySource(HttpTaxonomySource):
    """Search VSIC industries and walk their hierarchy."""

    name = "vsic"
    fallback = MOCK_VSIC_INDUSTRIES

    def __init__(
        self,
        base_url: Optional[str] = None,
        version: str = DEFAULT_VSIC_VERSION,
        timeout_s: Optional[float] = None,
        use_fallback: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__(base_url or settings.vsic_api_base, timeout_s, use_fallback, transport)
        self.version = version

    def _to_candidate(self, item: Dict[str, Any]) -> Optional[TaxonomyCandidate]:
        code = str(item.get("code") or "").strip()
        label = (item.get("label") or "").strip()
        if not (code and label):
            return None
        return TaxonomyCandidate(
            code=code,
            label=label,
            taxonomy=VSIC_TAXONOMY,
            version=str(item.get("version") or self.version),
            parent_code=item.get("parentCode"),
        )

    def _results(self, path: str, params: Dict[str, Any]) -> List[TaxonomyCandidate]:
        payload = self._get_json(f"{self.base_url}/{path}", params=params)
        if not isinstance(payload, dict):
            raise TaxonomyError(self.name, "unexpected response shape")
        out: List[TaxonomyCandidate] = []
        for item in payload.get("results") or []:
            if not isinstance(item, dict):
                continue
            candidate = self._to_candidate(item)
            if candidate is not None:
                out.append(candidate)
        return out

    def _fetch(self, query: str, limit: int) -> List[TaxonomyCandidate]:
        return self._results("search", {"q": query, "version": self.version, "limit": limit})[: max(limit, 0)]

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> List[TaxonomyCandidate]:
        return super().search(query, limit)

    def children(self, code: str) -> List[TaxonomyCandidate]:
        """Direct children of an industry code (mock children when the endpoint fails)."""
        try:
            return self._results("children", {"code": code, "version": self.version})
        except TaxonomyError as exc:
            return [c for c in self._recover(exc, "", len(self.fallback)) if c.parent_code == code]

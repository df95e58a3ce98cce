"""ESCO occupation search.

The European Skills/Competences/Occupations API exposes a public search
endpoint; hits arrive under `_embedded.results` with an English
`preferredLabel`.

Docs: https://ec.europa.eu/esco/api/doc/esco_api_doc.html
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..exceptions import TaxonomyError
from .base import HttpTaxonomySource, TaxonomyCandidate

ESCO_TAXONOMY = "ESCO_OCCUPATION"


def _occupation(code: str, label: str) -> TaxonomyCandidate:
    return TaxonomyCandidate(code=code, label=label, taxonomy=ESCO_TAXONOMY)


MOCK_ESCO_OCCUPATIONS = (
    _occupation("2512.1", "Software Developer"),
    _occupation("2513.1", "Web Developer"),
    _occupation("2514.1", "Mobile Application Developer"),
    _occupation("2511.1", "Data Engineer"),
    _occupation("2512.2", "Backend Developer"),
)


class EscoOccupationSource(HttpTaxonomySource):
    """Search ESCO occupations."""

    name = "esco"
    fallback = MOCK_ESCO_OCCUPATIONS

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        use_fallback: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__(base_url or settings.esco_api_base, timeout_s, use_fallback, transport)

    @staticmethod
    def _to_candidate(item: Dict[str, Any]) -> Optional[TaxonomyCandidate]:
        label = ((item.get("preferredLabel") or {}).get("en") or "").strip()
        code = str(item.get("code") or "").strip()
        if not (code and label):
            return None
        return _occupation(code, label)

    def _fetch(self, query: str, limit: int) -> List[TaxonomyCandidate]:
        payload = self._get_json(
            f"{self.base_url}/search",
            params={"text": query, "language": "en", "type": "occupation", "limit": limit},
        )
        if not isinstance(payload, dict):
            raise TaxonomyError(self.name, "unexpected response shape")

        results = (payload.get("_embedded") or {}).get("results") or []
        out: List[TaxonomyCandidate] = []
        for item in results:
            if not isinstance(item, dict):
                continue
            candidate = self._to_candidate(item)
            if candidate is not None:
                out.append(candidate)
        return out[: max(limit, 0)]

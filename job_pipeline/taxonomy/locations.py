"""Location search backed by the Vietnamese provinces open API.

The endpoint returns the whole province list at once, so matching is done
locally. When it is unreachable a small catalog of regional hubs is used.

Docs: https://provinces.open-api.vn/
"""

from __future__ import annotations

from typing import List, Optional

import httpx

from ..config import settings
from ..exceptions import TaxonomyError
from .base import HttpTaxonomySource, TaxonomyCandidate, filter_candidates

LOCATION_TAXONOMY = "LOCATION"


def _location(city: str, country: str, code: str) -> TaxonomyCandidate:
    return TaxonomyCandidate(code=code, label=city, taxonomy=LOCATION_TAXONOMY, country=country)


MOCK_LOCATIONS = (
    _location("Ho Chi Minh City", "Vietnam", "VN-SG"),
    _location("Hanoi", "Vietnam", "VN-HN"),
    _location("Da Nang", "Vietnam", "VN-DN"),
    _location("Singapore", "Singapore", "SG"),
    _location("Bangkok", "Thailand", "TH-BKK"),
    _location("Kuala Lumpur", "Malaysia", "MY-KL"),
    _location("Jakarta", "Indonesia", "ID-JK"),
    _location("Manila", "Philippines", "PH-MNL"),
    _location("Remote", "Global", "REMOTE"),
)


class LocationSource(HttpTaxonomySource):
    """Search provinces by name (or "Vietnam")."""

    name = "provinces"
    fallback = MOCK_LOCATIONS
    country = "Vietnam"

    def __init__(
        self,
        url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        use_fallback: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__(url or settings.provinces_api_url, timeout_s, use_fallback, transport)

    def provinces(self) -> List[TaxonomyCandidate]:
        payload = self._get_json(f"{self.base_url}/")
        if not isinstance(payload, list):
            raise TaxonomyError(self.name, "unexpected response shape")
        out: List[TaxonomyCandidate] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            name = (item.get("name") or "").strip()
            code = item.get("code")
            if not name or code is None:
                continue
            out.append(_location(name, self.country, str(code)))
        return out

    def _fetch(self, query: str, limit: int) -> List[TaxonomyCandidate]:
        return filter_candidates(self.provinces(), query, limit)

"""
Test cases for the taxonomy lookups
"""
import httpx
import pytest

from job_pipeline.exceptions import TaxonomyError
from job_pipeline.taxonomy import EscoOccupationSource, LocationSource, TaxonomyCandidate, VsicIndustrySource
from job_pipeline.taxonomy.base import filter_candidates
from job_pipeline.taxonomy.esco import ESCO_TAXONOMY
from job_pipeline.taxonomy.vsic import MOCK_VSIC_INDUSTRIES, VSIC_TAXONOMY


def failing(request):
    return httpx.Response(500, json={"error": "down"})


class TestEsco:
    """Test cases for the ESCO occupation source"""

    def test_parses_results(self):
        """Test that ESCO hits become candidates"""

        def handler(request):
            assert request.url.path == "/esco/api/search"
            assert request.url.params["text"] == "backend"
            assert request.url.params["type"] == "occupation"
            return httpx.Response(
                200,
                json={
                    "_embedded": {
                        "results": [
                            {"code": "2512.2", "preferredLabel": {"en": "Backend Developer"}},
                            {"code": "", "preferredLabel": {"en": "No code"}},
                            {"code": "2512.9"},
                        ]
                    }
                },
            )

        source = EscoOccupationSource(base_url="https://esco.test/esco/api", transport=httpx.MockTransport(handler))
        assert source.search("backend") == [
            TaxonomyCandidate(code="2512.2", label="Backend Developer", taxonomy=ESCO_TAXONOMY)
        ]

    def test_short_query(self):
        """Test that queries below the minimum length do not hit the network"""

        def handler(request):
            raise AssertionError("no request expected")

        source = EscoOccupationSource(transport=httpx.MockTransport(handler))
        assert source.search("a") == []
        assert source.search("  ") == []

    def test_falls_back_to_mock_data(self, caplog):
        """Test that a failing endpoint serves filtered mock occupations"""
        source = EscoOccupationSource(transport=httpx.MockTransport(failing))
        hits = source.search("developer")
        assert len(hits) == 4
        assert all("Developer" in h.label for h in hits)
        assert "serving mock data" in caplog.text

    def test_fallback_respects_limit(self):
        """Test that the limit also applies to mock data"""
        source = EscoOccupationSource(transport=httpx.MockTransport(failing))
        assert len(source.search("developer", limit=2)) == 2

    def test_fallback_disabled(self):
        """Test that failures surface when the fallback is off"""
        source = EscoOccupationSource(transport=httpx.MockTransport(failing), use_fallback=False)
        with pytest.raises(TaxonomyError) as exc_info:
            source.search("developer")
        assert exc_info.value.source == "esco"
        assert exc_info.value.error_code == "TAXONOMY_UNAVAILABLE"

    def test_invalid_json(self):
        """Test that a non-JSON body counts as a failure"""
        source = EscoOccupationSource(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="not json")),
            use_fallback=False,
        )
        with pytest.raises(TaxonomyError, match="invalid JSON"):
            source.search("developer")


class TestVsic:
    """Test cases for the VSIC industry source"""

    def test_search(self):
        """Test that search passes the version and parses results"""

        def handler(request):
            assert request.url.path == "/api/industries/search"
            assert request.url.params["version"] == "2018"
            return httpx.Response(
                200,
                json={
                    "results": [{"code": "62.01", "label": "Computer programming activities", "parentCode": "62"}],
                    "total": 1,
                },
            )

        source = VsicIndustrySource(base_url="http://vsic.test/api/industries", transport=httpx.MockTransport(handler))
        [hit] = source.search("programming")
        assert (hit.code, hit.taxonomy, hit.version, hit.parent_code) == ("62.01", VSIC_TAXONOMY, "2018", "62")

    def test_children(self):
        """Test fetching the children of a code"""

        def handler(request):
            assert request.url.path.endswith("/children")
            assert request.url.params["code"] == "62"
            return httpx.Response(200, json={"results": [{"code": "62.01", "label": "Programming"}]})

        source = VsicIndustrySource(transport=httpx.MockTransport(handler))
        assert [c.code for c in source.children("62")] == ["62.01"]

    def test_children_fallback(self):
        """Test that mock children are served when the endpoint fails"""
        source = VsicIndustrySource(transport=httpx.MockTransport(failing))
        assert [c.code for c in source.children("62")] == ["62.01", "62.02"]

    def test_search_fallback(self):
        """Test that search falls back to the mock catalog"""
        source = VsicIndustrySource(transport=httpx.MockTransport(failing))
        assert [c.code for c in source.search("computer")] == ["62", "62.01", "62.02"]


class TestLocations:
    """Test cases for the location source"""

    def test_filters_provinces_locally(self):
        """Test that the province list is filtered by name"""

        def handler(request):
            return httpx.Response(
                200,
                json=[
                    {"name": "Thành phố Hà Nội", "code": 1},
                    {"name": "Thành phố Hồ Chí Minh", "code": 79},
                    {"name": "Tỉnh Lào Cai", "code": 10},
                ],
            )

        source = LocationSource(transport=httpx.MockTransport(handler))
        hits = source.search("thành phố")
        assert [(h.label, h.code, h.country) for h in hits] == [
            ("Thành phố Hà Nội", "1", "Vietnam"),
            ("Thành phố Hồ Chí Minh", "79", "Vietnam"),
        ]

    def test_country_match(self):
        """Test that a country query returns every province"""
        payload = [{"name": "Tỉnh Lào Cai", "code": 10}, {"name": "Thành phố Hà Nội", "code": 1}]
        source = LocationSource(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)))
        assert len(source.search("vietnam")) == 2

    def test_fallback(self):
        """Test that the mock hubs are used when the endpoint fails"""
        source = LocationSource(transport=httpx.MockTransport(failing))
        assert [h.label for h in source.search("Vietnam")] == ["Ho Chi Minh City", "Hanoi", "Da Nang"]


class TestFilterCandidates:
    """Test cases for filter_candidates"""

    def test_case_insensitive(self):
        """Test substring matching on labels"""
        hits = filter_candidates(MOCK_VSIC_INDUSTRIES, "  FINANCIAL ", 10)
        assert [h.code for h in hits] == ["64"]

    def test_limit(self):
        """Test that the limit caps the result"""
        assert filter_candidates(MOCK_VSIC_INDUSTRIES, "activities", 2) == list(MOCK_VSIC_INDUSTRIES[:2])

    def test_zero_limit(self):
        """Test that a non-positive limit returns nothing"""
        assert filter_candidates(MOCK_VSIC_INDUSTRIES, "activities", 0) == []

"""Tests for the citation checker and its summary math."""

import pytest

from localseo.integrations.directories import (
    BusinessQuery,
    FallbackChain,
    LookupResult,
    LookupStatus,
)
from localseo.modules.local_seo.citation_checker import CitationChecker

QUERY = BusinessQuery(
    "The Gents Place", "10225 Research Blvd #310, Austin, TX 78759", "(512) 555-1234",
)


class CannedChain(FallbackChain):
    """Chain that returns a fixed result without any strategies."""

    def __init__(self, name, result):
        super().__init__(name, [])
        self._result = result

    async def lookup(self, query):
        return self._result


class BrokenChain(FallbackChain):

    def __init__(self, name):
        super().__init__(name, [])

    async def lookup(self, query):
        raise RuntimeError("chain exploded")


def _found(source, **kwargs):
    return LookupResult(status=LookupStatus.FOUND, source=source, **kwargs)


# ===========================================================================
# check_all_citations / analyze_citations
# ===========================================================================
class TestCheckAllCitations:

    @pytest.mark.asyncio
    async def test_grades_found_listing(self):
        chain = CannedChain("yelp", _found(
            "yelp",
            name="Gents Place Barbershop",
            full_address="10225 Research Boulevard Suite 310, Austin, TX 78759",
            phone="512-555-1234",
            url="https://www.yelp.com/biz/gents",
        ))
        [entry] = await CitationChecker(chains=[chain]).check_all_citations(QUERY)

        assert entry["directory"] == "yelp"
        assert entry["label"] == "Yelp"
        assert entry["authority_score"] == 92
        assert entry["found"] is True
        assert entry["nap_match"] is True
        assert entry["nap_confidence"] == 100
        assert entry["debug"]["found_phone"] == "512-555-1234"

    @pytest.mark.asyncio
    async def test_missing_listing_fields_fall_back_to_query(self):
        chain = CannedChain("whitepages", _found("whitepages", url="https://www.whitepages.com/x"))
        [entry] = await CitationChecker(chains=[chain]).check_all_citations(QUERY)
        assert entry["nap_match"] is True
        # No phone on the listing, so phone adds nothing.
        assert entry["nap_confidence"] == 90

    @pytest.mark.asyncio
    async def test_mismatched_listing(self):
        chain = CannedChain("mapquest", _found(
            "mapquest", name="Michaels", full_address="10225 Research Blvd, Austin, TX 78759",
            phone="512-555-9999",
        ))
        [entry] = await CitationChecker(chains=[chain]).check_all_citations(QUERY)
        assert entry["nap_match"] is False
        assert entry["nap_confidence"] == 50

    @pytest.mark.asyncio
    async def test_failures_isolated(self):
        chains = [
            BrokenChain("yelp"),
            CannedChain("foursquare", LookupResult.not_found("foursquare", "No results")),
            CannedChain("bing_places", _found("bing_places")),
        ]
        results = await CitationChecker(chains=chains).check_all_citations(QUERY)

        assert [r["directory"] for r in results] == ["yelp", "foursquare", "bing_places"]
        assert results[0]["status"] == "error"
        assert "chain exploded" in results[0]["reason"]
        assert results[1]["found"] is False
        assert "nap_match" not in results[1]
        assert results[2]["found"] is True

    @pytest.mark.asyncio
    async def test_analyze_citations_keyed_by_directory(self):
        chains = [
            CannedChain("yelp", _found("yelp", phone="512-555-1234", rating=4.5)),
            CannedChain("foursquare", LookupResult.not_found("foursquare", "No results")),
        ]
        analysis = await CitationChecker(chains=chains).analyze_citations(QUERY)
        assert analysis["yelp"]["found"] is True
        assert analysis["foursquare"]["found"] is False
        assert analysis["summary"]["total_sources"] == 2
        assert analysis["summary"]["found_count"] == 1
        assert analysis["nap_consistency"] == 100

    def test_directories_property(self):
        checker = CitationChecker(chains=[CannedChain("yelp", None), CannedChain("facebook", None)])
        assert checker.directories == ["yelp", "facebook"]


# ===========================================================================
# Summary math
# ===========================================================================
class TestCitationSummary:

    def test_score_components(self):
        citations = [
            {"directory": "yelp", "found": True, "nap_match": True, "nap_confidence": 100,
             "phone": "512-555-1234", "rating": 4.5, "categories": ["Barbers"]},
            {"directory": "mapquest", "found": True, "nap_match": False, "nap_confidence": 40},
            {"directory": "foursquare", "found": False},
            {"directory": "facebook", "found": False},
        ]
        result = CitationChecker.generate_citation_summary(citations)
        # presence 25 + consistency 15 + completeness 6
        assert result["citation_score"] == 46
        assert result["nap_consistency"] == 50
        assert result["summary"] == {
            "total_sources": 4,
            "found_count": 2,
            "consistent_count": 1,
            "inconsistent_count": 1,
            "presence_percentage": 50,
            "nap_consistency_percentage": 50,
        }

    def test_nothing_found(self):
        result = CitationChecker.generate_citation_summary([{"found": False}] * 3)
        assert result["citation_score"] == 0
        assert result["nap_consistency"] == 0

    def test_empty(self):
        result = CitationChecker.generate_citation_summary([])
        assert result["citation_score"] == 0
        assert result["summary"]["presence_percentage"] == 0

    def test_high_confidence_counts_as_consistent(self):
        assert CitationChecker.is_consistent({"nap_match": False, "nap_confidence": 70})
        assert not CitationChecker.is_consistent({"nap_match": False, "nap_confidence": 69})

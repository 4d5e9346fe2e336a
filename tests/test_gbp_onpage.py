"""Tests for the Google Business Profile and on-page analyzers."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from localseo.modules.local_seo.gbp_analyzer import GBP_CHECKLIST_ITEMS, GBPAnalyzer
from localseo.modules.local_seo.onpage_analyzer import (
    OnPageAnalyzer,
    fetch_website_html,
    parse_html_for_seo,
)
from localseo.utils.http import HttpResponse

ADDRESS = "10225 Research Blvd, Austin, TX 78759"
ONPAGE_FETCH = "localseo.modules.local_seo.onpage_analyzer.fetch"

HOMEPAGE = """
<html><head>
<title>The Gents Place | Austin Barbershop</title>
<meta name="description" content="Premium grooming for men in Austin, Texas.">
<script type="application/ld+json">{"@context": "https://schema.org", "@type": "LocalBusiness"}</script>
</head><body>
<h1>Best <em>Barbershop</em> in Austin</h1>
<footer>10225 Research Blvd, Austin TX &middot; (512) 555-1234</footer>
</body></html>
"""


def _places_client(places):
    client = MagicMock()
    client.text_search = AsyncMock(return_value=places)
    return client


def _page(html, status=200):
    return AsyncMock(return_value=HttpResponse(status=status, url="https://thegentsplace.com/", text=html))


# ===========================================================================
# GBP analyzer
# ===========================================================================
class TestGBPAnalyzer:

    @pytest.mark.asyncio
    async def test_listing_scored(self):
        places = [
            {"id": "main", "displayName": {"text": "The Gents Place"}, "rating": 4.8,
             "userRatingCount": 120, "formattedAddress": "10225 Research Blvd, Austin, TX 78759",
             "nationalPhoneNumber": "(512) 555-1234", "websiteUri": "https://www.thegentsplace.com/"},
            {"displayName": {"text": "Rival Cuts"}, "rating": 4.5, "userRatingCount": 80},
            {"displayName": {"text": "Shave Co"}, "rating": 4.1},
            {"displayName": {"text": "Fade Lab"}, "rating": 4.9, "userRatingCount": 300},
            {"displayName": {"text": "Ignored"}},
        ]
        client = _places_client(places)
        gbp = await GBPAnalyzer(client).analyze(
            "The Gents Place", ADDRESS, phone="512-555-1234", website_url="https://thegentsplace.com",
        )

        client.text_search.assert_awaited_once_with(f"The Gents Place {ADDRESS}")
        assert gbp["place_id"] == "main"
        assert gbp["review_count"] == 120
        assert [c["name"] for c in gbp["competitors"]] == ["Rival Cuts", "Shave Co", "Fade Lab"]
        assert gbp["competitors"][1]["review_count"] == 0
        assert set(gbp["checks"]) == {item["id"] for item in GBP_CHECKLIST_ITEMS}
        assert all(c["passed"] for c in gbp["checks"].values())
        assert gbp["optimization_score"] == 100.0

    @pytest.mark.asyncio
    async def test_weak_listing(self):
        places = [{"displayName": {"text": "Gents Place"}, "rating": 3.9, "userRatingCount": 4,
                   "formattedAddress": ADDRESS, "websiteUri": "https://other.com"}]
        gbp = await GBPAnalyzer(_places_client(places)).analyze(
            "The Gents Place", ADDRESS, website_url="https://thegentsplace.com",
        )
        checks = gbp["checks"]
        assert checks["name_match"]["passed"] is True
        assert checks["phone_number"]["passed"] is False
        assert checks["website_link"]["passed"] is False
        assert checks["review_count"]["passed"] is False
        assert checks["review_rating"]["passed"] is False
        # listing 10 + name 8 + address 8 out of 58
        assert gbp["optimization_score"] == pytest.approx(44.8)

    @pytest.mark.asyncio
    async def test_not_found(self):
        gbp = await GBPAnalyzer(_places_client([])).analyze("Nowhere LLC", ADDRESS)
        assert gbp["error"] == "Not found on Google"
        assert gbp["competitors"] == []


# ===========================================================================
# On-page
# ===========================================================================
class TestParseHtmlForSeo:

    def test_all_signals(self):
        result = parse_html_for_seo(HOMEPAGE, "The Gents Place", ADDRESS)
        assert result["title_tag"] == "The Gents Place | Austin Barbershop"
        assert result["meta_description"].startswith("Premium grooming")
        assert result["h1_tag"] == "Best Barbershop in Austin"
        assert result["has_local_business_schema"] is True
        assert result["local_keywords_in_title"] is True
        assert result["location_in_h1"] is True
        assert result["location_in_meta_description"] is True
        assert result["address_present"] is True
        assert result["phone_number_present"] is True

    def test_bare_page(self):
        result = parse_html_for_seo("<html><body>Hello</body></html>", "Acme", ADDRESS)
        assert result["title_tag"] is None
        assert result["meta_description"] is None
        assert result["h1_tag"] is None
        assert not any(result[k] for k in (
            "has_local_business_schema", "local_keywords_in_title", "location_in_h1",
            "address_present", "phone_number_present",
        ))

    def test_address_without_city(self):
        result = parse_html_for_seo(HOMEPAGE, "The Gents Place", "10225 Research Blvd")
        assert result["local_keywords_in_title"] is False
        assert result["address_present"] is True


class TestOnPageAnalyzer:

    @pytest.mark.asyncio
    async def test_analyze(self):
        with patch(ONPAGE_FETCH, _page(HOMEPAGE)):
            result = await OnPageAnalyzer().analyze(
                "https://thegentsplace.com", "The Gents Place", ADDRESS,
            )
        assert result["has_local_business_schema"] is True

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self):
        with patch(ONPAGE_FETCH, _page("missing", status=404)):
            with pytest.raises(RuntimeError, match="Website 404"):
                await fetch_website_html("https://thegentsplace.com")

    @pytest.mark.asyncio
    async def test_sends_browser_user_agent(self):
        with patch(ONPAGE_FETCH, _page("ok")) as fetch:
            await fetch_website_html("https://example.com", timeout=3.0)
        assert fetch.call_args.kwargs["headers"]["User-Agent"].startswith("Mozilla/5.0")
        assert fetch.call_args.kwargs["timeout"] == 3.0

"""Google Business Profile analysis from Places search results."""

import logging
from typing import Any, Optional

from localseo.integrations.google_places import GooglePlacesClient
from localseo.modules.local_seo.nap_matcher import NAPRecord, compare_nap
from localseo.utils.helpers import extract_domain

logger = logging.getLogger(__name__)

GBP_CHECKLIST_ITEMS = [
    {"id": "listing_exists", "label": "GBP Listing Exists", "weight": 10},
    {"id": "name_match", "label": "Business Name Matches", "weight": 8},
    {"id": "address_match", "label": "Address Matches", "weight": 8},
    {"id": "phone_number", "label": "Phone Number Listed", "weight": 7},
    {"id": "website_link", "label": "Website Link Correct", "weight": 8},
    {"id": "review_count", "label": "Has 10+ Reviews", "weight": 9},
    {"id": "review_rating", "label": "Average Rating >= 4.0", "weight": 8},
]


def _place_name(place: dict[str, Any], default: str = "Unknown") -> str:
    return (place.get("displayName") or {}).get("text") or default


class GBPAnalyzer:
    """Find the business on Google and compare it with the top local results.

    The first Places hit is treated as the business itself; the next three
    are reported as competitors.

    Usage::

        analyzer = GBPAnalyzer()
        gbp = await analyzer.analyze("The Gents Place", "10225 Research Blvd, Austin, TX 78759")
    """

    def __init__(self, places: Optional[GooglePlacesClient] = None):
        self._places = places or GooglePlacesClient()

    async def analyze(
        self,
        business_name: str,
        full_address: str,
        phone: str = "",
        website_url: str = "",
    ) -> dict[str, Any]:
        places = await self._places.text_search(f"{business_name} {full_address}")
        if not places:
            logger.info("No Google listing found for '%s'", business_name)
            return {
                "error": "Not found on Google",
                "name": business_name,
                "rating": None,
                "review_count": None,
                "competitors": [],
            }

        main = places[0]
        competitors = [
            {
                "name": _place_name(p),
                "rating": p.get("rating") or 0,
                "review_count": p.get("userRatingCount") or 0,
            }
            for p in places[1:4]
        ]
        listing = {
            "name": _place_name(main, business_name),
            "rating": main.get("rating") or 0,
            "review_count": main.get("userRatingCount") or 0,
            "address": main.get("formattedAddress") or full_address,
            "phone": main.get("nationalPhoneNumber"),
            "website": main.get("websiteUri"),
            "place_id": main.get("id"),
            "competitors": competitors,
        }

        checks = self._evaluate_listing(
            listing, NAPRecord(business_name, full_address, phone or None), website_url,
        )
        listing["checks"] = checks
        listing["optimization_score"] = self._calculate_gbp_score(checks)
        return listing

    @staticmethod
    def _evaluate_listing(
        listing: dict[str, Any],
        claimed: NAPRecord,
        known_website: str = "",
    ) -> dict[str, dict[str, Any]]:
        """Grade the listing against the GBP checklist."""
        match = compare_nap(
            claimed,
            NAPRecord(listing.get("name") or "", listing.get("address") or "", listing.get("phone")),
        )
        website = listing.get("website") or ""
        website_ok = bool(website)
        if website and known_website:
            website_ok = extract_domain(website).removeprefix("www.") == (
                extract_domain(known_website).removeprefix("www.")
            )

        outcomes = {
            "listing_exists": (bool(listing.get("name")), f"Listed as: {listing.get('name')}"),
            "name_match": (match.name_match, f"Name score {match.details.name_score:.0f}"),
            "address_match": (match.address_match, listing.get("address") or "No address found"),
            "phone_number": (bool(listing.get("phone")), listing.get("phone") or "No phone found"),
            "website_link": (website_ok, website or "No website link found"),
            "review_count": (
                (listing.get("review_count") or 0) >= 10,
                f"{listing.get('review_count') or 0} reviews",
            ),
            "review_rating": (
                (listing.get("rating") or 0) >= 4.0,
                f"Rating {listing.get('rating') or 0}",
            ),
        }

        checks: dict[str, dict[str, Any]] = {}
        for item in GBP_CHECKLIST_ITEMS:
            passed, details = outcomes[item["id"]]
            checks[item["id"]] = {
                "label": item["label"],
                "passed": bool(passed),
                "weight": item["weight"],
                "details": details,
            }
        return checks

    @staticmethod
    def _calculate_gbp_score(checks: dict[str, dict[str, Any]]) -> float:
        total_weight = sum(c["weight"] for c in checks.values())
        earned = sum(c["weight"] for c in checks.values() if c["passed"])
        return round((earned / max(total_weight, 1)) * 100, 1)

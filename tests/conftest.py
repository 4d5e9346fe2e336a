"""Shared pytest fixtures for the Local SEO Analyzer tests."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Ensure project root is on sys.path so 'localseo' is importable.
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)


@pytest.fixture(autouse=True)
def _reset_db_engine():
    """Autouse fixture: reset the global DB engine before and after every test.

    This prevents cross-test pollution when tests create their own in-memory
    databases.
    """
    from localseo.database import reset_engine
    reset_engine()
    yield
    reset_engine()


@pytest.fixture(autouse=True)
def _fresh_nominatim_limiter(monkeypatch):
    """Give each test its own Nominatim limiter so the 1 s spacing never carries over."""
    from localseo.integrations.directories import OpenStreetMapLookup
    from localseo.utils.rate_limiter import RateLimiter
    monkeypatch.setattr(
        OpenStreetMapLookup, "_limiter",
        RateLimiter(requests_per_minute=60, min_interval=1.0, name="nominatim"),
    )


@pytest.fixture()
def test_db():
    """Provide an in-memory SQLite database with all tables created.

    Yields a database URL string. The engine is automatically torn down
    after the test by the autouse ``_reset_db_engine`` fixture.
    """
    from localseo.database import reset_engine, init_db
    reset_engine()
    db_url = "sqlite:///:memory:"
    init_db(database_url=db_url, echo=False)
    yield db_url


@pytest.fixture()
def mock_llm_client():
    """Return a mock LLMClient that returns canned responses."""
    client = MagicMock()
    client.configured = True
    client.generate_text = AsyncMock(return_value="Mock LLM summary text.")
    client.close = AsyncMock()
    return client


@pytest.fixture()
def gents_place():
    """Trusted NAP of the business used across the matching scenarios."""
    from localseo.modules.local_seo.nap_matcher import NAPRecord
    return NAPRecord(
        name="The Gents Place",
        address="10225 Research Blvd #310, Austin, TX 78759",
        phone="(512) 555-1234",
    )


@pytest.fixture()
def sample_report():
    """A finished report with every section populated."""
    return {
        "business_name": "The Gents Place",
        "full_address": "10225 Research Blvd, Austin, TX 78759",
        "website_url": "https://thegentsplace.com",
        "phone": "(512) 555-1234",
        "gbp_analysis": {
            "name": "The Gents Place",
            "rating": 4.8,
            "review_count": 120,
            "optimization_score": 100.0,
            "checks": {},
            "competitors": [{"name": "Rival Cuts", "rating": 4.5, "review_count": 80}],
        },
        "citation_analysis": {
            "yelp": {"directory": "yelp", "label": "Yelp", "status": "found", "found": True,
                     "url": "https://www.yelp.com/biz/gents", "nap_match": True, "nap_confidence": 100},
            "foursquare": {"directory": "foursquare", "label": "Foursquare", "status": "not_found",
                           "found": False, "reason": "No matching venue"},
            "yellow_pages": {"directory": "yellow_pages", "label": "Yellow Pages", "status": "found",
                             "found": True, "nap_match": False, "nap_confidence": 40},
            "citation_score": 55,
            "nap_consistency": 50,
            "summary": {"total_sources": 3, "found_count": 2, "consistent_count": 1,
                        "inconsistent_count": 1, "presence_percentage": 67,
                        "nap_consistency_percentage": 50},
        },
        "onpage_analysis": {
            "title_tag": "The Gents Place | Austin Barbershop",
            "meta_description": "Premium grooming in Austin.",
            "h1_tag": "Austin's Gentlemen's Club",
            "has_local_business_schema": True,
            "local_keywords_in_title": True,
            "location_in_h1": True,
            "location_in_meta_description": True,
            "address_present": True,
            "phone_number_present": True,
        },
        "speed_insights": {
            "performance": 85,
            "accessibility": 92,
            "best_practices": 90,
            "seo": 95,
            "load_time": "2.1 s",
            "first_contentful_paint": "1.2 s",
        },
    }

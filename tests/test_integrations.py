"""Tests for the Google Places, PageSpeed and LLM clients."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from localseo.integrations.google_pagespeed import PAGESPEED_API_URL, PageSpeedInsights
from localseo.integrations.google_places import DEFAULT_FIELD_MASK, GooglePlacesClient
from localseo.integrations.llm_client import LLMClient, UsageStats
from localseo.utils.http import HttpResponse

PLACES_FETCH = "localseo.integrations.google_places.fetch"
PSI_FETCH = "localseo.integrations.google_pagespeed.fetch"

PSI_PAYLOAD = {
    "lighthouseResult": {
        "categories": {
            "performance": {"score": 0.42},
            "accessibility": {"score": 0.9},
            "best-practices": {"score": 0.83},
            "seo": {"score": 1.0},
        },
        "audits": {
            "speed-index": {"numericValue": 4210.456},
            "first-contentful-paint": {"numericValue": 1800.0},
        },
    },
}


def _response(payload=None, status=200, text=None):
    body = text if text is not None else json.dumps(payload)
    return AsyncMock(return_value=HttpResponse(status=status, url="https://api.test/", text=body))


# ===========================================================================
# Google Places
# ===========================================================================
class TestGooglePlacesClient:

    @pytest.mark.asyncio
    async def test_text_search(self):
        with patch(PLACES_FETCH, _response({"places": [{"id": "p1"}, {"id": "p2"}]})) as fetch:
            client = GooglePlacesClient(api_key="gkey", max_results=3)
            places = await client.text_search("The Gents Place Austin")

        assert [p["id"] for p in places] == ["p1", "p2"]
        kwargs = fetch.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["headers"]["X-Goog-Api-Key"] == "gkey"
        assert kwargs["headers"]["X-Goog-FieldMask"] == DEFAULT_FIELD_MASK
        assert kwargs["json_body"] == {"textQuery": "The Gents Place Austin", "maxResultCount": 3}

    @pytest.mark.asyncio
    async def test_no_places(self):
        with patch(PLACES_FETCH, _response({})):
            assert await GooglePlacesClient(api_key="k").text_search("x") == []

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        with patch(PLACES_FETCH, _response({}, status=403)):
            with pytest.raises(RuntimeError, match="Places 403"):
                await GooglePlacesClient(api_key="k").text_search("x")

    @pytest.mark.asyncio
    async def test_missing_key_raises(self):
        client = GooglePlacesClient(api_key="")
        assert client.configured is False
        with pytest.raises(RuntimeError, match="not configured"):
            await client.text_search("x")


# ===========================================================================
# PageSpeed Insights
# ===========================================================================
class TestPageSpeedInsights:

    @pytest.mark.asyncio
    async def test_speed_insights(self):
        with patch(PSI_FETCH, _response(PSI_PAYLOAD)) as fetch:
            psi = PageSpeedInsights(api_key="psi")
            speed = await psi.get_speed_insights("https://example.com")

        assert speed == {
            "performance": 42,
            "accessibility": 90,
            "best_practices": 83,
            "seo": 100,
            "load_time": 4210.46,
            "first_contentful_paint": 1800.0,
        }
        params = fetch.call_args.kwargs["params"]
        assert [v for k, v in params if k == "category"] == [
            "performance", "accessibility", "best-practices", "seo",
        ]
        assert ("strategy", "mobile") in params
        assert ("key", "psi") in params

    @pytest.mark.asyncio
    async def test_retries_on_429(self):
        fetch = AsyncMock(side_effect=[
            HttpResponse(status=429, url=PAGESPEED_API_URL),
            HttpResponse(status=200, url=PAGESPEED_API_URL, text=json.dumps(PSI_PAYLOAD)),
        ])
        with patch(PSI_FETCH, fetch):
            psi = PageSpeedInsights(api_key="k", backoff_seconds=0)
            analysis = await psi.analyze_url("https://example.com")
        assert analysis["scores"]["performance"] == 42
        assert fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_error_dict_on_failure(self):
        with patch(PSI_FETCH, _response(text="", status=500)):
            psi = PageSpeedInsights(api_key="k", backoff_seconds=0)
            speed = await psi.get_speed_insights("https://example.com")
        assert set(speed) == {"error"}
        assert "500" in speed["error"]

    @pytest.mark.asyncio
    async def test_timeout_exhausts_retries(self):
        fetch = AsyncMock(side_effect=asyncio.TimeoutError())
        with patch(PSI_FETCH, fetch):
            psi = PageSpeedInsights(api_key="k", max_retries=2, backoff_seconds=0)
            speed = await psi.get_speed_insights("https://example.com")
        assert speed == {"error": "TimeoutError"}
        assert fetch.await_count == 3

    def test_extract_metrics_missing(self):
        metrics = PageSpeedInsights._extract_metrics({})
        assert metrics["speed-index"] is None


# ===========================================================================
# LLM client
# ===========================================================================
class TestLLMClient:

    @pytest.fixture(autouse=True)
    def _no_env_keys(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    @pytest.mark.asyncio
    async def test_no_provider(self):
        client = LLMClient()
        assert client.configured is False
        with pytest.raises(RuntimeError, match="No LLM provider configured"):
            await client.generate_text("hi")

    @pytest.mark.asyncio
    async def test_openai_first(self):
        client = LLMClient(openai_api_key="sk-test", gemini_api_key="g-test")
        client._call_openai = AsyncMock(return_value="from openai")
        client._call_gemini = AsyncMock(return_value="from gemini")
        assert await client.generate_text("hi") == "from openai"
        client._call_gemini.assert_not_called()

    @pytest.mark.asyncio
    async def test_gemini_fallback(self):
        client = LLMClient(openai_api_key="sk-test", gemini_api_key="g-test")
        client._call_openai = AsyncMock(side_effect=RuntimeError("rate limited"))
        client._call_gemini = AsyncMock(return_value="from gemini")
        assert await client.generate_text("hi") == "from gemini"

    @pytest.mark.asyncio
    async def test_openai_error_without_gemini(self):
        client = LLMClient(openai_api_key="sk-test")
        client._call_openai = AsyncMock(side_effect=RuntimeError("rate limited"))
        with pytest.raises(RuntimeError, match="rate limited"):
            await client.generate_text("hi")

    @pytest.mark.asyncio
    async def test_openai_client_rebuilt_after_close(self):
        completion = MagicMock()
        completion.choices = [MagicMock(message=MagicMock(content=" summary "))]
        completion.usage = None
        with patch("localseo.integrations.llm_client.openai.AsyncOpenAI") as factory:
            sdk = factory.return_value
            sdk.chat.completions.create = AsyncMock(return_value=completion)
            sdk.close = AsyncMock()
            client = LLMClient(openai_api_key="sk-test")
            assert client.configured is True
            factory.assert_not_called()

            assert await client.generate_text("hi") == "summary"
            await client.close()
            sdk.close.assert_awaited_once()
            assert await client.generate_text("hi") == "summary"
        assert factory.call_count == 2

    @pytest.mark.asyncio
    async def test_close_without_client(self):
        await LLMClient().close()

    def test_budget_guard(self):
        client = LLMClient(openai_api_key="sk-test", max_monthly_budget=1.0)
        client.usage.monthly_cost_usd = 1.5
        with pytest.raises(RuntimeError, match="budget exceeded"):
            client._check_budget()

    def test_from_config(self):
        client = LLMClient.from_config({"openai_model": "gpt-4o", "max_tokens": 300})
        assert client._openai_model == "gpt-4o"
        assert client._max_tokens == 300
        assert client._temperature == 0.4

    def test_usage_stats(self):
        stats = UsageStats()
        cost = stats.add_usage(1000, 1000)
        assert cost == pytest.approx(0.00075)
        assert stats.total_requests == 1

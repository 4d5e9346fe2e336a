"""Google PageSpeed Insights client for the mobile speed section of a report."""

import asyncio
import logging
import os
from typing import Any, Optional

import aiohttp

from localseo.utils.http import fetch
from localseo.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

PAGESPEED_API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
DEFAULT_CATEGORIES = ["performance", "accessibility", "best-practices", "seo"]


class PageSpeedInsights:
    """Client for the PageSpeed Insights v5 API.

    Usage::

        psi = PageSpeedInsights()
        speed = await psi.get_speed_insights("https://example.com")
        speed["performance"], speed["load_time"]
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 9.0,
        max_retries: int = 3,
        backoff_seconds: float = 30.0,
    ):
        self._api_key = api_key if api_key is not None else os.getenv("PSI_API_KEY", "")
        self._timeout = timeout
        self._max_retries = max_retries
        self._backoff = backoff_seconds
        # Google is strict without a key.
        self._limiter = RateLimiter(
            requests_per_minute=10 if self._api_key else 3, name="pagespeed",
        )

    async def _request_with_retry(self, params: list[tuple[str, str]]) -> dict:
        """GET with doubling backoff on 429s and timeouts."""
        for attempt in range(self._max_retries + 1):
            try:
                await self._limiter.acquire()
                response = await fetch(PAGESPEED_API_URL, params=params, timeout=self._timeout)

                if response.status == 429 and attempt < self._max_retries:
                    wait = self._backoff * (2 ** attempt)
                    logger.warning(
                        "PageSpeed 429 Too Many Requests. Retry %d/%d in %.0fs...",
                        attempt + 1, self._max_retries, wait,
                    )
                    await asyncio.sleep(wait)
                    continue

                if not response.ok:
                    raise RuntimeError(f"PageSpeed {response.status}")
                return response.json() or {}

            except asyncio.TimeoutError:
                if attempt < self._max_retries:
                    wait = (self._backoff / 3) * (2 ** attempt)
                    logger.warning(
                        "PageSpeed timeout. Retry %d/%d in %.0fs...",
                        attempt + 1, self._max_retries, wait,
                    )
                    await asyncio.sleep(wait)
                    continue
                raise

        return {}

    async def analyze_url(
        self,
        url: str,
        strategy: str = "mobile",
        categories: Optional[list[str]] = None,
    ) -> dict[str, Any]:
        """Run a PageSpeed analysis and return raw category scores and metrics.

        Raises:
            RuntimeError: When the API keeps failing after retries.
            aiohttp.ClientError: On network failures.
        """
        params: list[tuple[str, str]] = [("url", url), ("strategy", strategy)]
        params += [("category", cat) for cat in categories or DEFAULT_CATEGORIES]
        if self._api_key:
            params.append(("key", self._api_key))

        data = await self._request_with_retry(params)

        lighthouse = data.get("lighthouseResult") or {}
        scores = {
            key: round((cat.get("score") or 0) * 100)
            for key, cat in (lighthouse.get("categories") or {}).items()
        }
        return {
            "url": url,
            "strategy": strategy,
            "scores": scores,
            "metrics": self._extract_metrics(lighthouse.get("audits") or {}),
        }

    async def get_speed_insights(self, url: str) -> dict[str, Any]:
        """Mobile scores for the report; ``{"error": ...}`` on failure."""
        try:
            analysis = await self.analyze_url(url)
        except (aiohttp.ClientError, asyncio.TimeoutError, RuntimeError, ValueError) as exc:
            logger.error("PageSpeed API error for %s: %s", url, exc)
            return {"error": str(exc) or type(exc).__name__}

        scores = analysis["scores"]
        metrics = analysis["metrics"]
        result = {
            "performance": scores.get("performance", 0),
            "accessibility": scores.get("accessibility", 0),
            "best_practices": scores.get("best-practices", 0),
            "seo": scores.get("seo", 0),
            "load_time": metrics.get("speed-index"),
            "first_contentful_paint": metrics.get("first-contentful-paint"),
        }
        logger.info("PageSpeed for %s: perf=%d", url, result["performance"])
        return result

    @staticmethod
    def _extract_metrics(audits: dict) -> dict[str, Optional[float]]:
        metric_keys = [
            "first-contentful-paint",
            "largest-contentful-paint",
            "cumulative-layout-shift",
            "speed-index",
            "total-blocking-time",
        ]
        metrics = {}
        for key in metric_keys:
            val = (audits.get(key) or {}).get("numericValue")
            metrics[key] = round(val, 2) if val is not None else None
        return metrics

"""Homepage fetch and regex-level local on-page SEO checks."""

import logging
import re
from typing import Any, Optional

from localseo.utils.helpers import clean_html
from localseo.utils.http import fetch

logger = logging.getLogger(__name__)

FETCH_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_META_DESC_RE = re.compile(
    r"""<meta\s+name=["']description["']\s+content=["']([^"']*)["']""", re.IGNORECASE
)
_H1_RE = re.compile(r"<h1[^>]*>(.*?)</h1>", re.IGNORECASE | re.DOTALL)
_LOCAL_SCHEMA_RE = re.compile(r""""@type"\s*:\s*["']LocalBusiness["']""")
_CITY_RE = re.compile(r",\s*([A-Za-z\s]+),\s*[A-Z]{2}")
_PHONE_RE = re.compile(r"(\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")


def _first(pattern: re.Pattern, html: str) -> Optional[str]:
    match = pattern.search(html)
    return match.group(1).strip() if match else None


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(needle) and bool(haystack) and needle in haystack.lower()


def parse_html_for_seo(html: str, business_name: str, full_address: str) -> dict[str, Any]:
    """Extract the local SEO signals from raw homepage HTML.

    No DOM is built; the first ``<title>``, description meta and ``<h1>``
    are matched with regular expressions.  The city is taken from the
    ``", City, ST"`` part of *full_address* and checked in title, h1 and
    meta description.

    Args:
        html: Page source.
        business_name: Business name (reported back for reference).
        full_address: ``"street, city, ST ZIP"``.

    Returns:
        Dict of extracted tags and boolean signals.
    """
    title = _first(_TITLE_RE, html)
    meta_description = _first(_META_DESC_RE, html)
    h1 = _first(_H1_RE, html)
    if h1 is not None:
        h1 = clean_html(h1) or None

    city_match = _CITY_RE.search(full_address or "")
    city = city_match.group(1).strip().lower() if city_match else ""
    street = (full_address or "").split(",")[0].strip().lower()
    lower_html = html.lower()

    return {
        "business_name": business_name,
        "title_tag": title,
        "meta_description": meta_description,
        "h1_tag": h1,
        "has_local_business_schema": _LOCAL_SCHEMA_RE.search(html) is not None,
        "local_keywords_in_title": _contains(title, city),
        "location_in_h1": _contains(h1, city),
        "location_in_meta_description": _contains(meta_description, city),
        "address_present": bool(street) and street in lower_html,
        "phone_number_present": _PHONE_RE.search(html) is not None,
    }


async def fetch_website_html(url: str, timeout: float = 7.0) -> str:
    """GET *url* with a browser User-Agent and return the body.

    Raises:
        RuntimeError: On a non-2xx response.
        aiohttp.ClientError: On network failures.
        asyncio.TimeoutError: When the site does not answer in time.
    """
    headers = {"User-Agent": FETCH_USER_AGENT, "Accept": "text/html"}
    resp = await fetch(url, headers=headers, timeout=timeout)
    if not resp.ok:
        raise RuntimeError(f"Website {resp.status}")
    return resp.text


class OnPageAnalyzer:
    """Fetch a homepage and run :func:`parse_html_for_seo` over it."""

    def __init__(self, timeout: float = 7.0):
        self._timeout = timeout

    async def analyze(self, website_url: str, business_name: str, full_address: str) -> dict[str, Any]:
        html = await fetch_website_html(website_url, timeout=self._timeout)
        logger.debug("Fetched %d bytes from %s", len(html), website_url)
        return parse_html_for_seo(html, business_name, full_address)

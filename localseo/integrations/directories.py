"""Business directory lookups used for citation checks.

Each directory integration is a :class:`DirectoryLookup` strategy that
returns a tagged :class:`LookupResult` (found / not found / error) instead of
raising.  Strategies for the same directory are tried in priority order by a
:class:`FallbackChain`, e.g. Yellow Pages direct URL first, then a Google
Custom Search ``site:`` query.
"""

import asyncio
import logging
import os
import re
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Optional
from urllib.parse import quote_plus

import aiohttp

from localseo.utils.http import BROWSER_USER_AGENT, HttpResponse, fetch
from localseo.utils.rate_limiter import RateLimiter
from localseo.utils.string_similarity import levenshtein_similarity

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"(\d{3})[.-]?\s*(\d{3})[.-]?\s*(\d{4})")


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

class LookupStatus(str, Enum):
    """Outcome tag of a single directory lookup."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class BusinessQuery:
    """The business being searched for, as entered by the user."""
    business_name: str
    full_address: str
    phone: str = ""

    @property
    def _parts(self) -> list[str]:
        return [p.strip() for p in self.full_address.split(",")]

    @property
    def street(self) -> str:
        """First address segment, lowercased."""
        return self._parts[0].lower()

    @property
    def city(self) -> str:
        parts = self._parts
        return parts[1] if len(parts) > 1 else ""

    @property
    def state(self) -> str:
        parts = self._parts
        if len(parts) > 2 and parts[2]:
            return parts[2].split()[0]
        return ""


@dataclass
class LookupResult:
    """Tagged result of a directory lookup."""
    status: LookupStatus
    source: str
    url: Optional[str] = None
    name: Optional[str] = None
    full_address: Optional[str] = None
    phone: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    hours: Any = None
    categories: list[str] = field(default_factory=list)
    photos: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)
    reason: str = ""

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @classmethod
    def not_found(cls, source: str, reason: str) -> "LookupResult":
        return cls(status=LookupStatus.NOT_FOUND, source=source, reason=reason)

    @classmethod
    def error(cls, source: str, reason: str) -> "LookupResult":
        return cls(status=LookupStatus.ERROR, source=source, reason=reason)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        data["found"] = self.found
        return data


def join_address(
    street: Optional[str],
    city: Optional[str],
    state: Optional[str],
    postcode: Optional[str],
) -> str:
    """Format listing fields as ``"street, city, ST ZIP"`` for NAP parsing."""
    state_zip = " ".join(p for p in (state, postcode) if p)
    return ", ".join(p for p in (street, city, state_zip) if p)


def _format_phone(match: re.Match) -> str:
    return f"{match.group(1)}-{match.group(2)}-{match.group(3)}"


# ---------------------------------------------------------------------------
# Strategy base
# ---------------------------------------------------------------------------

class DirectoryLookup:
    """Base class for a single way of finding a business on a directory.

    Subclasses implement :meth:`_lookup`.  :meth:`lookup` enforces the total
    timeout and converts network failures into ``ERROR`` results, so one
    directory can never break another.
    """

    name = "directory"

    def __init__(
        self,
        timeout: float = 4.0,
        user_agent: str = BROWSER_USER_AGENT,
    ):
        self._timeout = timeout
        self._user_agent = user_agent

    async def _get(self, url: str, params: Any = None, **headers: str) -> HttpResponse:
        return await fetch(
            url,
            params=params,
            headers={"User-Agent": self._user_agent, **headers},
            timeout=self._timeout,
        )

    async def lookup(self, query: BusinessQuery) -> LookupResult:
        """Run the lookup and always return a tagged result."""
        try:
            return await asyncio.wait_for(self._lookup(query), timeout=self._timeout)
        except asyncio.TimeoutError:
            return LookupResult.error(self.name, f"{self.name} timeout after {self._timeout}s")
        except aiohttp.ClientError as exc:
            return LookupResult.error(self.name, f"{type(exc).__name__}: {exc}")
        except (ValueError, KeyError, TypeError, AttributeError, IndexError) as exc:
            logger.warning("Malformed response from %s: %s", self.name, exc)
            return LookupResult.error(self.name, f"Malformed response: {exc}")

    async def _lookup(self, query: BusinessQuery) -> LookupResult:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# API-backed directories
# ---------------------------------------------------------------------------

class YelpLookup(DirectoryLookup):
    """Yelp Fusion business search."""

    name = "yelp"
    SEARCH_URL = "https://api.yelp.com/v3/businesses/search"

    def __init__(self, api_key: Optional[str] = None, **kwargs: Any):
        super().__init__(**kwargs)
        self._api_key = api_key if api_key is not None else os.getenv("YELP_API_KEY", "")

    async def _lookup(self, query: BusinessQuery) -> LookupResult:
        if not self._api_key:
            return LookupResult.not_found(self.name, "API key not configured")

        params = {
            "term": query.business_name,
            "location": f"{query.city}, {query.state}",
            "limit": 5,
        }
        resp = await self._get(self.SEARCH_URL, params, Authorization=f"Bearer {self._api_key}")
        if resp.status != 200:
            return LookupResult.error(self.name, f"Yelp {resp.status}")

        businesses = resp.json().get("businesses") or []
        if not businesses:
            return LookupResult.not_found(self.name, "No results")

        biz = businesses[0]
        loc = biz.get("location") or {}
        hours = biz.get("hours") or []
        return LookupResult(
            status=LookupStatus.FOUND,
            source=self.name,
            url=biz.get("url"),
            name=biz.get("name"),
            full_address=join_address(
                loc.get("address1"), loc.get("city"), loc.get("state"), loc.get("zip_code"),
            ),
            phone=biz.get("phone") or None,
            rating=biz.get("rating"),
            review_count=biz.get("review_count"),
            hours=hours[0].get("open") if hours else None,
            categories=[c.get("title", "") for c in biz.get("categories") or []],
            photos=list(biz.get("photos") or []),
            extra={
                "price": biz.get("price"),
                "coordinates": biz.get("coordinates"),
                "is_claimed": biz.get("is_claimed"),
            },
        )


class FoursquareLookup(DirectoryLookup):
    """Foursquare Places search."""

    name = "foursquare"
    SEARCH_URL = "https://api.foursquare.com/v3/places/search"

    def __init__(self, api_key: Optional[str] = None, **kwargs: Any):
        super().__init__(**kwargs)
        self._api_key = api_key if api_key is not None else os.getenv("FOURSQUARE_API_KEY", "")

    async def _lookup(self, query: BusinessQuery) -> LookupResult:
        if not self._api_key:
            return LookupResult.not_found(self.name, "API key not configured")

        params = {"query": query.business_name, "near": query.full_address, "limit": 5}
        resp = await self._get(
            self.SEARCH_URL, params, Authorization=self._api_key, Accept="application/json",
        )
        if resp.status != 200:
            return LookupResult.error(self.name, f"Foursquare {resp.status}")

        results = resp.json().get("results") or []
        if not results:
            return LookupResult.not_found(self.name, "No results")

        place = results[0]
        loc = place.get("location") or {}
        rating = place.get("rating")
        return LookupResult(
            status=LookupStatus.FOUND,
            source=self.name,
            url=f"https://foursquare.com/v/{place.get('fsq_id', '')}",
            name=place.get("name"),
            full_address=join_address(
                loc.get("address"), loc.get("locality"), loc.get("region"), loc.get("postcode"),
            ),
            phone=place.get("tel") or None,
            rating=rating.get("signal") if isinstance(rating, dict) else rating,
            hours=(place.get("hours") or {}).get("regular"),
            categories=[c.get("name", "") for c in place.get("categories") or []],
            photos=[
                f"{p.get('prefix', '')}original{p.get('suffix', '')}"
                for p in place.get("photos") or []
            ],
            extra={
                "tips_count": (place.get("tips") or {}).get("count", 0),
                "price": place.get("price"),
                "popularity": place.get("popularity"),
                "verified": place.get("verified"),
            },
        )


class MapQuestLookup(DirectoryLookup):
    """MapQuest radius search around the business address."""

    name = "mapquest"
    SEARCH_URL = "https://www.mapquestapi.com/search/v2/radius"

    def __init__(self, api_key: Optional[str] = None, **kwargs: Any):
        super().__init__(**kwargs)
        self._api_key = api_key if api_key is not None else os.getenv("MAPQUEST_KEY", "")

    async def _lookup(self, query: BusinessQuery) -> LookupResult:
        if not self._api_key:
            return LookupResult.not_found(self.name, "MapQuest key missing")

        params = {
            "key": self._api_key,
            "origin": query.full_address,
            "radius": 5,
            "maxMatches": 1,
            "keyword": query.business_name,
        }
        resp = await self._get(self.SEARCH_URL, params)
        if resp.status != 200:
            return LookupResult.error(self.name, f"MapQuest {resp.status}")

        results = resp.json().get("results") or []
        locations = (results[0].get("locations") or []) if results else []
        if not locations:
            return LookupResult.not_found(self.name, "No results")

        place = locations[0]
        fields = place.get("fields") or {}
        lat_lng = place.get("latLng") or {}
        mqd_id = place.get("mqd_id")
        url = (
            f"https://www.mapquest.com/{mqd_id}" if mqd_id
            else f"https://www.mapquest.com/search/results?query={quote_plus(query.business_name)}"
        )
        return LookupResult(
            status=LookupStatus.FOUND,
            source=self.name,
            url=url,
            name=place.get("name"),
            full_address=place.get("address"),
            phone=fields.get("phone") or None,
            categories=list(fields.get("categories") or []),
            extra={
                "lat": lat_lng.get("lat"),
                "lng": lat_lng.get("lng"),
                "distance": results[0].get("distance"),
            },
        )


class OpenStreetMapLookup(DirectoryLookup):
    """Nominatim address search, keeping POIs whose name resembles the business."""

    name = "open_street_map"
    SEARCH_URL = "https://nominatim.openstreetmap.org/search"
    MIN_NAME_SIMILARITY = 0.6
    _limiter = RateLimiter(requests_per_minute=60, min_interval=1.0, name="nominatim")

    def __init__(self, contact_domain: Optional[str] = None, **kwargs: Any):
        domain = contact_domain or os.getenv("SEO_TOOL_DOMAIN", "yourdomain.com")
        kwargs.setdefault("user_agent", f"LocalSEOTool/1.0 (+https://{domain})")
        super().__init__(**kwargs)

    async def _lookup(self, query: BusinessQuery) -> LookupResult:
        params = {"format": "json", "addressdetails": 1, "q": query.full_address, "limit": 10}
        await self._limiter.acquire()
        resp = await self._get(self.SEARCH_URL, params)
        if resp.status != 200:
            return LookupResult.error(self.name, f"OSM {resp.status}")

        data = resp.json()
        if not data:
            return LookupResult.not_found(self.name, "No results")

        wanted = re.sub(r"[^a-z0-9]", "", query.business_name.lower())
        for item in data:
            if item.get("class") in ("building", "highway"):
                continue
            display_name = item.get("display_name") or ""
            label = display_name.split(",")[0]
            similarity = levenshtein_similarity(wanted, re.sub(r"[^a-z0-9]", "", label.lower()))
            if similarity <= self.MIN_NAME_SIMILARITY:
                continue

            addr = item.get("address") or {}
            street = " ".join(p for p in (addr.get("house_number"), addr.get("road")) if p)
            return LookupResult(
                status=LookupStatus.FOUND,
                source=self.name,
                url=f"https://openstreetmap.org/{item.get('osm_type')}/{item.get('osm_id')}",
                name=label,
                full_address=join_address(
                    street, addr.get("city") or addr.get("town"),
                    addr.get("state"), addr.get("postcode"),
                ),
                extra={
                    "display_name": display_name,
                    "lat": float(item["lat"]) if item.get("lat") else None,
                    "lon": float(item["lon"]) if item.get("lon") else None,
                    "type": f"{item.get('class')}/{item.get('type')}",
                    "importance": item.get("importance"),
                    "name_match_score": round(similarity * 100),
                },
            )

        return LookupResult.not_found(self.name, "No business POI found at address")


# ---------------------------------------------------------------------------
# Scraping / search-backed directories
# ---------------------------------------------------------------------------

class YellowPagesDirectLookup(DirectoryLookup):
    """Guess the Yellow Pages ``/mip/`` business URL and fetch it directly."""

    name = "yellow_pages_direct"

    async def _lookup(self, query: BusinessQuery) -> LookupResult:
        search_term = re.sub(r"\s+", "-", re.sub(r"[^a-z0-9\s]", "", query.business_name.lower()))
        city_slug = re.sub(r"\s+", "-", query.city.lower())
        location_term = f"{city_slug}-{query.state.lower()}"
        direct_url = f"https://www.yellowpages.com/{location_term}/mip/{search_term}"

        resp = await self._get(direct_url)
        final_url = resp.url
        if not resp.ok or "/search?" in final_url:
            return LookupResult.not_found(self.name, "No direct Yellow Pages page")

        phone_match = PHONE_PATTERN.search(resp.text)
        return LookupResult(
            status=LookupStatus.FOUND,
            source=self.name,
            url=final_url,
            name=query.business_name,
            full_address=query.full_address,
            phone=_format_phone(phone_match) if phone_match else None,
        )


class BingPlacesLookup(DirectoryLookup):
    """Scrape the public Bing Maps search page for the name and street."""

    name = "bing_places"
    SEARCH_URL = "https://www.bing.com/maps"

    async def _lookup(self, query: BusinessQuery) -> LookupResult:
        params = {"q": f"{query.business_name} {query.full_address}"}
        resp = await self._get(self.SEARCH_URL, params, Accept="text/html")
        if resp.status != 200:
            return LookupResult.error(self.name, f"Bing {resp.status}")

        html = resp.text
        has_name = re.search(re.escape(query.business_name), html, re.IGNORECASE) is not None
        has_street = bool(query.street) and query.street in html.lower()
        if not (has_name and has_street):
            return LookupResult.not_found(self.name, "No matching listing on Bing")

        phone_match = PHONE_PATTERN.search(html)
        return LookupResult(
            status=LookupStatus.FOUND,
            source=self.name,
            url=resp.url,
            name=query.business_name,
            full_address=query.full_address,
            phone=_format_phone(phone_match) if phone_match else None,
            extra={"source_label": "Bing Maps"},
        )


UrlFilter = Callable[[str, BusinessQuery], bool]


class GoogleSiteSearchLookup(DirectoryLookup):
    """Google Custom Search restricted to one site (``site:example.com``).

    Args:
        site: Domain to restrict the search to.
        url_filter: Optional predicate the first hit's URL must satisfy.
    """

    SEARCH_URL = "https://www.googleapis.com/customsearch/v1"

    def __init__(
        self,
        site: str,
        url_filter: Optional[UrlFilter] = None,
        api_key: Optional[str] = None,
        cse_id: Optional[str] = None,
        **kwargs: Any,
    ):
        kwargs.setdefault("timeout", 3.0)
        super().__init__(**kwargs)
        self.site = site
        self.name = f"google_cse:{site}"
        self._url_filter = url_filter
        self._api_key = api_key if api_key is not None else os.getenv("GOOGLE_CUSTOM_SEARCH_KEY", "")
        self._cse_id = cse_id if cse_id is not None else os.getenv("GOOGLE_CSE_ID", "")

    async def _lookup(self, query: BusinessQuery) -> LookupResult:
        if not self._api_key or not self._cse_id:
            return LookupResult.not_found(self.name, "Custom Search not configured")

        params = {
            "key": self._api_key,
            "cx": self._cse_id,
            "q": f'site:{self.site} "{query.business_name}" "{query.street}"',
        }
        resp = await self._get(self.SEARCH_URL, params)
        if resp.status != 200:
            return LookupResult.error(self.name, f"Google CSE {resp.status}")

        items = resp.json().get("items") or []
        if not items:
            return LookupResult.not_found(self.name, "No results")

        link = items[0].get("link", "")
        if self._url_filter is not None and not self._url_filter(link, query):
            return LookupResult.not_found(self.name, f"No qualifying {self.site} listing")

        return LookupResult(
            status=LookupStatus.FOUND,
            source=self.name,
            url=link,
            name=query.business_name,
            full_address=query.full_address,
        )


def yellow_pages_listing(url: str, query: BusinessQuery) -> bool:
    return "/mip/" in url


def facebook_page(url: str, query: BusinessQuery) -> bool:
    compact_name = re.sub(r"\s", "", query.business_name.lower())
    return "/pages/" in url or compact_name in url.lower()


# ---------------------------------------------------------------------------
# Fallback chain
# ---------------------------------------------------------------------------

class FallbackChain:
    """Try lookup strategies for one directory in priority order.

    The first ``FOUND`` result wins.  When nothing is found and a strategy
    errored, ``suppress_errors`` decides whether the caller sees
    ``NOT_FOUND`` (with the error reason) or the ``ERROR`` itself.
    """

    def __init__(
        self,
        name: str,
        strategies: list[DirectoryLookup],
        suppress_errors: bool = True,
    ):
        self.name = name
        self.strategies = strategies
        self.suppress_errors = suppress_errors

    async def lookup(self, query: BusinessQuery) -> LookupResult:
        first_error: Optional[LookupResult] = None
        last_not_found: Optional[LookupResult] = None

        for strategy in self.strategies:
            result = await strategy.lookup(query)
            if result.found:
                extra = {**result.extra, "strategy": strategy.name}
                return replace(result, source=self.name, extra=extra)
            if result.status is LookupStatus.ERROR:
                logger.debug("%s strategy %s errored: %s", self.name, strategy.name, result.reason)
                first_error = first_error or result
            else:
                last_not_found = result

        if first_error is not None:
            if not self.suppress_errors:
                return replace(first_error, source=self.name)
            return LookupResult.not_found(self.name, first_error.reason)
        if last_not_found is not None:
            return replace(last_not_found, source=self.name)
        return LookupResult.not_found(self.name, "No lookup strategies configured")


DEFAULT_DIRECTORIES = [
    "yelp",
    "foursquare",
    "yellow_pages",
    "facebook",
    "whitepages",
    "mapquest",
    "open_street_map",
    "bing_places",
]


def build_default_chains(
    directories: Optional[list[str]] = None,
    timeouts: Optional[dict[str, float]] = None,
    suppress_errors: bool = True,
) -> list[FallbackChain]:
    """Build the standard directory chains.

    Args:
        directories: Directory keys to include (default: all of
            :data:`DEFAULT_DIRECTORIES`).
        timeouts: Per-directory timeout overrides in seconds.
        suppress_errors: Passed through to each :class:`FallbackChain`.
    """
    timeouts = timeouts or {}

    def t(key: str, default: float) -> dict[str, Any]:
        return {"timeout": float(timeouts.get(key, default))}

    factories: dict[str, Callable[[], list[DirectoryLookup]]] = {
        "yelp": lambda: [YelpLookup(**t("yelp", 4.0))],
        "foursquare": lambda: [FoursquareLookup(**t("foursquare", 4.0))],
        "yellow_pages": lambda: [
            YellowPagesDirectLookup(**t("yellow_pages", 4.0)),
            GoogleSiteSearchLookup(
                "yellowpages.com", url_filter=yellow_pages_listing, **t("google_cse", 3.0),
            ),
        ],
        "facebook": lambda: [
            GoogleSiteSearchLookup("facebook.com", url_filter=facebook_page, **t("google_cse", 3.0)),
        ],
        "whitepages": lambda: [GoogleSiteSearchLookup("whitepages.com", **t("google_cse", 3.0))],
        "mapquest": lambda: [MapQuestLookup(**t("mapquest", 4.0))],
        "open_street_map": lambda: [OpenStreetMapLookup(**t("open_street_map", 3.0))],
        "bing_places": lambda: [BingPlacesLookup(**t("bing_places", 5.0))],
    }

    chains = []
    for key in directories or DEFAULT_DIRECTORIES:
        factory = factories.get(key)
        if factory is None:
            logger.warning("Unknown citation directory %r ignored", key)
            continue
        chains.append(FallbackChain(key, factory(), suppress_errors=suppress_errors))
    return chains

"""Google Places API (New) text search client."""

import logging
import os
from typing import Any, Optional

from localseo.utils.http import fetch

logger = logging.getLogger(__name__)

PLACES_SEARCH_URL = "https://places.googleapis.com/v1/places:searchText"
DEFAULT_FIELD_MASK = ",".join([
    "places.id",
    "places.displayName",
    "places.formattedAddress",
    "places.rating",
    "places.userRatingCount",
    "places.nationalPhoneNumber",
    "places.websiteUri",
])


class GooglePlacesClient:
    """Thin async wrapper around ``places:searchText``.

    Usage::

        places = GooglePlacesClient()
        results = await places.text_search("The Gents Place Austin TX")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 8.0,
        max_results: int = 5,
    ):
        self._api_key = api_key if api_key is not None else os.getenv("GOOGLE_PLACES_API_KEY", "")
        self._timeout = timeout
        self._max_results = max_results

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def text_search(self, text_query: str) -> list[dict[str, Any]]:
        """Return up to ``max_results`` places for *text_query*.

        Raises:
            RuntimeError: If no API key is configured or Places returns a
                non-2xx status.
            aiohttp.ClientError: On network failures.
        """
        if not self._api_key:
            raise RuntimeError("GOOGLE_PLACES_API_KEY is not configured")

        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self._api_key,
            "X-Goog-FieldMask": DEFAULT_FIELD_MASK,
        }
        body = {"textQuery": text_query, "maxResultCount": self._max_results}
        resp = await fetch(
            PLACES_SEARCH_URL, method="POST", headers=headers, json_body=body, timeout=self._timeout,
        )

        if not resp.ok:
            logger.error("Places search failed for %r: HTTP %d", text_query, resp.status)
            raise RuntimeError(f"Places {resp.status}")
        places = resp.json().get("places") or []
        logger.debug("Places search %r returned %d result(s)", text_query, len(places))
        return places

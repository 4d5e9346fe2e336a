"""aiohttp request helper that returns fully-read responses."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

import aiohttp

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)

Params = Union[dict[str, Any], list[tuple[str, Any]], None]


@dataclass
class HttpResponse:
    """Status, final URL and body of a completed request."""
    status: int
    url: str
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body; raises ``ValueError`` on malformed JSON."""
        return json.loads(self.text) if self.text else None


async def fetch(
    url: str,
    method: str = "GET",
    params: Params = None,
    headers: Optional[dict[str, str]] = None,
    json_body: Optional[dict[str, Any]] = None,
    timeout: float = 10.0,
) -> HttpResponse:
    """Send one request and read the whole body.

    Redirects are followed; ``url`` on the result is the final URL.

    Raises:
        aiohttp.ClientError: On connection and protocol failures.
        asyncio.TimeoutError: When *timeout* seconds elapse.
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    async with aiohttp.ClientSession(timeout=client_timeout) as session:
        async with session.request(
            method, url, params=params, headers=headers, json=json_body, allow_redirects=True,
        ) as resp:
            text = await resp.text(errors="replace")
            logger.debug("%s %s -> %d", method, resp.url, resp.status)
            return HttpResponse(status=resp.status, url=str(resp.url), text=text)

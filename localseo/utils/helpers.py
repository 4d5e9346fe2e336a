"""Small text helpers shared by the analyzers and report writers."""

import re
import unicodedata
from urllib.parse import urlparse


def slugify(text: str, max_length: int = 75) -> str:
    """Convert text to a filename/URL-safe slug.

    Examples:
        >>> slugify("The Gents Place, Austin")
        'the-gents-place-austin'
    """
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"-+", "-", text).strip("-")
    if len(text) > max_length:
        text = text[:max_length].rsplit("-", 1)[0]
    return text


def extract_domain(url: str) -> str:
    """Return the lowercase hostname of *url* (scheme optional)."""
    parsed = urlparse(url if "://" in url else f"https://{url}")
    return (parsed.hostname or "").lower()


def clean_html(html: str) -> str:
    """Strip HTML tags and collapse whitespace."""
    clean = re.sub(r"<[^>]+>", " ", html)
    clean = re.sub(r"\s+", " ", clean)
    return clean.strip()

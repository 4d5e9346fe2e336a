"""Input validation for analysis requests."""

from urllib.parse import urlparse


def validate_url(url: str) -> tuple[bool, str]:
    """Validate a website URL.

    Args:
        url: The URL to validate.

    Returns:
        Tuple of (is_valid, error_message).  error_message is empty on success.
    """
    if not url or not isinstance(url, str):
        return False, "URL is empty or not a string."
    try:
        parsed = urlparse(url.strip())
    except ValueError as exc:
        return False, f"URL parse error: {exc}"
    if parsed.scheme not in ("http", "https"):
        return False, f"Invalid scheme: {parsed.scheme!r}. Must be http or https."
    if not parsed.netloc:
        return False, "URL has no network location (domain)."
    hostname = parsed.hostname or ""
    if not hostname or len(hostname) > 253:
        return False, "Invalid hostname length."
    return True, ""


def validate_business_input(business_name: str, full_address: str, website_url: str) -> None:
    """Raise ``ValueError`` unless the required report inputs are usable."""
    missing = [
        label
        for label, value in (
            ("businessName", business_name),
            ("fullAddress", full_address),
            ("websiteUrl", website_url),
        )
        if not value or not str(value).strip()
    ]
    if missing:
        raise ValueError(f"Missing required fields: {', '.join(missing)}")

    ok, error = validate_url(website_url)
    if not ok:
        raise ValueError(f"Invalid website URL: {error}")

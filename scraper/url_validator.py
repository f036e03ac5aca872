"""
URL Validator - Reject targets the browser cannot meaningfully load.

The target must be a non-empty absolute http(s) URL with a hostname.
Validation runs during config resolution, before any network activity.
"""

from urllib.parse import urlparse

from .exceptions import ConfigError

# Allowed URL schemes
ALLOWED_SCHEMES = {"http", "https"}


def validate_target_url(url: str) -> str:
    """
    Validate a target URL.

    Args:
        url: The URL to validate

    Returns:
        The URL with surrounding whitespace removed

    Raises:
        ConfigError: If the URL is empty, relative, or not http/https
    """
    if not isinstance(url, str) or not url.strip():
        raise ConfigError("Target URL must be a non-empty string")

    url = url.strip()

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise ConfigError(f"Invalid URL format: {e}")

    # Check scheme
    if not parsed.scheme:
        raise ConfigError(f"Target URL '{url}' must be absolute (include http:// or https://)")
    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise ConfigError(f"URL scheme '{parsed.scheme}' is not allowed. Use http or https.")

    # Check for empty host
    if not parsed.hostname:
        raise ConfigError("URL must include a hostname")

    return url

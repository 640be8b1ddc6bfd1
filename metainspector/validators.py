"""
URL and text helpers shared by the fetcher, analyzer and dashboard.
"""

from typing import Optional
from urllib.parse import urlparse


def normalize_url(url: Optional[str]) -> Optional[str]:
    """Strip whitespace and ensure the URL has a scheme."""
    if not url:
        return url
    url = url.strip()
    if url and not url.lower().startswith(("http://", "https://")):
        return f"https://{url}"
    return url


def is_valid_url(url: Optional[str]) -> bool:
    """True for absolute http(s) URLs with a host."""
    if not url or any(ch.isspace() for ch in url):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)


def get_hostname(url: str) -> str:
    """Hostname of a URL, or the input unchanged when it has none."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return url
    return hostname or url


def truncate_text(text: Optional[str], max_length: int) -> str:
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."

"""
Page inspection for MetaInspector.
Fetches a single page over HTTP and runs the meta tag analysis on it.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import requests
from requests.exceptions import (
    RequestException,
    Timeout,
    ConnectionError,
    SSLError,
    TooManyRedirects,
)

from .analyzer import AnalysisResult, analyze_html
from .config import Config, FetchConfig, RetryConfig, load_config
from .logging_setup import AnalysisContext, get_logger
from .retry import retry_with_backoff
from .validators import get_hostname, is_valid_url

logger = get_logger("inspector")


class MetaInspectorError(Exception):
    """Base class for errors surfaced to API callers."""


class InvalidURLError(MetaInspectorError):
    """The submitted URL is not an absolute http(s) URL."""


class FetchError(MetaInspectorError):
    """The page could not be retrieved."""


@dataclass
class FetchedPage:
    """A successfully retrieved page."""
    url: str
    final_url: str
    status_code: int
    html: str
    truncated: bool = False


_SESSIONS: Dict[Tuple[str, int], requests.Session] = {}


def _get_session(config: FetchConfig) -> requests.Session:
    """Shared session per (user agent, redirect limit) pair."""
    key = (config.user_agent, config.max_redirects)
    session = _SESSIONS.get(key)
    if session is None:
        session = requests.Session()
        session.headers.update({
            "User-Agent": config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        })
        session.max_redirects = config.max_redirects
        _SESSIONS[key] = session
    return session


def _read_body(response: requests.Response, max_bytes: int) -> Tuple[str, bool]:
    """Read at most max_bytes of the body. Returns (text, truncated)."""
    chunks = []
    total = 0
    truncated = False
    stream = response.iter_content(chunk_size=64 * 1024)
    for chunk in stream:
        if not chunk:
            continue
        chunks.append(chunk)
        total += len(chunk)
        if total >= max_bytes:
            # an exact fit is only complete if nothing follows
            truncated = total > max_bytes or any(stream)
            break
    raw = b"".join(chunks)[:max_bytes]

    # requests falls back to ISO-8859-1 when the header has no charset
    content_type = (response.headers or {}).get("Content-Type", "")
    if "charset" in content_type.lower() and response.encoding:
        encoding = response.encoding
    else:
        encoding = response.apparent_encoding or "utf-8"
    try:
        return raw.decode(encoding, errors="replace"), truncated
    except LookupError:
        return raw.decode("utf-8", errors="replace"), truncated


def fetch_page(
    url: str,
    config: FetchConfig = None,
    retry_config: RetryConfig = None,
) -> Tuple[Optional[FetchedPage], Optional[str]]:
    """
    Fetch a page with proper error handling.
    Returns (page, error_message); exactly one of them is None.
    """
    config = config or FetchConfig()
    session = _get_session(config)

    def do_fetch() -> requests.Response:
        return session.get(
            url,
            timeout=config.timeout_seconds,
            allow_redirects=True,
            stream=True,
        )

    try:
        if retry_config:
            response = retry_with_backoff(
                func=do_fetch,
                config=retry_config,
                exceptions=(ConnectionError, Timeout),
                logger=logger,
                operation_name=f"fetch_{get_hostname(url)}",
            )
        else:
            response = do_fetch()
    except SSLError as e:
        return None, f"Failed to fetch website: SSL error ({e})"
    except Timeout:
        return None, "Failed to fetch website: request timed out"
    except ConnectionError as e:
        return None, f"Failed to fetch website: connection error ({e})"
    except TooManyRedirects:
        return None, "Failed to fetch website: too many redirects"
    except RequestException as e:
        return None, f"Failed to fetch website: {e}"

    try:
        if not response.ok:
            reason = response.reason or f"HTTP {response.status_code}"
            logger.info(f"Fetch of {url} returned {response.status_code} {reason}")
            return None, f"Failed to fetch website: {reason}"

        html, truncated = _read_body(response, config.max_bytes)
        if truncated:
            logger.warning(f"Body of {url} exceeded {config.max_bytes} bytes, truncated")
        return FetchedPage(
            url=url,
            final_url=response.url or url,
            status_code=response.status_code,
            html=html,
            truncated=truncated,
        ), None
    except RequestException as e:
        return None, f"Failed to fetch website: {e}"
    finally:
        response.close()


def analyze_url(url: str, config: Config = None) -> AnalysisResult:
    """
    Fetch `url` and analyze its meta tags.

    Raises InvalidURLError for malformed input and FetchError when the
    page cannot be retrieved.
    """
    config = config or load_config()
    url = (url or "").strip()
    if not is_valid_url(url):
        raise InvalidURLError(f"Invalid URL: {url!r}")

    with AnalysisContext(logger, url) as ctx:
        page, error = fetch_page(url, config.fetch, config.retry)
        if error:
            raise FetchError(error)

        result = analyze_html(url, page.html, config.scoring)
        ctx.record_score(result.score.overall)
        return result


def analyze_with_isolation(
    url: str,
    config: Config = None,
) -> Tuple[Optional[AnalysisResult], Optional[str]]:
    """
    Analyze a URL with full error isolation.
    Never raises exceptions to caller; returns (result, error).
    """
    try:
        return analyze_url(url, config), None
    except MetaInspectorError as e:
        return None, str(e)
    except Exception as e:
        logger.error(f"Unexpected error analyzing {url}: {e}", exc_info=True)
        return None, f"Failed to analyze website: {e}"

"""
Shared pytest fixtures for MetaInspector tests.
"""

from pathlib import Path
from unittest.mock import Mock

import pytest

from metainspector.config import (
    Config,
    FetchConfig,
    RetryConfig,
    ScoringConfig,
    ServerConfig,
)


@pytest.fixture(autouse=True)
def isolated_log_dir(tmp_path: Path, monkeypatch):
    """Keep log files and health-check probes out of the repo."""
    log_dir = tmp_path / "logs"
    monkeypatch.setattr("metainspector.config.LOG_DIR", log_dir)
    monkeypatch.setattr("metainspector.healthcheck.LOG_DIR", log_dir)
    monkeypatch.setattr("metainspector.logging_setup.LOG_DIR", log_dir)
    return log_dir


@pytest.fixture
def scoring_config() -> ScoringConfig:
    """Default scoring configuration for tests."""
    return ScoringConfig()


@pytest.fixture
def fetch_config() -> FetchConfig:
    """Fetch configuration with a short timeout and small body cap."""
    return FetchConfig(timeout_seconds=2, max_bytes=64 * 1024)


@pytest.fixture
def retry_config() -> RetryConfig:
    """Minimal retry configuration for tests."""
    return RetryConfig(
        max_retries=1,
        base_delay_seconds=0.01,
        max_delay_seconds=0.05,
        jitter=False,
    )


@pytest.fixture
def mock_config(
    scoring_config: ScoringConfig,
    fetch_config: FetchConfig,
    retry_config: RetryConfig,
) -> Config:
    """Full configuration for tests."""
    return Config(
        fetch=fetch_config,
        scoring=scoring_config,
        retry=retry_config,
        server=ServerConfig(host="127.0.0.1", port=5000),
    )


def make_response(
    html: str = "",
    status_code: int = 200,
    reason: str = "OK",
    url: str = "https://example.com/",
    content_type: str = "text/html; charset=utf-8",
) -> Mock:
    """Stand-in for a streamed requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    response.url = url
    response.headers = {"Content-Type": content_type}
    response.encoding = "utf-8"
    response.apparent_encoding = "utf-8"
    body = html.encode("utf-8")
    response.iter_content.side_effect = lambda chunk_size=1: iter(
        [body[i:i + chunk_size] for i in range(0, len(body), chunk_size)]
    )
    return response


@pytest.fixture
def sample_html_optimized() -> str:
    """A page whose core tags all meet the guidelines."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>Professional Plumbing Services in Austin, TX</title>
        <meta name="description" content="Licensed Austin plumbers offering 24/7 emergency repairs, water heater installs and drain cleaning. Upfront pricing and same-day service.">
        <link rel="canonical" href="https://example.com/">
        <meta name="robots" content="index, follow">
        <meta property="og:title" content="Professional Plumbing Services">
        <meta property="og:description" content="24/7 emergency plumbing in Austin.">
        <meta property="og:image" content="https://example.com/og.png">
        <meta name="twitter:card" content="summary_large_image">
    </head>
    <body><h1>Professional Plumbing Services</h1></body>
    </html>
    """


@pytest.fixture
def sample_html_bare() -> str:
    """A page with no SEO tags at all."""
    return """
    <!DOCTYPE html>
    <html>
    <head></head>
    <body><p>Hello</p></body>
    </html>
    """


@pytest.fixture
def sample_html_partial() -> str:
    """Short title, long description, relative canonical, noindex, plain twitter card."""
    return """
    <html>
    <head>
        <title>Home</title>
        <meta name="description" content="%s">
        <link rel="canonical" href="/about">
        <meta name="robots" content="noindex, nofollow">
        <meta property="og:image" content="/img/share.png">
        <meta name="twitter:card" content="summary">
    </head>
    <body></body>
    </html>
    """ % ("d" * 200)

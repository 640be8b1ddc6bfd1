"""
Tests for page fetching and the fetch-then-analyze pipeline.
"""

from unittest.mock import Mock, patch

import pytest
from requests.exceptions import ConnectionError, SSLError, Timeout, TooManyRedirects

from metainspector.analyzer import AnalysisResult
from metainspector.config import FetchConfig
from metainspector.inspector import (
    FetchError,
    FetchedPage,
    InvalidURLError,
    _get_session,
    analyze_url,
    analyze_with_isolation,
    fetch_page,
)

from conftest import make_response


def _session_returning(*results) -> Mock:
    session = Mock()
    session.get.side_effect = list(results)
    return session


class TestFetchPage:
    """Tests for fetch_page."""

    @patch("metainspector.inspector._get_session")
    def test_returns_page_on_success(self, mock_session, fetch_config, sample_html_optimized):
        response = make_response(sample_html_optimized, url="https://example.com/final")
        mock_session.return_value = _session_returning(response)

        page, error = fetch_page("https://example.com/", fetch_config)

        assert error is None
        assert isinstance(page, FetchedPage)
        assert page.final_url == "https://example.com/final"
        assert page.status_code == 200
        assert "Professional Plumbing" in page.html
        assert page.truncated is False
        response.close.assert_called_once()

    @patch("metainspector.inspector._get_session")
    def test_non_ok_status_is_an_error(self, mock_session, fetch_config):
        response = make_response("<h1>Nope</h1>", status_code=404, reason="Not Found")
        mock_session.return_value = _session_returning(response)

        page, error = fetch_page("https://example.com/missing", fetch_config)

        assert page is None
        assert error == "Failed to fetch website: Not Found"

    @patch("metainspector.inspector._get_session")
    def test_truncates_large_bodies(self, mock_session):
        config = FetchConfig(max_bytes=100)
        response = make_response("x" * 1000)
        mock_session.return_value = _session_returning(response)

        page, error = fetch_page("https://example.com/", config)

        assert error is None
        assert page.truncated is True
        assert len(page.html) == 100

    @patch("metainspector.inspector._get_session")
    def test_exact_fit_with_more_data_is_truncated(self, mock_session):
        response = make_response()
        response.iter_content.side_effect = lambda chunk_size=1: iter([b"a" * 10, b"b" * 10])
        mock_session.return_value = _session_returning(response)

        page, error = fetch_page("https://example.com/", FetchConfig(max_bytes=10))

        assert error is None
        assert page.html == "a" * 10
        assert page.truncated is True

    @patch("metainspector.inspector._get_session")
    def test_exact_fit_at_end_of_body_is_complete(self, mock_session):
        response = make_response()
        response.iter_content.side_effect = lambda chunk_size=1: iter([b"a" * 10, b""])
        mock_session.return_value = _session_returning(response)

        page, error = fetch_page("https://example.com/", FetchConfig(max_bytes=10))

        assert error is None
        assert page.html == "a" * 10
        assert page.truncated is False

    @pytest.mark.parametrize("exc, expected", [
        (SSLError("bad cert"), "SSL error"),
        (Timeout(), "timed out"),
        (ConnectionError("refused"), "connection error"),
        (TooManyRedirects(), "too many redirects"),
    ])
    @patch("metainspector.inspector._get_session")
    def test_network_errors_become_messages(self, mock_session, fetch_config, exc, expected):
        mock_session.return_value = _session_returning(exc)

        page, error = fetch_page("https://example.com/", fetch_config)

        assert page is None
        assert error.startswith("Failed to fetch website:")
        assert expected in error

    @patch("metainspector.retry.time.sleep")
    @patch("metainspector.inspector._get_session")
    def test_retries_transient_errors(
        self, mock_session, mock_sleep, fetch_config, retry_config, sample_html_bare
    ):
        session = _session_returning(ConnectionError("reset"), make_response(sample_html_bare))
        mock_session.return_value = session

        page, error = fetch_page("https://example.com/", fetch_config, retry_config)

        assert error is None
        assert page is not None
        assert session.get.call_count == 2
        mock_sleep.assert_called_once()

    @patch("metainspector.retry.time.sleep")
    @patch("metainspector.inspector._get_session")
    def test_gives_up_after_retry_budget(self, mock_session, mock_sleep, fetch_config, retry_config):
        session = _session_returning(Timeout(), Timeout())
        mock_session.return_value = session

        page, error = fetch_page("https://example.com/", fetch_config, retry_config)

        assert page is None
        assert "timed out" in error
        assert session.get.call_count == retry_config.max_retries + 1


class TestGetSession:
    """Tests for the shared HTTP session cache."""

    @pytest.fixture(autouse=True)
    def empty_cache(self, monkeypatch):
        monkeypatch.setattr("metainspector.inspector._SESSIONS", {})

    def test_each_config_gets_its_own_settings(self):
        first = _get_session(FetchConfig(user_agent="UA-one"))
        second = _get_session(FetchConfig(user_agent="UA-two", max_redirects=1))

        assert first.headers["User-Agent"] == "UA-one"
        assert first.max_redirects == 5
        assert second.headers["User-Agent"] == "UA-two"
        assert second.max_redirects == 1

    def test_same_settings_reuse_the_session(self):
        config = FetchConfig(user_agent="UA-one")
        assert _get_session(config) is _get_session(FetchConfig(user_agent="UA-one"))


class TestAnalyzeUrl:
    """Tests for analyze_url and analyze_with_isolation."""

    def test_rejects_invalid_url(self, mock_config):
        with pytest.raises(InvalidURLError):
            analyze_url("not a url", mock_config)

    def test_rejects_non_http_scheme(self, mock_config):
        with pytest.raises(InvalidURLError):
            analyze_url("ftp://example.com/file", mock_config)

    @patch("metainspector.inspector.fetch_page")
    def test_fetch_failure_raises(self, mock_fetch, mock_config):
        mock_fetch.return_value = (None, "Failed to fetch website: Not Found")

        with pytest.raises(FetchError, match="Not Found"):
            analyze_url("https://example.com/", mock_config)

    @patch("metainspector.inspector.fetch_page")
    def test_analyzes_fetched_html(self, mock_fetch, mock_config, sample_html_optimized):
        mock_fetch.return_value = (
            FetchedPage(
                url="https://example.com/",
                final_url="https://example.com/",
                status_code=200,
                html=sample_html_optimized,
            ),
            None,
        )

        result = analyze_url("https://example.com/", mock_config)

        assert isinstance(result, AnalysisResult)
        assert result.url == "https://example.com/"
        assert result.score.overall == 90
        mock_fetch.assert_called_once_with(
            "https://example.com/", mock_config.fetch, mock_config.retry
        )

    @patch("metainspector.inspector.fetch_page")
    def test_isolation_returns_fetch_error(self, mock_fetch, mock_config):
        mock_fetch.return_value = (None, "Failed to fetch website: Forbidden")

        result, error = analyze_with_isolation("https://example.com/", mock_config)

        assert result is None
        assert error == "Failed to fetch website: Forbidden"

    @patch("metainspector.inspector.fetch_page")
    def test_isolation_catches_unexpected_errors(self, mock_fetch, mock_config):
        mock_fetch.side_effect = RuntimeError("boom")

        result, error = analyze_with_isolation("https://example.com/", mock_config)

        assert result is None
        assert "boom" in error

"""Tests for page title fetching (network mocked)."""

import threading
from unittest.mock import MagicMock, patch

import pytest
import requests

from goto.title import TitleFuture, extract_title, fetch_title, load_title


def mock_response(body: bytes, content_type: str = "text/html; charset=utf-8", status_error=None):
    resp = MagicMock()
    resp.headers = {"content-type": content_type}
    resp.encoding = "utf-8"
    resp.iter_content.return_value = [body]
    resp.__exit__.return_value = False
    if status_error:
        resp.raise_for_status.side_effect = status_error
    return resp


class TestExtractTitle:
    def test_title(self):
        assert extract_title("<html><head><title>Hello</title></head></html>") == "Hello"

    def test_collapses_whitespace(self):
        assert extract_title("<title>\n  Hello\n   World  </title>") == "Hello World"

    def test_uppercase_tag(self):
        assert extract_title("<HTML><TITLE>Loud</TITLE></HTML>") == "Loud"

    def test_entities(self):
        assert extract_title("<title>A &amp; B</title>") == "A & B"

    def test_missing(self):
        assert extract_title("<html><body>No title</body></html>") is None

    def test_empty(self):
        assert extract_title("<title>   </title>") is None

    def test_bytes_use_meta_charset(self):
        html = '<meta charset="utf-8"><title>naïve</title>'.encode("utf-8")
        assert extract_title(html) == "naïve"


class TestFetchTitle:
    def test_fetch(self):
        with patch("goto.title.requests.get", return_value=mock_response(b"<title>Page</title>")) as get:
            assert fetch_title("https://example.com/", timeout=3) == "Page"
        assert get.call_args.kwargs["timeout"] == 3

    def test_network_error(self):
        with patch("goto.title.requests.get", side_effect=requests.ConnectionError("down")):
            assert fetch_title("https://example.com/") is None

    def test_timeout(self):
        with patch("goto.title.requests.get", side_effect=requests.Timeout("slow")):
            assert fetch_title("https://example.com/") is None

    def test_http_error(self):
        resp = mock_response(b"<title>Not Found</title>", status_error=requests.HTTPError("404"))
        with patch("goto.title.requests.get", return_value=resp):
            assert fetch_title("https://example.com/") is None

    def test_not_html(self):
        resp = mock_response(b"%PDF-1.4", content_type="application/pdf")
        with patch("goto.title.requests.get", return_value=resp):
            assert fetch_title("https://example.com/doc.pdf") is None

    def test_no_title(self):
        with patch("goto.title.requests.get", return_value=mock_response(b"<p>hi</p>")):
            assert fetch_title("https://example.com/") is None

    def test_meta_charset_without_header_charset(self):
        body = '<html><head><meta charset="utf-8"><title>Café crème</title></head></html>'.encode("utf-8")
        resp = mock_response(body, content_type="text/html")
        # requests falls back to ISO-8859-1 for text/* without a charset
        resp.encoding = "ISO-8859-1"
        with patch("goto.title.requests.get", return_value=resp):
            assert fetch_title("https://example.com/") == "Café crème"

    def test_header_charset_wins(self):
        resp = mock_response(
            "<title>Ångström</title>".encode("latin-1"),
            content_type="text/html; charset=ISO-8859-1",
        )
        resp.encoding = "ISO-8859-1"
        with patch("goto.title.requests.get", return_value=resp):
            assert fetch_title("https://example.com/") == "Ångström"


class TestTitleFuture:
    def test_result(self):
        with patch("goto.title.fetch_title", return_value="Background"):
            future = load_title("https://example.com/")
            assert future.result() == "Background"

    def test_result_consumed_once(self):
        with patch("goto.title.fetch_title", return_value=None):
            future = load_title("https://example.com/")
            assert future.result() is None
            with pytest.raises(RuntimeError):
                future.result()

    def test_runs_concurrently(self):
        release = threading.Event()
        started = threading.Event()

        def slow_fetch(url, timeout):
            started.set()
            release.wait(5)
            return "Late"

        with patch("goto.title.fetch_title", side_effect=slow_fetch):
            future = load_title("https://example.com/")
            assert started.wait(5)
            # Foreground keeps going while the fetch is blocked
            release.set()
            assert future.result() == "Late"

    def test_crash_gives_none(self):
        with patch("goto.title.fetch_title", side_effect=RuntimeError("boom")):
            assert load_title("https://example.com/").result() is None

    def test_daemon_thread(self):
        future = TitleFuture("https://example.com/")
        assert future._thread.daemon

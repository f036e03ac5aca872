"""
Pytest fixtures for scraper tests.
"""

import pytest

from scraper.config import Settings

ARTICLE_HTML = """<!DOCTYPE html>
<html><head><title>Aurora</title></head>
<body>
<h1>2012 Aurora theater shooting</h1>
<p>  First paragraph.  </p>
<p></p>
<h2>Background</h2>
<p>Second paragraph.</p>
<h3> Aftermath </h3>
</body></html>
"""


@pytest.fixture
def article_html():
    """A small rendered article with headings and an empty paragraph."""
    return ARTICLE_HTML


@pytest.fixture
def test_settings():
    """Settings with the default timeouts, independent of the environment."""
    s = Settings()
    s.DIRECT_TIMEOUT_MS = 30000
    s.ARCHIVE_TIMEOUT_MS = 30000
    s.SCREENSHOT_TIMEOUT_MS = 15000
    s.LOOKUP_TIMEOUT = 30
    s.HEADLESS = True
    s.USER_AGENT = ""
    return s


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run inside a temporary directory so relative output paths land there."""
    monkeypatch.chdir(tmp_path)
    return tmp_path

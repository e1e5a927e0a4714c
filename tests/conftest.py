"""
Shared fixtures: a temporary SQLite database per test, HTML table builders,
and fakes for the HTTP session and the forecast browser.
"""

from unittest.mock import MagicMock

import pytest
import requests
from sqlalchemy import func, select

from config.database import create_db_engine, create_session_factory, init_db


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so threads get their own connections."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'weather.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def count_rows(session_factory):
    """Count stored rows of a model, optionally filtered."""
    def _count(model, *criteria):
        with session_factory() as session:
            return session.execute(
                select(func.count()).select_from(model).where(*criteria)
            ).scalar_one()
    return _count


def station_table_html(rows):
    """Minimal Weather Underground daily history page."""
    body = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows
    )
    return (
        "<html><head><meta charset=\"utf-8\"></head><body><lib-history-table>"
        "<table class=\"history-table desktop-table\">"
        "<thead><tr><th>Time</th><th>Temperature</th><th>Dew Point</th><th>Humidity</th></tr></thead>"
        f"<tbody>{body}</tbody></table>"
        "</lib-history-table></body></html>"
    )


def forecast_table_html(rows):
    """Outer HTML of the hourly forecast table."""
    body = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows
    )
    return f"<table id=\"hourly-forecast-table\"><thead><tr><th>Time</th></tr></thead><tbody>{body}</tbody></table>"


def forecast_row(label, temp="52 °F", precip="10 %", humidity="80 %"):
    return [label, "Cloudy", temp, "50 °F", precip, "0 in", "45 °F", "5 mph", humidity]


@pytest.fixture
def station_html():
    return station_table_html


@pytest.fixture
def forecast_html():
    return forecast_table_html


@pytest.fixture
def make_forecast_row():
    return forecast_row


def make_response(text="", status_code=200):
    response = MagicMock()
    response.text = text
    response.content = text.encode("utf-8")
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    return response


@pytest.fixture
def http_for():
    """Build a mock requests.Session answering per URL substring.

    Values are either HTML text or an exception instance to raise.
    """
    def _build(pages):
        def _get(url, **kwargs):
            for key, value in pages.items():
                if key in url:
                    if isinstance(value, Exception):
                        raise value
                    return make_response(value)
            return make_response("", status_code=404)

        http = MagicMock(spec=requests.Session)
        http.get.side_effect = _get
        return http
    return _build


class FakeBrowser:
    """Stands in for ForecastBrowser; pages keyed by ISO date in the URL."""

    def __init__(self, pages, failing=()):
        self.pages = pages
        self.failing = set(failing)
        self.visited = []
        self.closed = False

    def fetch_table_html(self, url):
        self.visited.append(url)
        day = url.rsplit("/", 1)[-1]
        if day in self.failing:
            raise RuntimeError(f"hourly-forecast-table not found for {day}")
        return self.pages.get(day, forecast_table_html([]))

    def close(self):
        self.closed = True


@pytest.fixture
def fake_browser_factory():
    """Returns (factory, created) where created lists every browser built."""
    def _build(pages, failing=()):
        created = []

        def factory():
            browser = FakeBrowser(pages, failing)
            created.append(browser)
            return browser
        return factory, created
    return _build

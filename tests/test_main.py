"""Tests for the process entry point and its exit codes."""

import logging
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine, inspect

from weather_monitor import main as entry
from weather_monitor.jobs.scraping_job import JobResult


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)  # no stray .env
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'weather.db'}")
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "logs" / "weather.log"))
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield tmp_path
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_missing_database_url_exits_with_error(monkeypatch, tmp_path, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DATABASE_URL", raising=False)

    with patch.object(entry, "WeatherScrapingJob") as job_cls:
        assert entry.main() == 1

    job_cls.assert_not_called()
    assert "Error loading settings" in capsys.readouterr().err


def test_success_bootstraps_schema_and_exits_zero(env, capsys):
    with patch.object(entry, "WeatherScrapingJob") as job_cls:
        job_cls.return_value.run.return_value = JobResult()
        assert entry.main() == 0

    assert "Weather scraping completed. Exiting." in capsys.readouterr().out
    engine = create_engine(f"sqlite:///{env / 'weather.db'}")
    assert {"weather_stations", "forecasts", "weather_comparisons"} <= set(inspect(engine).get_table_names())
    engine.dispose()
    assert (env / "logs" / "weather.log").exists()


def test_failed_run_exits_with_error(env, capsys):
    with patch.object(entry, "WeatherScrapingJob") as job_cls:
        job_cls.return_value.run.return_value = JobResult(error=RuntimeError("boom"))
        assert entry.main() == 1

    assert "Weather scraping completed" not in capsys.readouterr().out


@pytest.mark.parametrize("url", [
    "Host=localhost;Database=weather;Username=weather",
    "postgres://weather@localhost/weather",
])
def test_malformed_database_url_exits_with_error(env, monkeypatch, caplog, url):
    monkeypatch.setenv("DATABASE_URL", url)

    with patch.object(entry, "WeatherScrapingJob") as job_cls:
        assert entry.main() == 1

    job_cls.assert_not_called()
    assert "Database initialization failed" in caplog.text


def test_schema_bootstrap_failure_exits_with_error(env):
    with patch.object(entry, "init_db", side_effect=RuntimeError("database unavailable")), \
            patch.object(entry, "WeatherScrapingJob") as job_cls:
        assert entry.main() == 1

    job_cls.assert_not_called()

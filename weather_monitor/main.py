import logging
import sys
from functools import partial

from pydantic import ValidationError

from config.database import create_db_engine, create_session_factory, init_db
from config.logging import setup_logging
from config.settings import Settings
from weather_monitor.data_layer.preprocessing.forecast_scraper import ForecastBrowser
from weather_monitor.data_layer.preprocessing.station_scraper import create_http_session
from weather_monitor.jobs.scraping_job import WeatherScrapingJob

logger = logging.getLogger(__name__)


def main() -> int:
    """Run the scraping job once. Returns the process exit code."""
    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    setup_logging(settings)

    engine = None
    try:
        engine = create_db_engine(settings.DATABASE_URL, echo=settings.LOG_LEVEL == "DEBUG")
        init_db(engine)
    except Exception:
        logger.exception("Database initialization failed")
        if engine is not None:
            engine.dispose()
        return 1

    http = create_http_session(settings.USER_AGENT)
    browser_factory = partial(
        ForecastBrowser,
        headless=settings.BROWSER_HEADLESS,
        wait_timeout=settings.FORECAST_WAIT_TIMEOUT,
        user_agent=settings.USER_AGENT,
    )

    try:
        job = WeatherScrapingJob(settings, create_session_factory(engine), http, browser_factory)
        result = job.run()
    finally:
        http.close()
        engine.dispose()

    if not result.ok:
        return 1

    print("Weather scraping completed. Exiting.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Optional

import requests
from sqlalchemy.orm import sessionmaker

from config.settings import Settings
from weather_monitor.data_layer.preprocessing.forecast_scraper import ForecastBrowser, ForecastScraper
from weather_monitor.data_layer.preprocessing.records import ScrapeResult
from weather_monitor.data_layer.preprocessing.station_scraper import StationScraper, build_station_url

logger = logging.getLogger(__name__)


@dataclass
class JobResult:
    """Outcome of one job run, error is set when the run failed"""
    stations: Dict[str, ScrapeResult] = field(default_factory=dict)
    forecast: Optional[ScrapeResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def skipped_rows(self) -> int:
        total = sum(r.skipped_rows for r in self.stations.values())
        if self.forecast:
            total += self.forecast.skipped_rows
        return total


class WeatherScrapingJob:
    """
    One scheduled run: yesterday's station readings, then the forecast

    Station scrapes run concurrently, one thread per station. The forecast
    runs afterwards through a single browser session.
    """

    def __init__(self, settings: Settings, session_factory: sessionmaker,
                 http: requests.Session, browser_factory: Callable[[], ForecastBrowser]):
        self.settings = settings
        self.station_scraper = StationScraper(session_factory, http, timeout=settings.HTTP_TIMEOUT)
        self.forecast_scraper = ForecastScraper(
            session_factory,
            browser_factory,
            url_template=settings.FORECAST_URL,
            latitude=settings.FORECAST_LAT,
            longitude=settings.FORECAST_LON,
            days=settings.FORECAST_DAYS,
        )

    def collect_stations(self, day: date) -> Dict[str, ScrapeResult]:
        """Scrape every configured station for the given day in parallel"""
        station_ids = self.settings.STATION_IDS
        if not station_ids:
            return {}

        logger.info(f"Collecting weather station data for {day}")
        with ThreadPoolExecutor(max_workers=len(station_ids)) as pool:
            futures = {
                station_id: pool.submit(
                    self.station_scraper.scrape,
                    station_id,
                    build_station_url(self.settings.STATION_HISTORY_URL, station_id, day),
                    day,
                )
                for station_id in station_ids
            }
            return {station_id: fut.result() for station_id, fut in futures.items()}

    def run(self, today: Optional[date] = None) -> JobResult:
        today = today or date.today()
        logger.info(f"Starting weather scraping job at {datetime.now()}")

        result = JobResult()
        try:
            result.stations = self.collect_stations(today - timedelta(days=1))

            logger.info("Collecting forecast data...")
            result.forecast = self.forecast_scraper.scrape(today)
        except Exception as e:
            logger.exception("Weather scraping failed")
            result.error = e
            return result

        saved = {station_id: r.saved for station_id, r in result.stations.items()}
        logger.info(
            f"Weather scraping completed successfully at {datetime.now()} "
            f"(station readings: {saved}, forecast entries: {result.forecast.saved}, "
            f"rows skipped: {result.skipped_rows})"
        )
        return result

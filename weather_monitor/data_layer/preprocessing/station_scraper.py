import logging
from datetime import date
from typing import Optional

import requests
from sqlalchemy.orm import sessionmaker

from config.database import session_scope
from weather_monitor.data_layer.preprocessing.html_tables import parse_station_table
from weather_monitor.data_layer.preprocessing.records import (
    STATUS_COMPLETED, STATUS_FAILED, STATUS_NO_ROWS, STATUS_SKIPPED, ScrapeResult,
)
from weather_monitor.data_layer.storage.weather_repository import WeatherRepository

logger = logging.getLogger(__name__)


def create_http_session(user_agent: str) -> requests.Session:
    """HTTP session shared by all station scrapes in a run"""
    session = requests.Session()
    session.headers.update({'User-Agent': user_agent})
    return session


def build_station_url(template: str, station_id: str, day: date) -> str:
    return template.format(station_id=station_id, date=day.isoformat())


class StationScraper:
    """
    Scraper for Weather Underground personal weather station history

    The daily table page is server-rendered, so a plain GET is enough.
    Each scrape opens its own database session, so several stations can
    be scraped from different threads at once.
    """

    def __init__(self, session_factory: sessionmaker, http: requests.Session,
                 timeout: Optional[float] = 30):
        self.session_factory = session_factory
        self.http = http
        self.timeout = timeout

    def scrape(self, station_id: str, url: str, day: date) -> ScrapeResult:
        """
        Fetch and store one day of readings for a station

        Nothing is fetched when readings for that station and day are
        already stored. Fetch, parse and insert errors are logged and
        reported as a failed result instead of raised.

        Args:
            station_id: Station identifier, e.g. "KWABLAIN153"
            url: Daily history table URL
            day: Date the table covers

        Returns:
            ScrapeResult with the number of readings saved
        """
        with session_scope(self.session_factory) as db:
            repo = WeatherRepository(db)

            if repo.station_readings_exist(station_id, day):
                logger.info(f"Data for {station_id} on {day} already exists, skipping")
                return ScrapeResult(status=STATUS_SKIPPED)

            result = ScrapeResult(status=STATUS_COMPLETED)
            try:
                logger.info(f"Scraping {station_id} from {url}")
                response = self.http.get(url, timeout=self.timeout)
                response.raise_for_status()

                parsed = parse_station_table(response.content, station_id, day)
                if parsed.total_rows == 0:
                    logger.warning(f"No table rows found for {station_id}")
                    result.status = STATUS_NO_ROWS
                    return result

                result.skipped_rows = parsed.skipped_rows
                for reading in parsed.records:
                    if repo.insert_station_reading(reading):
                        result.saved += 1

                logger.info(
                    f"Scraped {result.saved} readings for {station_id} "
                    f"({result.skipped_rows} rows skipped)"
                )
            except Exception:
                logger.exception(f"Failed to scrape {station_id}")
                result.status = STATUS_FAILED

            return result

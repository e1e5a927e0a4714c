from selenium import webdriver
from selenium.webdriver.common.by import By
from selenium.webdriver.support.ui import WebDriverWait
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.chrome.options import Options
from sqlalchemy.orm import sessionmaker
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional
import logging

from config.database import session_scope
from weather_monitor.data_layer.preprocessing.html_tables import parse_forecast_table
from weather_monitor.data_layer.preprocessing.records import (
    STATUS_COMPLETED, STATUS_SKIPPED, ScrapeResult,
)
from weather_monitor.data_layer.storage.weather_repository import WeatherRepository

logger = logging.getLogger(__name__)

FORECAST_TABLE_ID = "hourly-forecast-table"


class ForecastBrowser:
    """Headless Chrome session for the script-rendered hourly forecast page"""

    def __init__(self, headless=True, wait_timeout=15, user_agent: Optional[str] = None):
        chrome_options = Options()
        if headless:
            chrome_options.add_argument('--headless')
        chrome_options.add_argument('--no-sandbox')
        chrome_options.add_argument('--disable-dev-shm-usage')
        chrome_options.add_argument('--disable-gpu')
        if user_agent:
            chrome_options.add_argument(f'user-agent={user_agent}')

        self.driver = webdriver.Chrome(options=chrome_options)
        self.wait = WebDriverWait(self.driver, wait_timeout)

    def fetch_table_html(self, url: str, element_id: str = FORECAST_TABLE_ID) -> str:
        """
        Load the page and return the table's outer HTML once it has rows

        Raises selenium's TimeoutException if the rows never appear.
        """
        self.driver.get(url)
        self.wait.until(
            EC.presence_of_element_located((By.CSS_SELECTOR, f"#{element_id} tbody tr"))
        )
        table = self.driver.find_element(By.ID, element_id)
        return table.get_attribute("outerHTML")

    def close(self):
        self.driver.quit()


class ForecastScraper:
    """Collects the hourly forecast for the next few days, one page per day"""

    def __init__(self, session_factory: sessionmaker, browser_factory: Callable[[], ForecastBrowser],
                 url_template: str, latitude: float, longitude: float, days: int = 10):
        self.session_factory = session_factory
        self.browser_factory = browser_factory
        self.url_template = url_template
        self.latitude = latitude
        self.longitude = longitude
        self.days = days

    def build_url(self, forecast_day: date) -> str:
        return self.url_template.format(
            lat=self.latitude, lon=self.longitude, date=forecast_day.isoformat()
        )

    def scrape(self, today: date) -> ScrapeResult:
        """
        Fetch and store the forecast for days 1..N after today

        Skipped entirely when a forecast with today's run timestamp is
        stored. A day that fails is logged and left out; the other days
        still run.

        Returns:
            ScrapeResult with the total entries saved and the failed dates
        """
        run_timestamp = datetime.combine(today, time.min)

        with session_scope(self.session_factory) as db:
            repo = WeatherRepository(db)

            if repo.forecast_run_exists(run_timestamp):
                logger.info("Forecast for today already exists, skipping")
                return ScrapeResult(status=STATUS_SKIPPED)

            logger.info(f"Collecting {self.days}-day forecast data...")
            browser = self.browser_factory()
            result = ScrapeResult(status=STATUS_COMPLETED)

            try:
                for offset in range(1, self.days + 1):
                    forecast_day = today + timedelta(days=offset)
                    url = self.build_url(forecast_day)

                    try:
                        logger.info(f"Scraping forecast for {forecast_day}")
                        table_html = browser.fetch_table_html(url)

                        parsed = parse_forecast_table(table_html, forecast_day, run_timestamp)
                        if parsed.total_rows == 0:
                            logger.warning(f"No forecast rows found for {forecast_day}")
                            continue

                        result.skipped_rows += parsed.skipped_rows
                        day_saved = 0
                        for entry in parsed.records:
                            if repo.insert_forecast(entry):
                                day_saved += 1
                                result.saved += 1

                        logger.info(f"Saved {day_saved} forecast entries for {forecast_day}")
                    except Exception:
                        logger.exception(f"Failed to scrape forecast for {forecast_day}")
                        result.failed.append(forecast_day.isoformat())

                logger.info(
                    f"Forecast scraping completed. Total saved: {result.saved}, "
                    f"rows skipped: {result.skipped_rows}, days failed: {len(result.failed)}"
                )
            finally:
                browser.close()

            return result

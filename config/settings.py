from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from typing import List
import warnings


class Settings(BaseSettings):
    """Application configuration settings"""

    # Database (required, no default)
    DATABASE_URL: str = Field(min_length=1)

    # Weather stations
    STATION_IDS: List[str] = ["KWABLAIN153", "KWABLAIN126"]
    STATION_HISTORY_URL: str = (
        "https://www.wunderground.com/dashboard/pws/{station_id}/table/{date}/{date}/daily"
    )

    # Forecast
    FORECAST_URL: str = "https://www.wunderground.com/hourly/us/wa/blaine/{lat},{lon}/date/{date}"
    FORECAST_LAT: float = 48.99
    FORECAST_LON: float = -122.75
    FORECAST_DAYS: int = Field(default=10, ge=1)
    FORECAST_WAIT_TIMEOUT: float = Field(default=15.0, gt=0)
    BROWSER_HEADLESS: bool = True

    # HTTP
    USER_AGENT: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/91.0.4472.124 Safari/537.36"
    HTTP_TIMEOUT: float = 30.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Path = Path("./logs/weather_monitor.log")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields in .env
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._validate_settings()

    def _validate_settings(self):
        """Warn about configuration that is valid but probably unintended"""
        if not self.STATION_IDS:
            warnings.warn("STATION_IDS is empty. No station data will be collected.")

        if not self.BROWSER_HEADLESS:
            warnings.warn("BROWSER_HEADLESS is off. Chrome needs a display to run.")

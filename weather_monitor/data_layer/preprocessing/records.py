from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Union

# ScrapeResult.status values
STATUS_COMPLETED = "completed"
STATUS_SKIPPED = "skipped"  # data for the period already stored
STATUS_NO_ROWS = "no_rows"
STATUS_FAILED = "failed"


@dataclass
class StationReading:
    station_id: str
    timestamp: datetime
    temperature: Decimal
    humidity: int


@dataclass
class ForecastEntry:
    run_timestamp: datetime
    forecast_date: datetime
    temp: int
    precip: int
    humidity: int


@dataclass
class ParsedTable:
    """Rows parsed out of one HTML table"""
    records: List[Union[StationReading, ForecastEntry]] = field(default_factory=list)
    total_rows: int = 0
    skipped_rows: int = 0


@dataclass
class ScrapeResult:
    """Outcome of one scrape-and-store operation"""
    status: str
    saved: int = 0
    skipped_rows: int = 0
    failed: List[str] = field(default_factory=list)

    @property
    def saved_any(self) -> bool:
        return self.saved > 0

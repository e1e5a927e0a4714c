"""
Parsers for the Weather Underground HTML tables

Both tables drift in format from time to time, so a row that does not parse
is skipped and counted rather than treated as an error.
"""
import re
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Union

from bs4 import BeautifulSoup

from weather_monitor.data_layer.preprocessing.records import ForecastEntry, ParsedTable, StationReading

STATION_ROW_SELECTOR = "table[class*='history-table'] tbody tr"
FORECAST_ROW_SELECTOR = "tbody tr"

# "6 pm", "12:30 AM", "1230pm"
TIME_LABEL_PATTERN = re.compile(r"(\d{1,2})\s*:?\s*(\d{2})?\s*(am|pm)", re.IGNORECASE)
# "6:00 AM", "18:05", "18:05:30"
CLOCK_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?(?:\s*([ap])\.?m\.?)?$", re.IGNORECASE)


def parse_time_label(text: str) -> str:
    """
    Convert a 12-hour time label to a 24-hour "HH:MM" string

    Text without a recognisable time yields "00:00".
    """
    match = TIME_LABEL_PATTERN.search(text)
    if not match:
        return "00:00"

    hour = int(match.group(1))
    minute = int(match.group(2)) if match.group(2) else 0
    meridiem = match.group(3).lower()

    if meridiem == "pm" and hour != 12:
        hour += 12
    if meridiem == "am" and hour == 12:
        hour = 0

    return f"{hour:02d}:{minute:02d}"


def parse_clock_time(text: str) -> Optional[time]:
    """Parse a time of day such as "6:00 AM" or "18:05", None if invalid"""
    match = CLOCK_TIME_PATTERN.match(text.strip())
    if not match:
        return None

    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3)) if match.group(3) else 0
    meridiem = match.group(4)

    if meridiem:
        if not 1 <= hour <= 12:
            return None
        hour = hour % 12 + (12 if meridiem.lower() == "p" else 0)

    if hour > 23 or minute > 59 or second > 59:
        return None
    return time(hour, minute, second)


def _strip(text: str, *suffixes: str) -> str:
    for suffix in suffixes:
        text = text.replace(suffix, "")
    return text.strip()


def _parse_decimal(text: str) -> Optional[Decimal]:
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def _parse_int(text: str) -> Optional[int]:
    try:
        return int(text)
    except ValueError:
        return None


def _row_cells(row) -> List[str]:
    return [td.get_text().strip() for td in row.find_all("td", recursive=False)]


def parse_station_table(html: Union[str, bytes], station_id: str, day: date) -> ParsedTable:
    """
    Parse the daily history table of a personal weather station

    Cells used: 0 time, 1 temperature (°F), 3 humidity (%).

    Args:
        html: Full page HTML, raw bytes are decoded using the page's declared charset
        station_id: Station the page belongs to
        day: Date the table covers

    Returns:
        ParsedTable of StationReading records
    """
    soup = BeautifulSoup(html, 'html.parser')
    rows = soup.select(STATION_ROW_SELECTOR)
    parsed = ParsedTable(total_rows=len(rows))

    for row in rows:
        cells = _row_cells(row)
        if len(cells) < 4:
            parsed.skipped_rows += 1
            continue

        clock = parse_clock_time(cells[0])
        temperature = _parse_decimal(_strip(cells[1], "°F"))
        humidity = _parse_int(_strip(cells[3], "%"))

        if clock is None or temperature is None or humidity is None:
            parsed.skipped_rows += 1
            continue

        parsed.records.append(StationReading(
            station_id=station_id,
            timestamp=datetime.combine(day, clock),
            temperature=temperature,
            humidity=humidity,
        ))

    return parsed


def parse_forecast_table(html: str, forecast_day: date, run_timestamp: datetime) -> ParsedTable:
    """
    Parse the outer HTML of the hourly forecast table

    Cells used: 0 hour label, 2 temperature, 4 precipitation chance, 8 humidity.
    """
    soup = BeautifulSoup(html, 'html.parser')
    rows = soup.select(FORECAST_ROW_SELECTOR)
    parsed = ParsedTable(total_rows=len(rows))

    for row in rows:
        cells = _row_cells(row)
        if len(cells) < 9:
            parsed.skipped_rows += 1
            continue

        hour, minute = (int(part) for part in parse_time_label(cells[0]).split(":"))
        temp = _parse_int(_strip(cells[2], "°F", "°"))
        precip = _parse_int(_strip(cells[4], "%"))
        humidity = _parse_int(_strip(cells[8], "%"))

        if hour > 23 or minute > 59 or temp is None or precip is None or humidity is None:
            parsed.skipped_rows += 1
            continue

        parsed.records.append(ForecastEntry(
            run_timestamp=run_timestamp,
            forecast_date=datetime.combine(forecast_day, time(hour, minute)),
            temp=temp,
            precip=precip,
            humidity=humidity,
        ))

    return parsed

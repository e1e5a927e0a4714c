import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict
from sqlalchemy import Table, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from weather_monitor.data_layer.preprocessing.records import ForecastEntry, StationReading
from weather_monitor.data_layer.storage.models import ForecastRecord, WeatherStationRecord

logger = logging.getLogger(__name__)


class WeatherRepository:
    """Handle database operations for station readings and forecasts"""

    def __init__(self, db: Session):
        self.db = db

    def station_readings_exist(self, station_id: str, day: date) -> bool:
        """Check whether any reading is stored for the station on that calendar day"""
        start = datetime.combine(day, time.min)
        stmt = (
            select(WeatherStationRecord.id)
            .where(
                WeatherStationRecord.station_id == station_id,
                WeatherStationRecord.timestamp >= start,
                WeatherStationRecord.timestamp < start + timedelta(days=1),
            )
            .limit(1)
        )
        return self.db.execute(stmt).first() is not None

    def forecast_run_exists(self, run_timestamp: datetime) -> bool:
        """Check whether a forecast scrape was already stored for this run timestamp"""
        stmt = (
            select(ForecastRecord.id)
            .where(ForecastRecord.timestamp == run_timestamp)
            .limit(1)
        )
        return self.db.execute(stmt).first() is not None

    def insert_station_reading(self, reading: StationReading) -> bool:
        """
        Insert one station reading and commit it

        Returns:
            True if a row was written, False if it already existed
        """
        return self._insert(WeatherStationRecord.__table__, {
            "station_id": reading.station_id,
            "timestamp": reading.timestamp,
            "temperature": reading.temperature,
            "humidity": reading.humidity,
        })

    def insert_forecast(self, entry: ForecastEntry) -> bool:
        """
        Insert one forecast entry and commit it

        Forecasts are deduplicated per run through forecast_run_exists, so
        repeated hours within a run (DST fall-back, unreadable labels) are
        all kept.

        Returns:
            True once the row is written
        """
        return self._insert(ForecastRecord.__table__, {
            "timestamp": entry.run_timestamp,
            "forecast_date": entry.forecast_date,
            "temp": entry.temp,
            "precip": entry.precip,
            "humidity": entry.humidity,
        })

    def _insert(self, table: Table, values: Dict[str, Any]) -> bool:
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(table).values(**values).on_conflict_do_nothing()
        elif dialect == "sqlite":
            stmt = sqlite_insert(table).values(**values).on_conflict_do_nothing()
        else:
            stmt = insert(table).values(**values)

        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except IntegrityError:
            # Duplicate on a dialect without ON CONFLICT support
            self.db.rollback()
            return False
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error inserting into {table.name}: {str(e)}")
            raise

        return result.rowcount > 0

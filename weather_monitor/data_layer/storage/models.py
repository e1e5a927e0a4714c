from sqlalchemy import Column, Integer, Numeric, String, DateTime, UniqueConstraint, func
from config.database import Base


class WeatherStationRecord(Base):
    """Observation from a personal weather station"""
    __tablename__ = 'weather_stations'
    __table_args__ = (
        UniqueConstraint('station_id', 'timestamp', name='uq_weather_stations_station_timestamp'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    station_id = Column(String(20), nullable=False)
    timestamp = Column(DateTime, server_default=func.now())

    temperature = Column(Numeric(5, 2))  # °F
    humidity = Column(Integer)  # %

    # Never written by the scraper, kept for schema compatibility
    wind_speed = Column(Numeric(5, 2))
    wind_direction = Column(String(10))
    pressure = Column(Numeric(6, 2))
    precipitation = Column(Numeric(5, 2))
    conditions = Column(String(100))


class ForecastRecord(Base):
    """Hourly forecast value, tagged with the day the forecast was scraped"""
    __tablename__ = 'forecasts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, server_default=func.now())  # run timestamp
    forecast_date = Column(DateTime)

    temp = Column(Integer)  # °F
    precip = Column(Integer)  # precipitation probability, %
    humidity = Column(Integer)  # %


class WeatherComparisonRecord(Base):
    """Station-pair deltas. Nothing populates this table yet."""
    __tablename__ = 'weather_comparisons'

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, server_default=func.now())

    station_1_temp = Column(Numeric(5, 2))
    station_2_temp = Column(Numeric(5, 2))
    temp_difference = Column(Numeric(5, 2))
    station_1_humidity = Column(Integer)
    station_2_humidity = Column(Integer)
    humidity_difference = Column(Integer)
    station_1_wind = Column(Numeric(5, 2))
    station_2_wind = Column(Numeric(5, 2))
    wind_difference = Column(Numeric(5, 2))

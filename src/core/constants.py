"""Core constants used across Atlas modules.

This module centralizes fixed configuration for ingest, aggregation,
caching, and rendering consumers. Keeping values here avoids magic
literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".atlas")
DEFAULT_SOURCE_URI = "./Motor_Vehicle_Collisions_-_Crashes.csv"
CACHE_DIR_NAME = "cache"
CACHE_KEY = "nyc_crash_data_v1"
CACHE_TTL_MS = 7 * 24 * 60 * 60 * 1000
CACHE_QUOTA_BYTES = 256 * 1024 * 1024

DEFAULT_SAMPLING_RATIO = 10
DEFAULT_BATCH_SIZE = 8192
ESTIMATED_TOTAL_ROWS = 2_200_000
PROGRESS_INTERVAL_ROWS = 50_000
PROGRESS_PARSE_START = 5.0
PROGRESS_PARSE_SPAN = 70.0
PROGRESS_PARSE_CEILING = 75.0
PROGRESS_CACHE_HIT = 50.0
PROGRESS_PROCESSING = 80.0
PROGRESS_AGGREGATING = 85.0
PROGRESS_CACHING = 95.0
PROGRESS_COMPLETE = 100.0

SEVERITY_WEIGHT_FATALITY = 10
SEVERITY_WEIGHT_INJURY = 1
SEVERITY_PROPERTY = "property"
SEVERITY_INJURY = "injury"
SEVERITY_FATAL = "fatal"
SEVERITY_TYPES = (SEVERITY_PROPERTY, SEVERITY_INJURY, SEVERITY_FATAL)
SEVERITY_FILTER_ALL = "all"

HEXBIN_RADIUS = 0.002
TOP_INTERSECTION_LIMIT = 10

NYC_MIN_LATITUDE = 40.4
NYC_MAX_LATITUDE = 41.0
NYC_MIN_LONGITUDE = -74.3
NYC_MAX_LONGITUDE = -73.6

DEFAULT_YEAR_MIN = 2012
DEFAULT_YEAR_MAX = 2025
FILTER_DEBOUNCE_SECONDS = 0.3

UNSPECIFIED_FACTOR = "Unspecified"
UNKNOWN_VEHICLE = "Unknown"
UNKNOWN_BOROUGH = "Unknown"
MAX_FACTOR_FIELDS = 5

COLUMN_COLLISION_ID = "COLLISION_ID"
COLUMN_CRASH_DATE = "CRASH DATE"
COLUMN_CRASH_TIME = "CRASH TIME"
COLUMN_LATITUDE = "LATITUDE"
COLUMN_LONGITUDE = "LONGITUDE"
COLUMN_BOROUGH = "BOROUGH"
COLUMN_ZIP_CODE = "ZIP CODE"
COLUMN_ON_STREET = "ON STREET NAME"
COLUMN_CROSS_STREET = "CROSS STREET NAME"
COLUMN_PERSONS_KILLED = "NUMBER OF PERSONS KILLED"
COLUMN_PERSONS_INJURED = "NUMBER OF PERSONS INJURED"
COLUMN_PEDESTRIANS_KILLED = "NUMBER OF PEDESTRIANS KILLED"
COLUMN_PEDESTRIANS_INJURED = "NUMBER OF PEDESTRIANS INJURED"
COLUMN_CYCLISTS_KILLED = "NUMBER OF CYCLIST KILLED"
COLUMN_CYCLISTS_INJURED = "NUMBER OF CYCLIST INJURED"
COLUMN_MOTORISTS_KILLED = "NUMBER OF MOTORIST KILLED"
COLUMN_MOTORISTS_INJURED = "NUMBER OF MOTORIST INJURED"
COLUMN_VEHICLE_TYPE = "VEHICLE TYPE CODE 1"
FACTOR_COLUMNS = tuple(
    f"CONTRIBUTING FACTOR VEHICLE {index}" for index in range(1, MAX_FACTOR_FIELDS + 1)
)
SOURCE_COLUMNS = (
    COLUMN_COLLISION_ID,
    COLUMN_CRASH_DATE,
    COLUMN_CRASH_TIME,
    COLUMN_LATITUDE,
    COLUMN_LONGITUDE,
    COLUMN_BOROUGH,
    COLUMN_ZIP_CODE,
    COLUMN_ON_STREET,
    COLUMN_CROSS_STREET,
    COLUMN_PERSONS_KILLED,
    COLUMN_PERSONS_INJURED,
    COLUMN_PEDESTRIANS_KILLED,
    COLUMN_PEDESTRIANS_INJURED,
    COLUMN_CYCLISTS_KILLED,
    COLUMN_CYCLISTS_INJURED,
    COLUMN_MOTORISTS_KILLED,
    COLUMN_MOTORISTS_INJURED,
    COLUMN_VEHICLE_TYPE,
    *FACTOR_COLUMNS,
)

DENSITY_PALETTE = (
    "#ffffcc",
    "#ffeda0",
    "#fed976",
    "#feb24c",
    "#fd8d3c",
    "#fc4e2a",
    "#e31a1c",
    "#bd0026",
    "#800026",
)
SEVERITY_PALETTE = ("#edf8e9", "#bae4b3", "#74c476", "#31a354", "#006d2c")

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
DAY_NAMES_SHORT = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MONTH_NAMES = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)
RUSH_HOURS = (16, 17, 18)

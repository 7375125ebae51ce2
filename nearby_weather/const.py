"""
Constants and configuration settings for NearbyWeather.
"""
import os
from typing import Dict, Tuple
from dotenv import load_dotenv
import pytz

# Load environment variables
load_dotenv()

# Base directories
PROJECT_ROOT = os.getcwd()
DATA_DIR = os.getenv('NEARBY_WEATHER_DATA_DIR', os.path.join(PROJECT_ROOT, 'data'))
LOG_DIR = os.getenv('NEARBY_WEATHER_LOG_DIR', os.path.join(PROJECT_ROOT, 'logs'))

APP_TITLE = "NearbyWeather"


class Config:
    """Application configuration read from the environment."""
    TELEGRAM_BOT_TOKEN: str = os.getenv('TELEGRAM_BOT_TOKEN', '')
    DEFAULT_LANGUAGE: str = os.getenv('DEFAULT_LANGUAGE', 'en')
    TIMEZONE: str = os.getenv('TIMEZONE', 'Europe/Berlin')
    PREFERENCES_FILE: str = os.getenv(
        'PREFERENCES_FILE', os.path.join(DATA_DIR, 'preferences.json')
    )
    WEATHER_SNAPSHOT_FILE: str = os.getenv(
        'WEATHER_SNAPSHOT_FILE', os.path.join(DATA_DIR, 'weather_snapshot.json')
    )


# Define timezone constant
try:
    APP_TZ = pytz.timezone(Config.TIMEZONE)
except pytz.UnknownTimeZoneError:
    APP_TZ = pytz.utc


class Weather:
    """Weather glyphs and condition code mappings."""
    CONDITION_EMOJIS: Dict[range, str] = {
        range(200, 300): '⛈',  # Thunderstorm
        range(300, 400): '🌦',  # Drizzle
        range(500, 600): '🌧',  # Rain
        range(600, 700): '❄️',  # Snow
        range(700, 800): '🌫',  # Atmosphere
        range(800, 801): '☀️',  # Clear
        range(801, 900): '☁️',  # Clouds
        range(900, 903): '🌪',  # Extreme
        range(903, 904): '🥶',  # Cold
        range(904, 905): '🥵',  # Hot
        range(905, 906): '💨',  # Windy
        range(906, 907): '🌨',  # Hail
    }

    TEMPERATURE_GLYPH = '🌡'
    CLOUD_COVERAGE_GLYPH = '☁️'
    HUMIDITY_GLYPH = '💧'
    WINDSPEED_GLYPH = '🎏'

    KELVIN_OFFSET = 273.15
    MPS_TO_KMH = 3.6
    MPS_TO_MPH = 2.23694


class MapDefaults:
    """Map presentation defaults."""
    REGION_SPAN_METERS: float = 25000.0
    ANNOTATION_REUSE_IDENTIFIER: str = 'nearby_weather.annotation'
    CALLOUT_OFFSET: Tuple[int, int] = (-5, 5)


class CallbackData:
    """Inline keyboard callback data prefixes."""
    PREFIX = 'nw'
    REFRESH = 'nw:refresh'
    SORT = 'nw:sort'
    SORT_KEY = 'nw:sort:'
    SELECT = 'nw:select:'
    CANCEL = 'nw:cancel'
    PATTERN = r'^nw:'

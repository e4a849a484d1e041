"""
Time Utilities

Capture timestamps in the airport's timezone and the daily file names
used by the JSON sink (e.g. "2025-March-16.json").
"""

from datetime import datetime
import pytz

from scraper.errors import ConfigError


def get_timezone(timezone='Europe/Dublin'):
    """
    Resolve a timezone name.

    Raises:
        ConfigError: If the name is not a known tz database zone
    """
    try:
        return pytz.timezone(timezone)
    except pytz.UnknownTimeZoneError as e:
        raise ConfigError(f"Unknown timezone '{timezone}'") from e


def now_in_timezone(timezone='Europe/Dublin'):
    """
    Get the current time as an aware datetime.

    Args:
        timezone (str): Timezone string (default: 'Europe/Dublin')

    Returns:
        datetime: Current time in that timezone
    """
    return datetime.now(get_timezone(timezone))


def daily_file_name(moment):
    """
    Build the per-day JSON file name for a date or datetime.

    The day is not zero padded: 2025-03-06 -> "2025-March-6.json".
    """
    return f"{moment.year}-{moment.strftime('%B')}-{moment.day}.json"

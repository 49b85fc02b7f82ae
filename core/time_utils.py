"""
Time & Time Zone Utilities
==========================

Helpers for the 24-hour "HH:MM" (optionally "z"-suffixed) strings used by
duty records, plus time zone resolution for IANA names and airport codes.

Airport codes are resolved with airportsdata (~7,800 IATA and ICAO airports);
offsets come from pytz so that DST is honoured for the reference date.
"""

from datetime import date, datetime, timedelta
from typing import Optional
import logging

import airportsdata
import pytz

logger = logging.getLogger(__name__)

# Load global airport databases once
_IATA_DB = airportsdata.load('IATA')
_ICAO_DB = airportsdata.load('ICAO')

TIME_FORMAT = "%H:%M"


def parse_time(time_string: Optional[str]) -> Optional[datetime]:
    """
    Parse "HH:MM" / "HH:MMz" into a datetime on the 1900-01-01 reference date.

    Returns None for empty or malformed input.
    """
    if not time_string:
        return None
    clean = time_string.strip().rstrip("zZ").strip()
    try:
        return datetime.strptime(clean, TIME_FORMAT)
    except ValueError:
        return None


def format_time(value: datetime) -> str:
    return value.strftime(TIME_FORMAT)


def hours_between(start_time: Optional[str], end_time: Optional[str]) -> float:
    """
    Hours from start to end, wrapping past midnight when end < start.

    Unparseable input yields 0.0.
    """
    start = parse_time(start_time)
    end = parse_time(end_time)
    if start is None or end is None:
        return 0.0
    if end < start:
        end += timedelta(days=1)
    return (end - start).total_seconds() / 3600


def add_hours(time_string: str, hours: float) -> str:
    """Add hours to a clock time, wrapping at midnight"""
    value = parse_time(time_string)
    if value is None:
        return time_string
    return format_time(value + timedelta(hours=hours))


def format_hours_and_minutes(decimal_hours: float) -> str:
    """13.5 -> "13h 30m", 0.75 -> "45m", -2.0 -> "-2h" """
    sign = "-" if decimal_hours < 0 else ""
    total_minutes = int(round(abs(decimal_hours) * 60))
    hours, minutes = divmod(total_minutes, 60)

    if hours == 0:
        return f"{sign}{minutes}m"
    if minutes == 0:
        return f"{sign}{hours}h"
    return f"{sign}{hours}h {minutes}m"


def resolve_timezone(code: Optional[str]) -> Optional[str]:
    """
    Resolve an IANA time zone name, IATA code or ICAO code to an IANA name.

    Returns None if nothing matches.
    """
    if not code:
        return None
    code = code.strip()
    if code in pytz.all_timezones_set:
        return code

    upper = code.upper()
    entry = None
    if len(upper) == 3:
        entry = _IATA_DB.get(upper)
    elif len(upper) == 4:
        entry = _ICAO_DB.get(upper)
    if entry and entry.get('tz'):
        return entry['tz']
    return None


def timezone_offset_hours(code: Optional[str], reference_date: Optional[date] = None) -> int:
    """
    Whole-hour UTC offset of a time zone or airport on the reference date.

    Partial-hour offsets are truncated towards zero. Unknown codes fall back to
    UTC (0) with a warning.
    """
    tz_name = resolve_timezone(code)
    if tz_name is None:
        logger.warning(f"Unknown time zone or airport '{code}', assuming UTC")
        return 0

    if reference_date is None:
        reference_date = datetime.now(pytz.utc).date()
    # Midday avoids the DST transition hours
    reference = datetime(reference_date.year, reference_date.month, reference_date.day, 12, 0)
    offset = pytz.timezone(tz_name).utcoffset(reference)
    return int(offset.total_seconds() / 3600)


def timezone_difference_hours(
    from_code: Optional[str],
    to_code: Optional[str],
    reference_date: Optional[date] = None
) -> int:
    """
    Offset of the destination minus offset of the origin (positive = eastward)
    """
    return (
        timezone_offset_hours(to_code, reference_date)
        - timezone_offset_hours(from_code, reference_date)
    )


def convert_to_local_time(
    utc_time: str,
    code: Optional[str],
    reference_date: Optional[date] = None
) -> str:
    """
    Convert a UTC "HH:MM" time to local "HH:MM" for a zone or airport.

    Returns the input unchanged when it cannot be parsed.
    """
    value = parse_time(utc_time)
    if value is None:
        logger.debug(f"Failed to parse UTC time: {utc_time}")
        return utc_time
    offset = timezone_offset_hours(code, reference_date)
    local = format_time(value + timedelta(hours=offset))
    logger.debug(f"Converted {utc_time} to {local} local ({code}, offset {offset}h)")
    return local


def minutes_of_day(time_string: Optional[str]) -> Optional[int]:
    value = parse_time(time_string)
    if value is None:
        return None
    return value.hour * 60 + value.minute


def window_overlap_hours(
    start_time: Optional[str],
    duration_hours: float,
    window_start_hour: int,
    window_end_hour: int
) -> float:
    """
    Hours of a period falling inside a daily clock window.

    The period starts at start_time and may run past midnight. A window
    whose end is not after its start wraps midnight (23 -> 7). Every daily
    occurrence of the window the period touches is counted.
    """
    start = minutes_of_day(start_time)
    if start is None or duration_hours <= 0:
        return 0.0
    end = start + duration_hours * 60

    window_length = (window_end_hour - window_start_hour) % 24 * 60
    overlap = 0.0
    day = -1
    while day * 1440 < end:
        window_start = day * 1440 + window_start_hour * 60
        window_end = window_start + window_length
        overlap += max(0.0, min(end, window_end) - max(start, window_start))
        day += 1
    return overlap / 60

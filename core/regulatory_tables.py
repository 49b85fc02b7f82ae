"""
UK CAA Regulatory Tables
========================

Static lookup tables for the maximum FDP calculation:
- Table 1: acclimatisation state by time zone difference and elapsed time
- Table 2: maximum daily FDP, acclimatised crew
- Table 3: maximum daily FDP, unknown state of acclimatisation
- Rostered extension table (ORO.FTL.205(d))
- Table 4: maximum daily FDP with extension
- In-flight rest extension table (CS FTL.1.205(c))
- Absolute duty/flight hour limits and standby rules

Every band table is an ordered tuple of (upper_threshold, value) pairs
scanned with first_at_or_above(). Report-time bands are keyed on minutes
past local midnight.

References: UK CAA Regulation 965/2012 ORO.FTL.105, ORO.FTL.205, CS FTL.1.205
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, TypeVar
import logging

from models.data_models import AcclimatisationState, RestFacilityClass
from core.time_utils import minutes_of_day

logger = logging.getLogger(__name__)

T = TypeVar('T')

MINIMUM_FDP_HOURS = 9.0
NOT_PERMITTED = 0.0

INFINITY = float('inf')


def first_at_or_above(
    table: Sequence[Tuple[float, T]],
    key: float,
    default: Optional[T] = None,
    strict: bool = False
) -> Optional[T]:
    """
    Return the value of the first (threshold, value) pair whose threshold
    is >= key (or > key when strict). Thresholds must be ascending.
    """
    for threshold, value in table:
        if key < threshold or (not strict and key == threshold):
            return value
    return default


def _hhmm(hours: int, minutes: int) -> int:
    return hours * 60 + minutes


# ============================================================================
# TABLE 1 - ACCLIMATISATION
# ============================================================================

# Elapsed hours since reporting at home base -> column
# <48, 48-71:59, 72-95:59, 96-119:59, >=120
ACCLIMATISATION_ELAPSED_COLUMNS = (
    (48.0, 0),
    (72.0, 1),
    (96.0, 2),
    (120.0, 3),
    (INFINITY, 4),
)

# Time zone difference (exclusive upper bound) -> states per elapsed column
# Differences of 12h or more have no row: state unknown
ACCLIMATISATION_TABLE = (
    (4.0, "BDDDD"),
    (6.0, "BXDDD"),
    (9.0, "BXXDD"),
    (12.0, "BXXXD"),
)


def determine_acclimatisation_state(
    time_zone_difference: float,
    elapsed_hours: float
) -> AcclimatisationState:
    row = first_at_or_above(ACCLIMATISATION_TABLE, abs(time_zone_difference), strict=True)
    if row is None:
        return AcclimatisationState.UNKNOWN
    column = first_at_or_above(ACCLIMATISATION_ELAPSED_COLUMNS, elapsed_hours, strict=True)
    return AcclimatisationState(row[column])


# ============================================================================
# TABLE 2 - ACCLIMATISED FDP
# ============================================================================

# Columns: 1-2, 3, 4, 5, 6, 7, 8, 9, 10+ sectors
_LATE_ROW = (11.0, 10.5, 10.0, 9.5, 9.0, 9.0, 9.0, 9.0, 9.0)  # 1700-0459

ACCLIMATISED_FDP_TABLE = (
    (_hhmm(4, 59), _LATE_ROW),
    (_hhmm(5, 14), (12.0, 11.5, 11.0, 10.5, 10.0, 9.5, 9.0, 9.0, 9.0)),
    (_hhmm(5, 29), (12.25, 11.75, 11.25, 10.75, 10.25, 9.75, 9.25, 9.0, 9.0)),
    (_hhmm(5, 44), (12.5, 12.0, 11.5, 11.0, 10.5, 10.0, 9.5, 9.0, 9.0)),
    (_hhmm(5, 59), (12.75, 12.25, 11.75, 11.25, 10.75, 10.25, 9.75, 9.25, 9.0)),
    (_hhmm(13, 29), (13.0, 12.5, 12.0, 11.5, 11.0, 10.5, 10.0, 9.5, 9.0)),
    (_hhmm(13, 59), (12.75, 12.25, 11.75, 11.25, 10.75, 10.25, 9.75, 9.25, 9.0)),
    (_hhmm(14, 29), (12.5, 12.0, 11.5, 11.0, 10.5, 10.0, 9.5, 9.0, 9.0)),
    (_hhmm(14, 59), (12.25, 11.75, 11.25, 10.75, 10.25, 9.75, 9.25, 9.0, 9.0)),
    (_hhmm(15, 29), (12.0, 11.5, 11.0, 10.5, 10.0, 9.5, 9.0, 9.0, 9.0)),
    (_hhmm(15, 59), (11.75, 11.25, 10.75, 10.25, 9.75, 9.25, 9.0, 9.0, 9.0)),
    (_hhmm(16, 29), (11.5, 11.0, 10.5, 10.0, 9.5, 9.0, 9.0, 9.0, 9.0)),
    (_hhmm(16, 59), (11.25, 10.75, 10.25, 9.75, 9.25, 9.0, 9.0, 9.0, 9.0)),
    (_hhmm(23, 59), _LATE_ROW),
)


def _acclimatised_column(sectors: int) -> int:
    if sectors <= 2:
        return 0
    return min(sectors - 2, 8)


def lookup_base_fdp(local_report_time: str, sectors: int) -> float:
    """Table 2 value for a local report time; the regulatory minimum if unparseable"""
    minutes = minutes_of_day(local_report_time)
    if minutes is None:
        logger.warning(f"Unparseable report time '{local_report_time}', using minimum FDP")
        return MINIMUM_FDP_HOURS
    row = first_at_or_above(ACCLIMATISED_FDP_TABLE, minutes)
    return row[_acclimatised_column(sectors)]


# ============================================================================
# TABLE 3 - UNKNOWN ACCLIMATISATION
# ============================================================================

UNKNOWN_ACCLIMATISATION_FDP_TABLE = (
    (2, 11.0),
    (3, 10.5),
    (4, 10.0),
    (5, 9.5),
    (8, 9.0),
)


def lookup_unknown_acclimatised_fdp(sectors: int) -> float:
    """
    Table 3 value by sector count.

    Returns NOT_PERMITTED (0.0) for 9+ sectors or a non-positive count.
    """
    if sectors < 1:
        return NOT_PERMITTED
    return first_at_or_above(UNKNOWN_ACCLIMATISATION_FDP_TABLE, sectors, default=NOT_PERMITTED)


# ============================================================================
# ROSTERED EXTENSION
# ============================================================================

# Columns: 1-2, 3, 4, 5 sectors. None = extension not available
ROSTERED_EXTENSION_TABLE = (
    (_hhmm(6, 14), None),
    (_hhmm(6, 29), (13.25, 12.75, 12.25, 11.75)),
    (_hhmm(6, 44), (13.5, 13.0, 12.5, 12.0)),
    (_hhmm(6, 59), (13.75, 13.25, 12.75, 12.25)),
    (_hhmm(13, 29), (14.0, 13.5, 13.0, 12.5)),
    (_hhmm(13, 59), (13.75, 13.25, 12.75, None)),
    (_hhmm(14, 29), (13.5, 13.0, 12.5, None)),
    (_hhmm(23, 59), None),
)

ROSTERED_EXTENSION_MAX_SECTORS = 5


def lookup_rostered_extension_fdp(local_report_time: str, sectors: int) -> Optional[float]:
    """Extended FDP for the report time and sectors, or None if not available"""
    minutes = minutes_of_day(local_report_time)
    if minutes is None or sectors > ROSTERED_EXTENSION_MAX_SECTORS:
        return None
    row = first_at_or_above(ROSTERED_EXTENSION_TABLE, minutes)
    if row is None:
        return None
    return row[_acclimatised_column(sectors)]


# ============================================================================
# TABLE 4 - EXTENDED FDP
# ============================================================================

# Columns: 1-2, 3, 4, 5 sectors. None = extension not allowed.
# Reporting 19:00-05:59 is never eligible.
EXTENDED_FDP_TABLE = (
    (_hhmm(5, 59), None),
    (_hhmm(6, 14), None),
    (_hhmm(6, 29), (13.25, 12.75, 12.25, 11.75)),
    (_hhmm(6, 44), (13.5, 13.0, 12.5, 12.0)),
    (_hhmm(6, 59), (13.75, 13.25, 12.75, 12.25)),
    (_hhmm(13, 29), (14.0, 13.5, 13.0, 12.5)),
    (_hhmm(13, 59), (13.75, 13.25, 12.75, 12.25)),
    (_hhmm(14, 29), (13.5, 13.0, 12.5, 12.0)),
    (_hhmm(14, 59), (13.25, 12.75, 12.25, 11.75)),
    (_hhmm(15, 29), (13.0, 12.5, 12.0, 11.5)),
    (_hhmm(15, 59), (12.75, 12.25, None, None)),
    (_hhmm(16, 29), (12.5, 12.0, None, None)),
    (_hhmm(16, 59), (12.25, 11.75, None, None)),
    (_hhmm(17, 29), (12.0, None, None, None)),
    (_hhmm(17, 59), (11.75, None, None, None)),
    (_hhmm(18, 29), (11.5, None, None, None)),
    (_hhmm(18, 59), (11.25, None, None, None)),
    (_hhmm(23, 59), None),
)

EXTENDED_FDP_MAX_SECTORS = 5


def lookup_extended_fdp(local_report_time: str, sectors: int) -> Optional[float]:
    """Table 4 maximum FDP with extension, or None when not allowed"""
    minutes = minutes_of_day(local_report_time)
    if minutes is None or sectors > EXTENDED_FDP_MAX_SECTORS:
        return None
    row = first_at_or_above(EXTENDED_FDP_TABLE, minutes)
    if row is None:
        return None
    return row[_acclimatised_column(sectors)]


# ============================================================================
# IN-FLIGHT REST EXTENSION
# ============================================================================

# (is_long_flight, additional_crew) -> max FDP per rest facility class
INFLIGHT_REST_EXTENSION_TABLE = {
    (False, 1): {
        RestFacilityClass.CLASS_1: 16.0,
        RestFacilityClass.CLASS_2: 15.0,
        RestFacilityClass.CLASS_3: 14.0,
    },
    (False, 2): {
        RestFacilityClass.CLASS_1: 17.0,
        RestFacilityClass.CLASS_2: 16.0,
        RestFacilityClass.CLASS_3: 15.0,
    },
    # Up to 2 sectors with one sector over 9h flight time
    (True, 1): {
        RestFacilityClass.CLASS_1: 17.0,
        RestFacilityClass.CLASS_2: 16.0,
        RestFacilityClass.CLASS_3: 15.0,
    },
    (True, 2): {
        RestFacilityClass.CLASS_1: 18.0,
        RestFacilityClass.CLASS_2: 17.0,
        RestFacilityClass.CLASS_3: 16.0,
    },
}


def lookup_inflight_rest_extension_fdp(
    rest_class: RestFacilityClass,
    additional_crew: int,
    is_long_flight: bool
) -> Optional[float]:
    """Extended FDP with in-flight rest, or None when the crew count has no entry"""
    row = INFLIGHT_REST_EXTENSION_TABLE.get((bool(is_long_flight), additional_crew))
    if row is None:
        return None
    return row.get(RestFacilityClass.from_value(rest_class))


# ============================================================================
# ABSOLUTE LIMITS & STANDBY RULES
# ============================================================================

@dataclass(frozen=True)
class AbsoluteLimits:
    """ORO.FTL.210 cumulative duty and flight time limits"""
    duty_hours_7_days: float = 60.0
    duty_hours_14_days: float = 110.0
    duty_hours_28_days: float = 190.0
    duty_hours_12_months: float = 2000.0
    flight_hours_28_days: float = 100.0
    flight_hours_calendar_year: float = 900.0
    flight_hours_12_months: float = 900.0


@dataclass(frozen=True)
class StandbyRules:
    """CS FTL.1.225 maximum standby durations"""
    airport_max_duration_hours: float = 16.0
    home_max_duration_hours: float = 16.0
    home_max_total_duty_hours: float = 16.0  # standby + FDP, discretion cannot exceed it


ABSOLUTE_LIMITS = AbsoluteLimits()
STANDBY_RULES = StandbyRules()

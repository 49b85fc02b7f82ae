"""
Cabin Crew In-Flight Rest Table
===============================

Maximum FDP by in-flight rest facility class and rest time available
(UK CAA CS FTL.1.205(c)). Each class is a piecewise step function: the
first threshold at or above the available rest time gives the FDP, and
rest beyond the last threshold saturates at the class ceiling.
"""

from typing import List, Optional

from models.data_models import RestFacilityClass
from core.regulatory_tables import first_at_or_above

# Rest time available (h) -> maximum FDP (h)
INFLIGHT_REST_TABLES = {
    RestFacilityClass.CLASS_1: (
        (1.5, 14.5),
        (1.75, 15.0),
        (2.0, 15.5),
        (2.25, 16.0),
        (2.58, 16.5),
        (3.0, 17.0),
        (3.42, 17.5),
        (3.83, 18.0),
    ),
    RestFacilityClass.CLASS_2: (
        (1.5, 14.5),
        (2.0, 15.0),
        (2.33, 15.5),
        (2.67, 16.0),
        (3.0, 16.5),
        (3.42, 17.0),
    ),
    RestFacilityClass.CLASS_3: (
        (1.5, 14.5),
        (2.33, 15.0),
        (2.67, 15.5),
        (3.0, 16.0),
    ),
}


def lookup_max_fdp(rest_class: Optional[RestFacilityClass], rest_time_available: float) -> float:
    """Maximum FDP for the facility class and rest time; 0.0 without a facility"""
    table = INFLIGHT_REST_TABLES.get(RestFacilityClass.from_value(rest_class))
    if table is None:
        return 0.0
    ceiling = table[-1][1]
    return first_at_or_above(table, rest_time_available, default=ceiling)


def available_rest_time_options(rest_class: Optional[RestFacilityClass]) -> List[float]:
    table = INFLIGHT_REST_TABLES.get(RestFacilityClass.from_value(rest_class), ())
    return [threshold for threshold, _ in table]


def format_rest_time(hours: float) -> str:
    """1.5 -> "1h 30m", 2.58 -> "2h 35m" """
    whole, minutes = divmod(int(round(hours * 60)), 60)
    return f"{whole}h {minutes}m"


def max_fdp_display(rest_class: Optional[RestFacilityClass], rest_time_available: float) -> str:
    """e.g. "Up to 14:30hr" """
    max_fdp = lookup_max_fdp(rest_class, rest_time_available)
    whole, minutes = divmod(int(round(max_fdp * 60)), 60)
    return f"Up to {whole}:{minutes:02d}hr"

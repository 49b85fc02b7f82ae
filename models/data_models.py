"""
data_models.py - Core Data Structures
======================================

Value objects for UK CAA FTL calculations: duty records, FDP calculation
input/result, fatigue risk, commander's discretion and usage analysis.

All structures are frozen dataclasses. They are created fresh for every
calculation and never mutated afterwards.
"""

from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Mapping, Optional, Tuple
from enum import Enum


# ============================================================================
# ENUMS
# ============================================================================

class PilotType(Enum):
    """Operation type the duty was flown under"""
    SINGLE_PILOT = "single-pilot"
    MULTI_PILOT = "multi-pilot"


class RestFacilityClass(Enum):
    """
    In-flight rest facility classification (UK CAA CS FTL.1.205)
    Class 1 allows the longest FDP ceiling, Class 3 the shortest
    """
    NONE = "none"
    CLASS_1 = "class_1"  # Bunk or flat bed in a separate compartment
    CLASS_2 = "class_2"  # Reclining seat with leg support, separate compartment
    CLASS_3 = "class_3"  # Reclining seat with leg support, passenger cabin

    @classmethod
    def from_value(cls, value) -> Optional['RestFacilityClass']:
        """
        Lenient conversion used at the engine boundary.

        Accepts enum members, "class_1", "class1", "Class 1" and "none".
        Returns None for empty or unrecognised values.
        """
        if value is None or isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace(" ", "").replace("_", "")
        return {
            "none": cls.NONE,
            "class1": cls.CLASS_1,
            "class2": cls.CLASS_2,
            "class3": cls.CLASS_3,
        }.get(key)

    @property
    def description(self) -> str:
        return {
            RestFacilityClass.NONE: "No dedicated rest facility available",
            RestFacilityClass.CLASS_1: "Bunk or flat bed in a separate compartment",
            RestFacilityClass.CLASS_2: "Reclining seat with leg support in a separate compartment",
            RestFacilityClass.CLASS_3: "Reclining seat with leg support in the passenger cabin",
        }[self]


class StandbyType(Enum):
    """Standby preceding the duty"""
    AIRPORT = "airport"  # All standby time counts towards FDP
    HOME = "home"        # FDP counts from report; long standby reduces the FDP


class SplitDutyAccommodation(Enum):
    """Rest accommodation used during a split duty break"""
    SUITABLE = "suitable"            # full break counts
    ACCOMMODATION = "accommodation"  # break capped at 6h, WOCL time excluded


class AcclimatisationState(Enum):
    """
    UK CAA ORO.FTL.105 Table 1 result
    """
    ACCLIMATISED_HOME_BASE = "B"   # acclimatised to home base time zone
    ACCLIMATISED_DEPARTURE = "D"   # acclimatised to current departure time zone
    UNKNOWN = "X"                  # state of acclimatisation unknown

    @property
    def description(self) -> str:
        return {
            AcclimatisationState.ACCLIMATISED_HOME_BASE: "Acclimatised to home base",
            AcclimatisationState.ACCLIMATISED_DEPARTURE: "Acclimatised to current departure",
            AcclimatisationState.UNKNOWN: "Unknown state of acclimatisation",
        }[self]


class FatigueRiskLevel(Enum):
    """Totally ordered fatigue risk: LOW < MEDIUM < HIGH"""
    LOW = 1
    MEDIUM = 2
    HIGH = 3

    def __lt__(self, other):
        if not isinstance(other, FatigueRiskLevel):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other):
        if not isinstance(other, FatigueRiskLevel):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other):
        if not isinstance(other, FatigueRiskLevel):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other):
        if not isinstance(other, FatigueRiskLevel):
            return NotImplemented
        return self.value >= other.value

    @property
    def description(self) -> str:
        return self.name.capitalize()


# ============================================================================
# DUTY RECORDS
# ============================================================================

@dataclass(frozen=True)
class DutyRecord:
    """
    One completed or planned duty, as produced by roster ingestion.

    Times are 24-hour "HH:MM" strings, optionally suffixed with "z".
    """
    flight_number: str
    date: date
    report_time: str
    takeoff_time: str
    landing_time: str
    duty_end_time: str
    flight_time: float  # hours
    duty_time: float    # hours
    pilot_type: PilotType = PilotType.MULTI_PILOT
    departure: str = ""
    arrival: str = ""
    pilot_count: int = 1  # including the analysed pilot


# ============================================================================
# FDP CALCULATION
# ============================================================================

@dataclass(frozen=True)
class FDPCalculationInput:
    """Everything the maximum FDP pipeline needs for one duty"""
    report_time: str
    sectors: int
    current_location_timezone: str       # IANA name or IATA/ICAO code
    previous_acclimatised_timezone: str  # IANA name or IATA/ICAO code
    duty_end_time: str = ""
    last_homebase_report_time: Optional[str] = None
    inflight_rest_facility: Optional[RestFacilityClass] = None
    additional_crew: int = 0
    delayed_reporting_notifications: Optional[Tuple[str, ...]] = None
    rostered_extension_used: bool = False
    commander_discretion_used: bool = False
    standby_start_time: Optional[str] = None
    standby_type: Optional[StandbyType] = None
    flight_times: Optional[Tuple[float, ...]] = None  # per-sector flight hours
    pre_calculated_elapsed_time: Optional[float] = None
    has_split_duty: bool = False
    split_duty_break_hours: float = 0.0
    split_duty_break_start: Optional[str] = None  # UTC
    split_duty_accommodation: SplitDutyAccommodation = SplitDutyAccommodation.SUITABLE
    extended_fdp_used: bool = False  # Table 4 extension
    reference_date: Optional[date] = None  # date used for DST-aware offsets

    @property
    def rest_facility(self) -> Optional[RestFacilityClass]:
        """Rest facility actually available (NONE counts as no facility)"""
        facility = RestFacilityClass.from_value(self.inflight_rest_facility)
        if facility is RestFacilityClass.NONE:
            return None
        return facility


@dataclass(frozen=True)
class FDPCalculationResult:
    """Outcome of the maximum FDP pipeline with its audit trail"""
    max_fdp: float
    acclimatisation_state: AcclimatisationState
    base_fdp: float  # accumulated value before the 9h floor clamp
    adjustments: Mapping[str, float] = field(default_factory=dict)  # read-only view
    explanations: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    violations: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "adjustments", MappingProxyType(dict(self.adjustments)))


@dataclass(frozen=True)
class HomeStandbyFDPResult:
    """FDP reduction produced by a home standby period"""
    standby_duration: float
    threshold: float
    fdp_reduction: float
    explanation: str


@dataclass(frozen=True)
class SplitDutyExtension:
    """FDP extension earned by a split duty break"""
    extension: float
    effective_break: float
    wocl_excluded: float
    explanation: str


# ============================================================================
# USAGE / FATIGUE / DISCRETION ANALYSIS
# ============================================================================

@dataclass(frozen=True)
class FatigueRisk:
    level: FatigueRiskLevel
    factors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CommanderDiscretion:
    can_extend: bool
    max_extension: float
    conditions: Tuple[str, ...] = ()
    risks: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AIAnalysisResult:
    """Usage against the duty ceilings plus fatigue and discretion advice"""
    daily_usage: float
    weekly_usage: float
    monthly_usage: float
    daily_remaining: float
    weekly_remaining: float
    monthly_remaining: float
    fatigue_risk: FatigueRisk
    commander_discretion: CommanderDiscretion
    warnings: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FTLComplianceResult:
    """Daily/weekly/monthly compliance check for a single duty"""
    duty_time: float
    flight_time: float
    required_rest: float
    next_duty_available: str
    is_compliant: bool
    warnings: Tuple[str, ...] = ()
    violations: Tuple[str, ...] = ()

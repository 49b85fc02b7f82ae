"""
Configuration & Parameters for the FTL Engine
=============================================

All configuration dataclasses for UK CAA FTL calculations:
- UKCAALimits: absolute duty ceilings and rest minima
- FDPAdjustmentParameters: thresholds used by the maximum FDP pipeline
- DiscretionParameters: commander's discretion caps
- FatigueThresholds: fatigue risk escalation points
- AnalysisThresholds: usage analysis warning and advice margins
- EngineConfig: master configuration container

Regulatory Foundation:
    UK CAA Regulation 965/2012 ORO.FTL.205, ORO.FTL.210, ORO.FTL.225,
    CS FTL.1.205, CS FTL.1.225
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class UKCAALimits:
    """UK CAA Regulation 965/2012 duty ceilings"""

    # Duty ceilings - ORO.FTL.210
    max_daily_duty_hours: float = 13.0
    max_weekly_duty_hours: float = 60.0
    max_monthly_duty_hours: float = 190.0

    # Rest periods - ORO.FTL.235
    min_rest_hours: float = 12.0
    min_rest_reduced_hours: float = 10.0
    reduced_rest_max_duty_hours: float = 10.0
    extended_duty_threshold_hours: float = 12.0
    extended_duty_extra_rest_hours: float = 1.0

    max_consecutive_duty_days: int = 6

    # Daily limit under home standby (standby + FDP) - CS FTL.1.225.
    # Below the 16h hard limit, commander's discretion may top it up to 16h
    home_standby_max_duty_hours: float = 16.0

    # Regulatory minimum FDP, always enforced
    minimum_fdp_hours: float = 9.0

    # Compliance validator warning margins below the ceilings.
    # The usage analysis uses its own margins (AnalysisThresholds)
    compliance_daily_warning_margin_hours: float = 1.0
    compliance_weekly_warning_margin_hours: float = 5.0
    compliance_monthly_warning_margin_hours: float = 10.0


@dataclass(frozen=True)
class FDPAdjustmentParameters:
    """Thresholds used by the ordered maximum FDP pipeline"""

    # Delayed reporting - ORO.FTL.205(e)
    delayed_reporting_threshold_hours: float = 4.0

    # Commander's discretion - ORO.FTL.205(f)
    discretion_standard_hours: float = 2.0
    discretion_augmented_hours: float = 3.0

    # Standby - CS FTL.1.225
    airport_standby_threshold_hours: float = 4.0
    home_standby_threshold_hours: float = 6.0
    home_standby_extended_threshold_hours: float = 8.0  # with in-flight rest or split duty
    night_exclusion_start_hour: int = 23
    night_exclusion_end_hour: int = 7
    exclude_night_standby: bool = False  # deduct the night window from home standby
    home_standby_fdp_offset_hours: float = 2.0

    # Extended FDP - ORO.FTL.205(d). Discretion tops up to this total above Table 2/3
    extended_fdp_max_total_extension_hours: float = 2.0

    # Split duty - CS FTL.1.220
    split_duty_extension_fraction: float = 0.5
    split_duty_max_counted_break_hours: float = 6.0  # accommodation other than suitable
    wocl_start_hour: int = 2
    wocl_end_hour: int = 6

    # Long flight definition for in-flight rest extension - CS FTL.1.205(c)
    long_flight_min_flight_hours: float = 9.0
    long_flight_max_sectors: int = 2


@dataclass(frozen=True)
class DiscretionParameters:
    """Commander's discretion caps used by the discretion advisor"""

    standard_daily_cap_hours: float = 2.0
    augmented_daily_cap_hours: float = 3.0   # augmented crew with in-flight rest
    weekly_cap_hours: float = 5.0
    monthly_cap_hours: float = 10.0
    medium_risk_cap_hours: float = 1.5
    pilot_type_cap_hours: float = 2.0        # UK CAA: 2 hours max for all operations

    daily_margin_risk_hours: float = 2.0
    weekly_margin_risk_hours: float = 5.0


@dataclass(frozen=True)
class FatigueThresholds:
    """Fatigue risk escalation points"""

    high_consecutive_days: int = 7
    medium_consecutive_days: int = 5
    high_duty_hours: float = 12.0
    medium_duty_hours: float = 10.0
    early_start_hour: int = 6   # report before 06:00
    late_finish_hour: int = 22  # duty end after 22:59


@dataclass(frozen=True)
class AnalysisThresholds:
    """Remaining-hour margins behind usage analysis warnings and recommendations"""

    daily_warning_hours: float = 1.0
    weekly_warning_hours: float = 3.0
    monthly_warning_hours: float = 10.0

    daily_advice_hours: float = 2.0
    weekly_advice_hours: float = 5.0
    monthly_advice_hours: float = 15.0

    # Both must be exceeded for the schedule to count as sustainable
    sustainable_daily_hours: float = 5.0
    sustainable_weekly_hours: float = 15.0


@dataclass(frozen=True)
class EngineConfig:
    """Master configuration container"""
    limits: UKCAALimits = field(default_factory=UKCAALimits)
    adjustments: FDPAdjustmentParameters = field(default_factory=FDPAdjustmentParameters)
    discretion: DiscretionParameters = field(default_factory=DiscretionParameters)
    fatigue: FatigueThresholds = field(default_factory=FatigueThresholds)
    analysis: AnalysisThresholds = field(default_factory=AnalysisThresholds)

    # First day of the calendar week (0 = Monday). None follows calendar.firstweekday()
    week_start_day: Optional[int] = None

    def __post_init__(self):
        if self.week_start_day is not None and not 0 <= self.week_start_day <= 6:
            raise ValueError(f"week_start_day must be 0-6, got {self.week_start_day}")

    @classmethod
    def default_caa_config(cls):
        return cls()

    @classmethod
    def conservative_config(cls):
        """
        Stricter advisory thresholds for safety-first analysis.
        - Fatigue risk escalates earlier (fewer consecutive days, shorter duties)
        - Smaller commander's discretion allowance at medium risk
        - Wider warning margins below the duty ceilings
        Regulatory tables and absolute ceilings are unchanged.
        """
        return cls(
            limits=UKCAALimits(
                compliance_daily_warning_margin_hours=2.0,
                compliance_weekly_warning_margin_hours=8.0,
                compliance_monthly_warning_margin_hours=15.0,
            ),
            discretion=DiscretionParameters(
                medium_risk_cap_hours=1.0,
                daily_margin_risk_hours=3.0,
                weekly_margin_risk_hours=8.0,
            ),
            fatigue=FatigueThresholds(
                high_consecutive_days=6,
                medium_consecutive_days=4,
                high_duty_hours=11.0,
                medium_duty_hours=9.0,
            ),
            analysis=AnalysisThresholds(
                daily_warning_hours=2.0,
                weekly_warning_hours=5.0,
                monthly_warning_hours=15.0,
                daily_advice_hours=3.0,
                weekly_advice_hours=8.0,
                monthly_advice_hours=20.0,
            ),
        )

"""
Standby FDP Adjustments
=======================

UK CAA CS FTL.1.225 rules for a duty called out from standby:

Airport standby:
    Standby time beyond the first 4 hours is deducted from the maximum FDP.

Home standby:
    a) Standby ceasing within the first 6 hours: FDP counts from reporting
    b) Standby ceasing after 6 hours: FDP reduced by the excess over 6 hours
    c) With in-flight rest or split duty the 6 hours become 8 hours
    Time between 23:00 and 07:00 can be excluded from the standby time
    (FDPAdjustmentParameters.exclude_night_standby, off by default).
"""

from typing import Optional
import logging

from models.data_models import HomeStandbyFDPResult, StandbyType
from core.parameters import FDPAdjustmentParameters
from core.regulatory_tables import STANDBY_RULES
from core.time_utils import format_hours_and_minutes, hours_between, window_overlap_hours

logger = logging.getLogger(__name__)


class StandbyCalculator:
    """FDP reductions for airport and home standby"""

    def __init__(self, params: FDPAdjustmentParameters = None):
        self.params = params or FDPAdjustmentParameters()

    def apply_night_exclusion(self, standby_duration: float, standby_start_time: str) -> float:
        """
        Standby time that counts after the night exclusion window.

        The full duration counts unless exclude_night_standby is set, in which
        case time inside the window (23:00-07:00 by default) is deducted.
        """
        p = self.params
        if not p.exclude_night_standby:
            return standby_duration
        night = window_overlap_hours(
            standby_start_time, standby_duration,
            p.night_exclusion_start_hour, p.night_exclusion_end_hour,
        )
        return standby_duration - night

    def airport_standby_reduction(self, standby_start_time: str, report_time: str) -> float:
        duration = hours_between(standby_start_time, report_time)
        if duration > STANDBY_RULES.airport_max_duration_hours:
            logger.warning(
                f"Airport standby of {duration:.2f}h exceeds "
                f"{STANDBY_RULES.airport_max_duration_hours:.0f}h maximum"
            )
        threshold = self.params.airport_standby_threshold_hours
        if duration > threshold:
            return duration - threshold
        return 0.0

    def home_standby_reduction(
        self,
        standby_start_time: str,
        report_time: str,
        has_inflight_rest: bool = False,
        has_split_duty: bool = False
    ) -> HomeStandbyFDPResult:
        total = hours_between(standby_start_time, report_time)
        if total > STANDBY_RULES.home_max_duration_hours:
            logger.warning(
                f"Home standby of {total:.2f}h exceeds "
                f"{STANDBY_RULES.home_max_duration_hours:.0f}h maximum"
            )
        if has_inflight_rest or has_split_duty:
            threshold = self.params.home_standby_extended_threshold_hours
        else:
            threshold = self.params.home_standby_threshold_hours

        effective = self.apply_night_exclusion(total, standby_start_time)

        if effective <= threshold:
            return HomeStandbyFDPResult(
                standby_duration=effective,
                threshold=threshold,
                fdp_reduction=0.0,
                explanation=(
                    f"Home standby ceased within first {format_hours_and_minutes(threshold)}. "
                    "No FDP reduction applied."
                ),
            )

        reduction = effective - threshold
        return HomeStandbyFDPResult(
            standby_duration=effective,
            threshold=threshold,
            fdp_reduction=reduction,
            explanation=(
                f"Home standby exceeded {format_hours_and_minutes(threshold)} by "
                f"{format_hours_and_minutes(reduction)}. FDP reduced accordingly."
            ),
        )

    def fdp_reduction(
        self,
        standby_type: Optional[StandbyType],
        standby_start_time: Optional[str],
        report_time: str,
        has_inflight_rest: bool = False,
        has_split_duty: bool = False
    ) -> float:
        """Hours to subtract from the maximum FDP (0.0 when not on standby)"""
        if standby_type is None or not standby_start_time:
            return 0.0
        standby_type = StandbyType(standby_type)
        if standby_type is StandbyType.AIRPORT:
            return self.airport_standby_reduction(standby_start_time, report_time)
        result = self.home_standby_reduction(
            standby_start_time, report_time, has_inflight_rest, has_split_duty
        )
        logger.debug(result.explanation)
        return result.fdp_reduction

"""
Acclimatisation Calculator
==========================

Determines crew acclimatisation state per UK CAA ORO.FTL.105 Table 1.

    B = acclimatised to home base time zone
    D = acclimatised to current departure time zone
    X = unknown state of acclimatisation

The state selects the time reference (and table) used for the maximum FDP.
"""

from datetime import date
from typing import Optional
import logging

from models.data_models import AcclimatisationState, FDPCalculationInput
from core.regulatory_tables import determine_acclimatisation_state
from core.time_utils import hours_between, timezone_difference_hours

logger = logging.getLogger(__name__)


class AcclimatisationCalculator:
    """Table 1 classification from elapsed time and time zone difference"""

    @staticmethod
    def elapsed_hours(
        last_homebase_report_time: Optional[str],
        report_time: str,
        pre_calculated_elapsed_time: Optional[float] = None
    ) -> Optional[float]:
        """
        Hours since the last report at home base.

        A pre-calculated value wins; None when neither source is available.
        """
        if pre_calculated_elapsed_time is not None:
            return pre_calculated_elapsed_time
        if last_homebase_report_time:
            return hours_between(last_homebase_report_time, report_time)
        return None

    @classmethod
    def determine_state(
        cls,
        report_time: str,
        current_location_timezone: str,
        previous_acclimatised_timezone: str,
        last_homebase_report_time: Optional[str] = None,
        pre_calculated_elapsed_time: Optional[float] = None,
        reference_date: Optional[date] = None
    ) -> AcclimatisationState:
        elapsed = cls.elapsed_hours(
            last_homebase_report_time, report_time, pre_calculated_elapsed_time
        )
        if elapsed is None:
            logger.debug("No elapsed time since home base report, state unknown")
            return AcclimatisationState.UNKNOWN

        difference = timezone_difference_hours(
            previous_acclimatised_timezone, current_location_timezone, reference_date
        )
        state = determine_acclimatisation_state(difference, elapsed)
        logger.debug(
            f"Acclimatisation: tz diff {difference}h, elapsed {elapsed:.2f}h -> {state.value}"
        )
        return state

    @classmethod
    def determine_state_for_input(cls, calc_input: FDPCalculationInput) -> AcclimatisationState:
        return cls.determine_state(
            report_time=calc_input.report_time,
            current_location_timezone=calc_input.current_location_timezone,
            previous_acclimatised_timezone=calc_input.previous_acclimatised_timezone,
            last_homebase_report_time=calc_input.last_homebase_report_time,
            pre_calculated_elapsed_time=calc_input.pre_calculated_elapsed_time,
            reference_date=calc_input.reference_date,
        )


def reference_timezone(
    state: AcclimatisationState,
    home_timezone: str,
    current_timezone: str
) -> Optional[str]:
    """
    Time zone whose local time drives the FDP table lookup.

    B -> home base, D -> current location, X -> None (Table 3 needs no time)
    """
    if state is AcclimatisationState.ACCLIMATISED_HOME_BASE:
        return home_timezone
    if state is AcclimatisationState.ACCLIMATISED_DEPARTURE:
        return current_timezone
    return None

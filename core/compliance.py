"""
UK CAA FTL Compliance Validation
================================

Checks a single duty against the daily, weekly and monthly duty ceilings,
cumulative flight time limits and consecutive duty days, and derives the
required rest and next available report time.

References: UK CAA Regulation 965/2012 ORO.FTL.210, ORO.FTL.235, CS FTL.1.225
"""

from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple
import logging

from models.data_models import DutyRecord, FTLComplianceResult, PilotType, StandbyType
from core.parameters import EngineConfig
from core.regulatory_tables import ABSOLUTE_LIMITS, STANDBY_RULES
from core.time_utils import add_hours, format_hours_and_minutes as fmt, hours_between
from core.usage import UsageAggregator, consecutive_days, week_start

logger = logging.getLogger(__name__)


class FTLComplianceValidator:
    """Validate a duty against UK CAA FTL limits"""

    def __init__(self, config: EngineConfig = None):
        self.config = config or EngineConfig.default_caa_config()

    # ------------------------------------------------------------------
    # Duty time
    # ------------------------------------------------------------------

    def effective_duty_time(
        self,
        duty_time: float,
        standby_type: Optional[StandbyType] = None,
        standby_start_time: Optional[str] = None,
        duty_end_time: Optional[str] = None
    ) -> float:
        """
        Duty time counted against the daily limit.

        Home standby counts from 2 hours after standby start, airport standby
        from standby start. Without both standby start and duty end the
        rostered duty time is used.
        """
        if standby_type is None or not standby_start_time or not duty_end_time:
            return duty_time
        if StandbyType(standby_type) is StandbyType.HOME:
            counted_from = add_hours(
                standby_start_time, self.config.adjustments.home_standby_fdp_offset_hours
            )
            return hours_between(counted_from, duty_end_time)
        return hours_between(standby_start_time, duty_end_time)

    def required_rest(self, duty_time: float) -> float:
        limits = self.config.limits
        rest = limits.min_rest_hours
        if duty_time <= limits.reduced_rest_max_duty_hours:
            rest = limits.min_rest_reduced_hours
        if duty_time > limits.extended_duty_threshold_hours:
            rest += limits.extended_duty_extra_rest_hours
        return rest

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def check_daily(self, duty_time: float, is_home_standby: bool = False) -> Tuple[List[str], List[str]]:
        limits = self.config.limits
        warnings, violations = [], []

        if is_home_standby:
            limit = limits.home_standby_max_duty_hours
            hard_limit = STANDBY_RULES.home_max_total_duty_hours
            discretion_limit = min(
                limit + self.config.adjustments.discretion_standard_hours, hard_limit
            )
            if limit < hard_limit and duty_time <= discretion_limit:
                note = (
                    "More restrictive limit applies. Commander's discretion available to extend by "
                    f"{fmt(discretion_limit - limit)} (max {fmt(discretion_limit)})."
                )
            elif limit < hard_limit:
                note = (
                    "More restrictive limit applies. Commander's discretion cannot extend "
                    f"beyond the {fmt(hard_limit)} home standby hard limit."
                )
            else:
                note = (
                    f"Home standby has a hard limit of {fmt(limit)} total duty (standby + FDP). "
                    "Commander's discretion cannot be applied to increase this limit."
                )
        else:
            limit = limits.max_daily_duty_hours
            note = ""

        if duty_time > limit:
            message = f"Daily duty time limit exceeded: {fmt(duty_time)} > {fmt(limit)}"
            violations.append(f"{message} - {note}" if note else message)
        elif duty_time > limit - limits.compliance_daily_warning_margin_hours:
            message = f"Approaching daily duty time limit ({fmt(duty_time)})"
            warnings.append(f"{message} - {note}" if note else message)

        return warnings, violations

    def check_weekly(
        self,
        duty_time: float,
        history: List[DutyRecord],
        today: date
    ) -> Tuple[List[str], List[str]]:
        limits = self.config.limits
        warnings, violations = [], []

        start = week_start(today, self.config.week_start_day)
        weekly = UsageAggregator.total_between(history, start, today) + duty_time
        if weekly > limits.max_weekly_duty_hours:
            violations.append(
                f"Weekly duty time limit exceeded: {fmt(weekly)} > {fmt(limits.max_weekly_duty_hours)}"
            )
        elif weekly > limits.max_weekly_duty_hours - limits.compliance_weekly_warning_margin_hours:
            warnings.append(f"Approaching weekly duty time limit ({fmt(weekly)})")

        consecutive = consecutive_days([r.date for r in history] + [today], today)
        if consecutive > limits.max_consecutive_duty_days:
            violations.append(
                f"Maximum consecutive duty days exceeded: "
                f"{consecutive} > {limits.max_consecutive_duty_days}"
            )

        return warnings, violations

    def check_monthly(
        self,
        duty_time: float,
        history: List[DutyRecord],
        today: date
    ) -> Tuple[List[str], List[str]]:
        limits = self.config.limits
        warnings, violations = [], []

        monthly = UsageAggregator.total_between(history, today.replace(day=1), today) + duty_time
        if monthly > limits.max_monthly_duty_hours:
            violations.append(
                f"Monthly duty time limit exceeded: {fmt(monthly)} > {fmt(limits.max_monthly_duty_hours)}"
            )
        elif monthly > limits.max_monthly_duty_hours - limits.compliance_monthly_warning_margin_hours:
            warnings.append(f"Approaching monthly duty time limit ({fmt(monthly)})")

        return warnings, violations

    def check_flight_time(
        self,
        flight_time: float,
        history: List[DutyRecord],
        today: date
    ) -> List[str]:
        """Cumulative flight time: rolling 28 days and calendar year"""
        violations = []

        rolling = UsageAggregator.total_between(
            history, today - timedelta(days=27), today, "flight_time"
        ) + flight_time
        if rolling > ABSOLUTE_LIMITS.flight_hours_28_days:
            violations.append(
                f"28-day flight time limit exceeded: {fmt(rolling)} > "
                f"{fmt(ABSOLUTE_LIMITS.flight_hours_28_days)}"
            )

        yearly = UsageAggregator.total_between(
            history, today.replace(month=1, day=1), today, "flight_time"
        ) + flight_time
        if yearly > ABSOLUTE_LIMITS.flight_hours_calendar_year:
            violations.append(
                f"Calendar year flight time limit exceeded: {fmt(yearly)} > "
                f"{fmt(ABSOLUTE_LIMITS.flight_hours_calendar_year)}"
            )

        return violations

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def check_compliance(
        self,
        duty_time: float,
        flight_time: float,
        pilot_type: PilotType,
        history: Iterable[DutyRecord] = (),
        today: Optional[date] = None,
        standby_type: Optional[StandbyType] = None,
        standby_start_time: Optional[str] = None,
        duty_end_time: Optional[str] = None
    ) -> FTLComplianceResult:
        today = today or date.today()
        history = list(history)
        warnings, violations = [], []

        actual = self.effective_duty_time(duty_time, standby_type, standby_start_time, duty_end_time)
        is_home_standby = (
            standby_type is not None and StandbyType(standby_type) is StandbyType.HOME
        )

        daily_warnings, daily_violations = self.check_daily(actual, is_home_standby)
        warnings += daily_warnings
        violations += daily_violations

        if history:
            for check in (self.check_weekly, self.check_monthly):
                check_warnings, check_violations = check(actual, history, today)
                warnings += check_warnings
                violations += check_violations
            violations += self.check_flight_time(flight_time, history, today)

        rest = self.required_rest(actual)
        next_duty = add_hours(duty_end_time, rest) if duty_end_time else ""

        logger.debug(
            f"{PilotType(pilot_type).value} duty {actual:.2f}h: "
            f"{len(violations)} violations, {len(warnings)} warnings, rest {rest:.1f}h"
        )
        return FTLComplianceResult(
            duty_time=actual,
            flight_time=flight_time,
            required_rest=rest,
            next_duty_available=next_duty,
            is_compliant=not violations,
            warnings=tuple(warnings),
            violations=tuple(violations),
        )

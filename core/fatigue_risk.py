"""
Fatigue Risk Analyzer
=====================

Classifies fatigue risk for a duty from consecutive duty days, duty length
and time of day. Risk starts LOW and only escalates; every triggered check
adds a contributing factor, not just the one that set the final level.
"""

from datetime import date
from typing import Iterable, Optional
import logging

from models.data_models import DutyRecord, FatigueRisk, FatigueRiskLevel
from core.parameters import FatigueThresholds
from core.time_utils import parse_time
from core.usage import consecutive_duty_days

logger = logging.getLogger(__name__)


class FatigueRiskAnalyzer:

    def __init__(self, thresholds: FatigueThresholds = None):
        self.thresholds = thresholds or FatigueThresholds()

    def is_unsocial_hours(self, duty: DutyRecord) -> bool:
        """Report before 06:00 or duty ending in the 23:00 hour or later"""
        start = parse_time(duty.report_time)
        end = parse_time(duty.duty_end_time)
        if start is None or end is None:
            return False
        return start.hour < self.thresholds.early_start_hour or end.hour > self.thresholds.late_finish_hour

    def analyze(
        self,
        current_duty: DutyRecord,
        history: Iterable[DutyRecord] = (),
        today: Optional[date] = None
    ) -> FatigueRisk:
        today = today or date.today()
        t = self.thresholds
        level = FatigueRiskLevel.LOW
        factors = []

        consecutive = consecutive_duty_days(list(history) + [current_duty], today)
        if consecutive >= t.high_consecutive_days:
            level = FatigueRiskLevel.HIGH
            factors.append(f"{t.high_consecutive_days}+ consecutive duty days")
        elif consecutive >= t.medium_consecutive_days:
            level = max(level, FatigueRiskLevel.MEDIUM)
            factors.append(f"{t.medium_consecutive_days}+ consecutive duty days")

        if current_duty.duty_time > t.high_duty_hours:
            level = FatigueRiskLevel.HIGH
            factors.append(f"Duty time > {t.high_duty_hours:g} hours")
        elif current_duty.duty_time > t.medium_duty_hours:
            level = max(level, FatigueRiskLevel.MEDIUM)
            factors.append(f"Duty time > {t.medium_duty_hours:g} hours")

        if self.is_unsocial_hours(current_duty):
            level = max(level, FatigueRiskLevel.MEDIUM)
            factors.append("Early morning or late night duty")

        logger.debug(f"Fatigue risk {level.name} ({consecutive} consecutive days): {factors}")
        return FatigueRisk(level=level, factors=tuple(factors))

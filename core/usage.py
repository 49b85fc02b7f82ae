"""
Duty Usage Aggregation
======================

Calendar-aligned duty time totals: today, calendar week to date and
calendar month to date, each including the duty being analysed.
Windows are calendar-aligned, not rolling.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional
import calendar
import logging

from models.data_models import DutyRecord
from core.parameters import EngineConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DutyUsage:
    daily: float
    weekly: float
    monthly: float


def week_start(today: date, first_weekday: Optional[int] = None) -> date:
    """Start of the calendar week containing today (first_weekday: 0 = Monday)"""
    if first_weekday is None:
        first_weekday = calendar.firstweekday()
    return today - timedelta(days=(today.weekday() - first_weekday) % 7)


def consecutive_days(duty_dates: Iterable[date], today: date) -> int:
    """Number of consecutive calendar days with duty, walking back from today"""
    duty_dates = set(duty_dates)
    count = 0
    day = today
    while day in duty_dates:
        count += 1
        day -= timedelta(days=1)
    return count


def consecutive_duty_days(records: Iterable[DutyRecord], today: date) -> int:
    return consecutive_days((record.date for record in records), today)


class UsageAggregator:
    """Sums duty time over today / week to date / month to date"""

    def __init__(self, config: EngineConfig = None):
        self.config = config or EngineConfig.default_caa_config()

    @staticmethod
    def total_between(history, start: date, today: date, attribute: str = "duty_time") -> float:
        """Sum of a record attribute over records dated start..today inclusive"""
        return sum(getattr(r, attribute) for r in history if start <= r.date <= today)

    def daily_usage(self, current_duty: DutyRecord, history: Iterable[DutyRecord], today: date) -> float:
        return self.total_between(history, today, today) + current_duty.duty_time

    def weekly_usage(self, current_duty: DutyRecord, history: Iterable[DutyRecord], today: date) -> float:
        start = week_start(today, self.config.week_start_day)
        return self.total_between(history, start, today) + current_duty.duty_time

    def monthly_usage(self, current_duty: DutyRecord, history: Iterable[DutyRecord], today: date) -> float:
        start = today.replace(day=1)
        return self.total_between(history, start, today) + current_duty.duty_time

    def aggregate(
        self,
        current_duty: DutyRecord,
        history: Iterable[DutyRecord],
        today: Optional[date] = None
    ) -> DutyUsage:
        today = today or date.today()
        history = list(history)
        usage = DutyUsage(
            daily=self.daily_usage(current_duty, history, today),
            weekly=self.weekly_usage(current_duty, history, today),
            monthly=self.monthly_usage(current_duty, history, today),
        )
        logger.debug(
            f"Usage to {today}: daily {usage.daily:.2f}h, "
            f"weekly {usage.weekly:.2f}h, monthly {usage.monthly:.2f}h"
        )
        return usage

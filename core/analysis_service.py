"""
Usage & Fatigue Analysis
========================

Entry point combining usage aggregation, fatigue risk and commander's
discretion advice into an AIAnalysisResult with warnings and
recommendations for the crew member.
"""

from datetime import date
from typing import Iterable, List, Optional
import logging

from models.data_models import (
    AIAnalysisResult, DutyRecord, FatigueRisk, FatigueRiskLevel, PilotType
)
from core.parameters import AnalysisThresholds, EngineConfig
from core.usage import UsageAggregator
from core.fatigue_risk import FatigueRiskAnalyzer
from core.discretion import CommanderDiscretionAdvisor

logger = logging.getLogger(__name__)


def generate_warnings(
    daily_remaining: float,
    weekly_remaining: float,
    monthly_remaining: float,
    fatigue_risk: FatigueRisk,
    thresholds: AnalysisThresholds = None
) -> List[str]:
    t = thresholds or AnalysisThresholds()
    warnings = []

    if daily_remaining <= 0:
        warnings.append("Daily limit exceeded")
    elif daily_remaining < t.daily_warning_hours:
        warnings.append("Very limited daily margin remaining")

    if weekly_remaining <= 0:
        warnings.append("Weekly limit exceeded")
    elif weekly_remaining < t.weekly_warning_hours:
        warnings.append("Limited weekly margin remaining")

    if monthly_remaining <= 0:
        warnings.append("Monthly limit exceeded")
    elif monthly_remaining < t.monthly_warning_hours:
        warnings.append("Limited monthly margin remaining")

    if fatigue_risk.level is FatigueRiskLevel.HIGH:
        warnings.append("High fatigue risk detected")
    elif fatigue_risk.level is FatigueRiskLevel.MEDIUM:
        warnings.append("Medium fatigue risk - monitor closely")

    return warnings


def generate_recommendations(
    daily_remaining: float,
    weekly_remaining: float,
    monthly_remaining: float,
    fatigue_risk: FatigueRisk,
    thresholds: AnalysisThresholds = None
) -> List[str]:
    t = thresholds or AnalysisThresholds()
    recommendations = []

    if daily_remaining < t.daily_advice_hours:
        recommendations.append("Consider shorter duty periods for remaining flights today")
    if weekly_remaining < t.weekly_advice_hours:
        recommendations.append("Plan rest days for the remainder of the week")
    if monthly_remaining < t.monthly_advice_hours:
        recommendations.append("Consider taking additional rest days this month")

    if fatigue_risk.level is FatigueRiskLevel.HIGH:
        recommendations.append("Strongly consider additional rest before next duty")
    elif fatigue_risk.level is FatigueRiskLevel.MEDIUM:
        recommendations.append("Monitor fatigue levels and consider additional rest")

    if daily_remaining > t.sustainable_daily_hours and weekly_remaining > t.sustainable_weekly_hours:
        recommendations.append("Good margin available - current schedule is sustainable")

    return recommendations


def analyze_usage_and_fatigue(
    current_duty: DutyRecord,
    history: Iterable[DutyRecord],
    pilot_type: PilotType,
    is_augmented_crew: bool = False,
    has_inflight_rest: bool = False,
    today: Optional[date] = None,
    config: EngineConfig = None
) -> AIAnalysisResult:
    """
    Analyse the current duty against the daily/weekly/monthly ceilings.

    Args:
        current_duty: Duty being analysed (always counted in every window)
        history: Previously flown duties
        pilot_type: Operation type for discretion gating
        is_augmented_crew: Additional crew on board
        has_inflight_rest: In-flight rest facility available
        today: Calendar reference date (defaults to date.today())
        config: Engine configuration (defaults to UK CAA values)
    """
    config = config or EngineConfig.default_caa_config()
    today = today or date.today()
    history = list(history)
    limits = config.limits

    usage = UsageAggregator(config).aggregate(current_duty, history, today)
    daily_remaining = limits.max_daily_duty_hours - usage.daily
    weekly_remaining = limits.max_weekly_duty_hours - usage.weekly
    monthly_remaining = limits.max_monthly_duty_hours - usage.monthly

    fatigue_risk = FatigueRiskAnalyzer(config.fatigue).analyze(current_duty, history, today)
    discretion = CommanderDiscretionAdvisor(config.discretion).advise(
        daily_remaining,
        weekly_remaining,
        monthly_remaining,
        fatigue_risk,
        pilot_type,
        is_augmented_crew=is_augmented_crew,
        has_inflight_rest=has_inflight_rest,
    )

    result = AIAnalysisResult(
        daily_usage=usage.daily,
        weekly_usage=usage.weekly,
        monthly_usage=usage.monthly,
        daily_remaining=daily_remaining,
        weekly_remaining=weekly_remaining,
        monthly_remaining=monthly_remaining,
        fatigue_risk=fatigue_risk,
        commander_discretion=discretion,
        warnings=tuple(generate_warnings(
            daily_remaining, weekly_remaining, monthly_remaining, fatigue_risk, config.analysis
        )),
        recommendations=tuple(generate_recommendations(
            daily_remaining, weekly_remaining, monthly_remaining, fatigue_risk, config.analysis
        )),
    )
    logger.info(
        f"Analysed {current_duty.flight_number}: {len(result.warnings)} warnings, "
        f"fatigue {fatigue_risk.level.name}"
    )
    return result

"""
Commander's Discretion Advisor
==============================

Safe FDP extension under commander's discretion (UK CAA ORO.FTL.205(f)),
bounded by the remaining daily/weekly/monthly duty margins and gated by
fatigue risk and operation type.
"""

import logging

from models.data_models import CommanderDiscretion, FatigueRisk, FatigueRiskLevel, PilotType
from core.parameters import DiscretionParameters

logger = logging.getLogger(__name__)


class CommanderDiscretionAdvisor:

    def __init__(self, params: DiscretionParameters = None):
        self.params = params or DiscretionParameters()

    def advise(
        self,
        daily_remaining: float,
        weekly_remaining: float,
        monthly_remaining: float,
        fatigue_risk: FatigueRisk,
        pilot_type: PilotType,
        is_augmented_crew: bool = False,
        has_inflight_rest: bool = False
    ) -> CommanderDiscretion:
        p = self.params
        can_extend = False
        max_extension = 0.0
        conditions = []
        risks = []

        if daily_remaining > 0 and weekly_remaining > 0 and monthly_remaining > 0:
            can_extend = True

            if is_augmented_crew and has_inflight_rest:
                daily_cap = p.augmented_daily_cap_hours
            else:
                daily_cap = p.standard_daily_cap_hours
            max_extension = min(
                min(daily_remaining, daily_cap),
                min(weekly_remaining, p.weekly_cap_hours),
                min(monthly_remaining, p.monthly_cap_hours),
            )

            if fatigue_risk.level is FatigueRiskLevel.LOW:
                conditions.append("Low fatigue risk")
            elif fatigue_risk.level is FatigueRiskLevel.MEDIUM:
                conditions.append("Medium fatigue risk - monitor closely")
                max_extension = min(max_extension, p.medium_risk_cap_hours)
            else:
                conditions.append("High fatigue risk - extension not recommended")
                can_extend = False
                max_extension = 0.0

            # Both operation types share the same cap
            if PilotType(pilot_type) is PilotType.MULTI_PILOT:
                conditions.append("Multi-pilot operation")
            else:
                conditions.append("Single-pilot operation")
            max_extension = min(max_extension, p.pilot_type_cap_hours)

        if fatigue_risk.level is not FatigueRiskLevel.LOW:
            risks.append("Increased fatigue risk")
        if daily_remaining < p.daily_margin_risk_hours:
            risks.append("Limited daily margin")
        if weekly_remaining < p.weekly_margin_risk_hours:
            risks.append("Limited weekly margin")

        logger.debug(f"Discretion: can_extend={can_extend}, max_extension={max_extension:.2f}h")
        return CommanderDiscretion(
            can_extend=can_extend,
            max_extension=max_extension,
            conditions=tuple(conditions),
            risks=tuple(risks),
        )

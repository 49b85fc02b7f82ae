"""
Split Duty FDP Extension
========================

UK CAA CS FTL.1.220: a break on the ground within the FDP extends the
maximum FDP by 50% of the break.

Suitable accommodation:
    The whole break counts.

Other accommodation:
    At most 6 hours of the break counts, and time inside the window of
    circadian low (02:00-05:59 local time where the crew is acclimatised)
    is excluded.

A split duty extension cannot be combined with an extended FDP (Table 4).
"""

from typing import Optional
import logging

from models.data_models import SplitDutyAccommodation, SplitDutyExtension
from core.parameters import FDPAdjustmentParameters
from core.time_utils import format_hours_and_minutes as fmt, window_overlap_hours

logger = logging.getLogger(__name__)


class SplitDutyCalculator:

    def __init__(self, params: FDPAdjustmentParameters = None):
        self.params = params or FDPAdjustmentParameters()

    def wocl_encroachment(self, local_break_start: Optional[str], break_hours: float) -> float:
        """Hours of the break inside the WOCL; 0.0 without a break start"""
        p = self.params
        return window_overlap_hours(local_break_start, break_hours, p.wocl_start_hour, p.wocl_end_hour)

    def extension(
        self,
        break_hours: float,
        accommodation: SplitDutyAccommodation,
        local_break_start: Optional[str] = None
    ) -> SplitDutyExtension:
        p = self.params
        share = f"{p.split_duty_extension_fraction:.0%}"

        if break_hours <= 0:
            return SplitDutyExtension(0.0, 0.0, 0.0, "No split duty break")

        if SplitDutyAccommodation(accommodation) is SplitDutyAccommodation.SUITABLE:
            extension = break_hours * p.split_duty_extension_fraction
            return SplitDutyExtension(
                extension=extension,
                effective_break=break_hours,
                wocl_excluded=0.0,
                explanation=f"Suitable accommodation: full {share} extension ({fmt(extension)})",
            )

        notes = []
        effective = break_hours
        cap = p.split_duty_max_counted_break_hours
        if effective > cap:
            notes.append(f"{fmt(cap)} limit applied (exceeded by {fmt(effective - cap)})")
            effective = cap

        wocl = self.wocl_encroachment(local_break_start, break_hours)
        if wocl > 0:
            notes.append(f"WOCL encroachment: {fmt(wocl)} excluded")
            effective = max(0.0, effective - wocl)

        extension = effective * p.split_duty_extension_fraction
        notes.append(f"Final extension: {fmt(extension)} ({share} of {fmt(effective)} effective break time)")
        logger.debug(f"Split duty break {break_hours:.2f}h -> effective {effective:.2f}h")

        return SplitDutyExtension(
            extension=extension,
            effective_break=effective,
            wocl_excluded=wocl,
            explanation="Accommodation: " + ". ".join(notes),
        )

"""
Regulatory Maximum FDP Calculator
=================================

Maximum Flight Duty Period per UK CAA ORO.FTL.205, computed as a fold over
an ordered tuple of pure steps:

    1. Acclimatisation state (Table 1)
    2. Base FDP (Table 2 at the reference local time, Table 3 when unknown)
    3. Rostered extension (replaces the value)
    4. Extended FDP, Table 4 (replaces the value)
    5. Split duty (adds half of the counted break)
    6. In-flight rest extension (replaces the value)
    7. Delayed reporting (adds the more restrictive difference)
    8. Commander's discretion (adds 2h, 3h with augmented crew and rest facility,
       or tops an extended FDP up to 2h above the table value)
    9. Standby (subtracts standby time beyond the threshold)

The result is then floored at the 9 hour regulatory minimum. Each step takes
(calc_input, state, config) and returns a new PipelineState; step order is
FDP_PIPELINE and must not change.
"""

from dataclasses import dataclass, replace
from functools import reduce
from typing import Callable, Mapping, Optional, Tuple
import logging

from models.data_models import (
    AcclimatisationState, FDPCalculationInput, FDPCalculationResult
)
from core.parameters import EngineConfig
from core.acclimatisation import AcclimatisationCalculator, reference_timezone
from core.regulatory_tables import (
    NOT_PERMITTED,
    lookup_base_fdp,
    lookup_extended_fdp,
    lookup_inflight_rest_extension_fdp,
    lookup_rostered_extension_fdp,
    lookup_unknown_acclimatised_fdp,
)
from core.split_duty import SplitDutyCalculator
from core.standby import StandbyCalculator
from core.time_utils import add_hours, convert_to_local_time, format_hours_and_minutes, hours_between

logger = logging.getLogger(__name__)

ROSTERED_EXTENSION_UNAVAILABLE = (
    "Rostered extension requested but not available for this time/sector combination"
)
EXTENDED_FDP_UNAVAILABLE = "Extended FDP requested but not allowed for this time/sector combination"
NOT_COMBINABLE_WITH_EXTENDED_FDP = "{} cannot be combined with an extended FDP"


# ============================================================================
# PIPELINE STATE
# ============================================================================

@dataclass(frozen=True)
class PipelineState:
    """Accumulator threaded through the FDP steps"""
    value: float = 0.0
    acclimatisation: Optional[AcclimatisationState] = None
    explanations: Tuple[str, ...] = ()
    adjustments: Tuple[Tuple[str, float], ...] = ()
    warnings: Tuple[str, ...] = ()

    def explain(self, text: str) -> 'PipelineState':
        return replace(self, explanations=self.explanations + (text,))

    def warn(self, text: str) -> 'PipelineState':
        return replace(self, warnings=self.warnings + (text,))

    def set_value(self, name: str, new_value: float, text: str) -> 'PipelineState':
        """Move to new_value, recording the signed change under name"""
        return replace(
            self,
            value=new_value,
            adjustments=self.adjustments + ((name, new_value - self.value),),
            explanations=self.explanations + (text,),
        )

    def add(self, name: str, delta: float, text: str) -> 'PipelineState':
        return self.set_value(name, self.value + delta, text)

    def has_adjustment(self, name: str) -> bool:
        return any(key == name for key, _ in self.adjustments)


Step = Callable[[FDPCalculationInput, PipelineState, EngineConfig], PipelineState]


def reference_local_time(calc_input: FDPCalculationInput, state: PipelineState, time: str) -> str:
    """Local time in the acclimatised reference zone; unchanged when unknown"""
    tz = reference_timezone(
        state.acclimatisation,
        calc_input.previous_acclimatised_timezone,
        calc_input.current_location_timezone,
    )
    if tz is None:
        return time
    return convert_to_local_time(time, tz, calc_input.reference_date)


def is_long_flight(calc_input: FDPCalculationInput, config: EngineConfig) -> bool:
    """At most 2 sectors with at least one over 9 hours flight time"""
    flight_times = calc_input.flight_times
    if not flight_times or len(flight_times) > config.adjustments.long_flight_max_sectors:
        return False
    return any(t > config.adjustments.long_flight_min_flight_hours for t in flight_times)


def discretion_extension(calc_input: FDPCalculationInput, adjustments: Mapping[str, float], config: EngineConfig) -> float:
    """
    Hours commander's discretion may add.

    With an extended FDP the total extension above the Table 2/3 value is
    capped, so discretion only tops up the remainder.
    """
    params = config.adjustments
    if "extended_fdp" in adjustments:
        margin = adjustments["extended_fdp"] + adjustments.get("rostered_extension", 0.0)
        return max(0.0, params.extended_fdp_max_total_extension_hours - margin)
    if calc_input.additional_crew >= 1 and calc_input.rest_facility is not None:
        return params.discretion_augmented_hours
    return params.discretion_standard_hours


# ============================================================================
# STEPS
# ============================================================================

def step_acclimatisation(calc_input, state, config):
    acclimatisation = AcclimatisationCalculator.determine_state_for_input(calc_input)
    state = replace(state, acclimatisation=acclimatisation)
    return state.explain(
        f"Acclimatisation state: {acclimatisation.value} ({acclimatisation.description})"
    )


def step_base_fdp(calc_input, state, config):
    if state.acclimatisation is AcclimatisationState.UNKNOWN:
        base = lookup_unknown_acclimatised_fdp(calc_input.sectors)
        if base == NOT_PERMITTED:
            state = state.warn(
                f"{calc_input.sectors} sectors not permitted with unknown acclimatisation (Table 3)"
            )
        return state.set_value(
            "base_fdp", base,
            f"Base FDP: {format_hours_and_minutes(base)} (Table 3, {calc_input.sectors} sectors)"
        )

    if state.acclimatisation in (
        AcclimatisationState.ACCLIMATISED_HOME_BASE,
        AcclimatisationState.ACCLIMATISED_DEPARTURE,
    ):
        local_time = reference_local_time(calc_input, state, calc_input.report_time)
        base = lookup_base_fdp(local_time, calc_input.sectors)
        return state.set_value(
            "base_fdp", base,
            f"Base FDP: {format_hours_and_minutes(base)} "
            f"(Table 2, {local_time} local, {calc_input.sectors} sectors)"
        )

    minimum = config.limits.minimum_fdp_hours
    return state.set_value(
        "base_fdp", minimum, f"Base FDP: {format_hours_and_minutes(minimum)} (regulatory minimum)"
    )


def step_rostered_extension(calc_input, state, config):
    if not calc_input.rostered_extension_used:
        return state
    local_time = reference_local_time(calc_input, state, calc_input.report_time)
    extended = lookup_rostered_extension_fdp(local_time, calc_input.sectors)
    if extended is None:
        return state.warn(ROSTERED_EXTENSION_UNAVAILABLE)
    return state.set_value(
        "rostered_extension", extended,
        f"Rostered extension applied: {format_hours_and_minutes(extended)}"
    )


def step_extended_fdp(calc_input, state, config):
    if not calc_input.extended_fdp_used:
        return state
    local_time = reference_local_time(calc_input, state, calc_input.report_time)
    extended = lookup_extended_fdp(local_time, calc_input.sectors)
    if extended is None:
        return state.warn(EXTENDED_FDP_UNAVAILABLE)
    return state.set_value(
        "extended_fdp", extended,
        f"Extended FDP applied: {format_hours_and_minutes(extended)} (Table 4, {local_time} local)"
    )


def step_split_duty(calc_input, state, config):
    if not calc_input.has_split_duty or calc_input.split_duty_break_hours <= 0:
        return state
    if state.has_adjustment("extended_fdp"):
        return state.warn(NOT_COMBINABLE_WITH_EXTENDED_FDP.format("Split duty extension"))

    break_start = calc_input.split_duty_break_start
    local_start = reference_local_time(calc_input, state, break_start) if break_start else None
    result = SplitDutyCalculator(config.adjustments).extension(
        calc_input.split_duty_break_hours, calc_input.split_duty_accommodation, local_start
    )
    if result.extension <= 0:
        return state.explain(f"Split duty extension: none ({result.explanation})")
    return state.add(
        "split_duty", result.extension,
        f"Split duty extension: +{format_hours_and_minutes(result.extension)} ({result.explanation})"
    )


def step_inflight_rest(calc_input, state, config):
    facility = calc_input.rest_facility
    if facility is None or calc_input.additional_crew <= 0:
        return state
    if state.has_adjustment("extended_fdp"):
        return state.warn(NOT_COMBINABLE_WITH_EXTENDED_FDP.format("In-flight rest extension"))
    long_flight = is_long_flight(calc_input, config)
    extended = lookup_inflight_rest_extension_fdp(facility, calc_input.additional_crew, long_flight)
    if extended is None:
        return state.warn(
            f"In-flight rest extension not available for {calc_input.additional_crew} additional crew"
        )
    suffix = " (long flight)" if long_flight else ""
    return state.set_value(
        "inflight_rest", extended,
        f"In-flight rest applied: {format_hours_and_minutes(extended)}{suffix}"
    )


def step_delayed_reporting(calc_input, state, config):
    notifications = [n for n in (calc_input.delayed_reporting_notifications or ()) if n]
    if not notifications:
        return state

    delays = [(hours_between(calc_input.report_time, n), n) for n in notifications]
    max_delay, delayed_time = max(delays, key=lambda pair: pair[0])
    if max_delay < config.adjustments.delayed_reporting_threshold_hours:
        logger.debug(f"Delay of {max_delay:.2f}h below threshold, no adjustment")
        return state

    original_fdp = lookup_base_fdp(
        reference_local_time(calc_input, state, calc_input.report_time), calc_input.sectors
    )
    delayed_fdp = lookup_base_fdp(
        reference_local_time(calc_input, state, delayed_time), calc_input.sectors
    )
    delta = min(original_fdp, delayed_fdp) - original_fdp
    if delta == 0:
        return state
    return state.add(
        "delayed_reporting", delta,
        f"Delayed reporting adjustment: {format_hours_and_minutes(delta)}"
    )


def step_commanders_discretion(calc_input, state, config):
    if not calc_input.commander_discretion_used:
        return state
    extension = discretion_extension(calc_input, dict(state.adjustments), config)
    if extension <= 0:
        return state.warn(
            "Commander's discretion not available: extended FDP already uses the "
            f"{format_hours_and_minutes(config.adjustments.extended_fdp_max_total_extension_hours)} "
            "total extension"
        )
    return state.add(
        "commanders_discretion", extension,
        f"Commander's discretion: +{format_hours_and_minutes(extension)}"
    )


def step_standby(calc_input, state, config):
    reduction = StandbyCalculator(config.adjustments).fdp_reduction(
        calc_input.standby_type,
        calc_input.standby_start_time,
        calc_input.report_time,
        has_inflight_rest=calc_input.rest_facility is not None,
        has_split_duty=calc_input.has_split_duty,
    )
    if reduction <= 0:
        return state
    return state.add(
        "standby", -reduction, f"Standby adjustment: {format_hours_and_minutes(-reduction)}"
    )


FDP_PIPELINE: Tuple[Step, ...] = (
    step_acclimatisation,
    step_base_fdp,
    step_rostered_extension,
    step_extended_fdp,
    step_split_duty,
    step_inflight_rest,
    step_delayed_reporting,
    step_commanders_discretion,
    step_standby,
)


# ============================================================================
# CALCULATOR
# ============================================================================

class RegulatoryFDPCalculator:
    """Runs FDP_PIPELINE and applies the regulatory minimum"""

    def __init__(self, config: EngineConfig = None, steps: Tuple[Step, ...] = FDP_PIPELINE):
        self.config = config or EngineConfig.default_caa_config()
        self.steps = steps

    def run_steps(self, calc_input: FDPCalculationInput) -> PipelineState:
        def apply(state, step):
            new_state = step(calc_input, state, self.config)
            logger.debug(f"{step.__name__}: {state.value:.2f}h -> {new_state.value:.2f}h")
            return new_state

        return reduce(apply, self.steps, PipelineState())

    def calculate(self, calc_input: FDPCalculationInput) -> FDPCalculationResult:
        state = self.run_steps(calc_input)
        minimum = self.config.limits.minimum_fdp_hours
        max_fdp = max(state.value, minimum)
        explanations = state.explanations
        if max_fdp > state.value:
            explanations += (f"Regulatory minimum FDP applied: {format_hours_and_minutes(minimum)}",)

        return FDPCalculationResult(
            max_fdp=max_fdp,
            acclimatisation_state=state.acclimatisation or AcclimatisationState.UNKNOWN,
            base_fdp=state.value,
            adjustments=dict(state.adjustments),
            explanations=explanations,
            warnings=state.warnings,
            violations=(),
        )


def compute_max_fdp(calc_input: FDPCalculationInput, config: EngineConfig = None) -> FDPCalculationResult:
    return RegulatoryFDPCalculator(config).calculate(calc_input)


# ============================================================================
# LATEST BLOCK TIMES
# ============================================================================

def latest_on_blocks_time(report_time: str, max_fdp: float, discretion_hours: float = 0.0) -> str:
    """Report time plus the maximum FDP (and any discretion), HH:MM"""
    return add_hours(report_time, max_fdp + discretion_hours)


def latest_off_blocks_time(
    report_time: str,
    max_fdp: float,
    block_time: float,
    discretion_hours: float = 0.0
) -> str:
    """Latest on-blocks time less the planned block time, HH:MM"""
    return add_hours(latest_on_blocks_time(report_time, max_fdp, discretion_hours), -block_time)


def available_discretion(
    calc_input: FDPCalculationInput,
    result: FDPCalculationResult,
    config: EngineConfig = None
) -> float:
    """Discretion still available on top of result.max_fdp (0.0 once applied)"""
    if calc_input.commander_discretion_used:
        return 0.0
    return discretion_extension(calc_input, result.adjustments, config or EngineConfig.default_caa_config())

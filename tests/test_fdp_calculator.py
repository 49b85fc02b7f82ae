"""
test_fdp_calculator.py
======================

Maximum FDP pipeline: base tables by acclimatisation state, each adjustment
step, step ordering, the 9 hour floor and the audit trail.

Fixed-offset zones (UTC, Asia/Dubai) keep results independent of DST.

Run: python -m pytest tests/test_fdp_calculator.py -v
"""

from dataclasses import FrozenInstanceError, replace

import pytest

from models.data_models import (
    AcclimatisationState, FDPCalculationInput, RestFacilityClass, SplitDutyAccommodation, StandbyType
)
from core.fdp_calculator import (
    EXTENDED_FDP_UNAVAILABLE,
    FDP_PIPELINE,
    ROSTERED_EXTENSION_UNAVAILABLE,
    RegulatoryFDPCalculator,
    available_discretion,
    compute_max_fdp,
    discretion_extension,
    is_long_flight,
    latest_off_blocks_time,
    latest_on_blocks_time,
)
from core.parameters import EngineConfig, FDPAdjustmentParameters


# ============================================================================
# HELPERS
# ============================================================================

def make_input(**overrides):
    """UTC home base and location, 06:00 report, 2 sectors, state unknown"""
    fields = dict(
        report_time="06:00",
        sectors=2,
        current_location_timezone="UTC",
        previous_acclimatised_timezone="UTC",
    )
    fields.update(overrides)
    return FDPCalculationInput(**fields)


def acclimatised_input(**overrides):
    """Acclimatised to home base (24h since last home base report)"""
    overrides.setdefault("pre_calculated_elapsed_time", 24.0)
    return make_input(**overrides)


# ============================================================================
# BASE FDP
# ============================================================================

class TestBaseFDP:

    def test_unknown_state_uses_table_3(self):
        """06:00, 2 sectors, no home base report -> X -> 11:00"""
        result = compute_max_fdp(make_input())
        assert result.acclimatisation_state == AcclimatisationState.UNKNOWN
        assert result.max_fdp == 11.0
        assert result.base_fdp == 11.0
        assert result.adjustments == {"base_fdp": 11.0}

    def test_home_base_uses_table_2(self):
        result = compute_max_fdp(acclimatised_input())
        assert result.acclimatisation_state == AcclimatisationState.ACCLIMATISED_HOME_BASE
        assert result.max_fdp == 13.0

    def test_home_base_local_time(self):
        """02:00z is 06:00 in Dubai"""
        result = compute_max_fdp(acclimatised_input(
            report_time="02:00z",
            current_location_timezone="Asia/Dubai",
            previous_acclimatised_timezone="Asia/Dubai",
        ))
        assert result.max_fdp == 13.0

    def test_home_base_state_ignores_current_location(self):
        """Still on UTC home base time: 02:00 falls in the 1700-0459 band"""
        result = compute_max_fdp(acclimatised_input(
            report_time="02:00",
            current_location_timezone="Asia/Dubai",
        ))
        assert result.acclimatisation_state == AcclimatisationState.ACCLIMATISED_HOME_BASE
        assert result.max_fdp == 11.0

    def test_departure_state_uses_current_location_time(self):
        result = compute_max_fdp(make_input(
            report_time="02:00",
            current_location_timezone="Asia/Dubai",
            pre_calculated_elapsed_time=80.0,
        ))
        assert result.acclimatisation_state == AcclimatisationState.ACCLIMATISED_DEPARTURE
        assert result.max_fdp == 13.0

    def test_airport_codes(self):
        result = compute_max_fdp(acclimatised_input(
            report_time="02:00",
            current_location_timezone="DXB",
            previous_acclimatised_timezone="DXB",
        ))
        assert result.max_fdp == 13.0

    def test_table_3_not_permitted_warns_and_floors(self):
        result = compute_max_fdp(make_input(sectors=9))
        assert result.base_fdp == 0.0
        assert result.max_fdp == 9.0
        assert any("not permitted" in w for w in result.warnings)


# ============================================================================
# ROSTERED EXTENSION
# ============================================================================

class TestRosteredExtension:

    def test_replaces_base(self):
        result = compute_max_fdp(acclimatised_input(report_time="07:00", rostered_extension_used=True))
        assert result.max_fdp == 14.0
        assert result.adjustments["rostered_extension"] == 1.0
        assert "Rostered extension applied: 14h" in result.explanations

    def test_unavailable_warns_and_keeps_base(self):
        result = compute_max_fdp(make_input(rostered_extension_used=True))
        assert result.warnings == (ROSTERED_EXTENSION_UNAVAILABLE,)
        assert result.warnings[0].startswith("Rostered extension requested but not available")
        assert result.max_fdp == 11.0
        assert "rostered_extension" not in result.adjustments

    def test_later_steps_still_apply_after_miss(self):
        result = compute_max_fdp(make_input(
            rostered_extension_used=True,
            commander_discretion_used=True,
        ))
        assert result.max_fdp == 13.0

    def test_not_requested(self):
        result = compute_max_fdp(acclimatised_input(report_time="07:00"))
        assert result.max_fdp == 13.0
        assert result.warnings == ()


# ============================================================================
# IN-FLIGHT REST
# ============================================================================

class TestInflightRest:

    def test_replaces_value(self):
        result = compute_max_fdp(acclimatised_input(
            inflight_rest_facility=RestFacilityClass.CLASS_1,
            additional_crew=1,
        ))
        assert result.max_fdp == 16.0
        assert result.adjustments["inflight_rest"] == 3.0

    def test_long_flight(self):
        result = compute_max_fdp(acclimatised_input(
            inflight_rest_facility=RestFacilityClass.CLASS_3,
            additional_crew=2,
            flight_times=(10.0,),
        ))
        assert result.max_fdp == 16.0
        assert result.explanations[-1].endswith("(long flight)")

    def test_three_sectors_not_long_flight(self):
        calc_input = acclimatised_input(flight_times=(10.0, 2.0, 3.0))
        assert not is_long_flight(calc_input, EngineConfig())

    def test_replaces_rostered_extension(self):
        """Step 4 overrides step 3"""
        result = compute_max_fdp(acclimatised_input(
            report_time="07:00",
            rostered_extension_used=True,
            inflight_rest_facility=RestFacilityClass.CLASS_2,
            additional_crew=1,
        ))
        assert result.max_fdp == 15.0
        assert result.adjustments["rostered_extension"] == 1.0
        assert result.adjustments["inflight_rest"] == 1.0

    def test_requires_additional_crew(self):
        result = compute_max_fdp(acclimatised_input(inflight_rest_facility=RestFacilityClass.CLASS_1))
        assert result.max_fdp == 13.0

    def test_no_facility(self):
        result = compute_max_fdp(acclimatised_input(
            inflight_rest_facility=RestFacilityClass.NONE,
            additional_crew=1,
        ))
        assert result.max_fdp == 13.0

    def test_facility_given_as_string(self):
        result = compute_max_fdp(acclimatised_input(inflight_rest_facility="class1", additional_crew=2))
        assert result.max_fdp == 17.0

    def test_crew_count_outside_table_warns(self):
        result = compute_max_fdp(acclimatised_input(
            inflight_rest_facility=RestFacilityClass.CLASS_1,
            additional_crew=3,
        ))
        assert result.max_fdp == 13.0
        assert any("3 additional crew" in w for w in result.warnings)


# ============================================================================
# DELAYED REPORTING
# ============================================================================

class TestDelayedReporting:

    def test_delay_to_more_restrictive_time(self):
        """06:00 -> 14:00: 13:00 vs 12:30, take the lower"""
        result = compute_max_fdp(acclimatised_input(delayed_reporting_notifications=("14:00",)))
        assert result.adjustments["delayed_reporting"] == -0.5
        assert result.max_fdp == 12.5

    def test_largest_delay_used(self):
        result = compute_max_fdp(acclimatised_input(
            delayed_reporting_notifications=("08:00", "16:00"),
        ))
        assert result.max_fdp == 11.5

    def test_short_delay_ignored(self):
        result = compute_max_fdp(acclimatised_input(delayed_reporting_notifications=("08:00",)))
        assert "delayed_reporting" not in result.adjustments
        assert result.max_fdp == 13.0

    def test_never_increases(self):
        """17:00 delayed to 06:00 would be a longer FDP: no change"""
        result = compute_max_fdp(acclimatised_input(
            report_time="17:00",
            delayed_reporting_notifications=("06:00",),
        ))
        assert result.max_fdp == 11.0
        assert "delayed_reporting" not in result.adjustments

    def test_empty_notifications(self):
        result = compute_max_fdp(acclimatised_input(delayed_reporting_notifications=()))
        assert result.max_fdp == 13.0


# ============================================================================
# COMMANDER'S DISCRETION
# ============================================================================

class TestCommandersDiscretion:

    def test_standard_two_hours(self):
        result = compute_max_fdp(acclimatised_input(commander_discretion_used=True))
        assert result.max_fdp == 15.0
        assert result.adjustments["commanders_discretion"] == 2.0

    def test_augmented_three_hours(self):
        result = compute_max_fdp(acclimatised_input(
            commander_discretion_used=True,
            inflight_rest_facility=RestFacilityClass.CLASS_1,
            additional_crew=1,
        ))
        assert result.max_fdp == 19.0

    def test_crew_without_facility_two_hours(self):
        result = compute_max_fdp(acclimatised_input(commander_discretion_used=True, additional_crew=1))
        assert result.max_fdp == 15.0

    def test_extended_fdp_caps_discretion(self):
        """07:00: Table 2 13h, Table 4 14h, so only 1h of the 2h remains"""
        result = compute_max_fdp(acclimatised_input(
            report_time="07:00", extended_fdp_used=True, commander_discretion_used=True,
        ))
        assert result.adjustments["extended_fdp"] == 1.0
        assert result.adjustments["commanders_discretion"] == 1.0
        assert result.max_fdp == 15.0

    def test_partial_extended_fdp_leaves_more_discretion(self):
        """06:20: Table 4 13h 15m is 15m above Table 2"""
        result = compute_max_fdp(acclimatised_input(
            report_time="06:20", extended_fdp_used=True, commander_discretion_used=True,
        ))
        assert result.adjustments["commanders_discretion"] == 1.75
        assert result.max_fdp == 15.0

    def test_no_discretion_left_warns(self):
        config = EngineConfig(adjustments=FDPAdjustmentParameters(extended_fdp_max_total_extension_hours=1.0))
        result = compute_max_fdp(acclimatised_input(
            report_time="07:00", extended_fdp_used=True, commander_discretion_used=True,
        ), config)
        assert "commanders_discretion" not in result.adjustments
        assert result.max_fdp == 14.0
        assert result.warnings[-1].startswith("Commander's discretion not available")

    def test_discretion_extension_values(self):
        config = EngineConfig.default_caa_config()
        calc_input = acclimatised_input()
        assert discretion_extension(calc_input, {}, config) == 2.0
        assert discretion_extension(calc_input, {"base_fdp": 13.0, "extended_fdp": 0.5}, config) == 1.5
        assert discretion_extension(calc_input, {"extended_fdp": 2.5}, config) == 0.0
        augmented = acclimatised_input(inflight_rest_facility=RestFacilityClass.CLASS_2, additional_crew=2)
        assert discretion_extension(augmented, {}, config) == 3.0


# ============================================================================
# EXTENDED FDP (TABLE 4)
# ============================================================================

class TestExtendedFDP:

    def test_replaces_base(self):
        result = compute_max_fdp(acclimatised_input(report_time="07:00", extended_fdp_used=True))
        assert result.max_fdp == 14.0
        assert result.explanations[2] == "Extended FDP applied: 14h (Table 4, 07:00 local)"

    def test_not_allowed_before_0615(self):
        result = compute_max_fdp(acclimatised_input(extended_fdp_used=True))
        assert result.max_fdp == 13.0
        assert EXTENDED_FDP_UNAVAILABLE in result.warnings
        assert "extended_fdp" not in result.adjustments

    def test_not_allowed_late_with_many_sectors(self):
        result = compute_max_fdp(acclimatised_input(
            report_time="16:00", sectors=4, extended_fdp_used=True,
        ))
        assert EXTENDED_FDP_UNAVAILABLE in result.warnings

    def test_reference_local_time(self):
        """03:00z is 07:00 in Dubai"""
        result = compute_max_fdp(acclimatised_input(
            report_time="03:00z",
            current_location_timezone="Asia/Dubai",
            previous_acclimatised_timezone="Asia/Dubai",
            extended_fdp_used=True,
        ))
        assert result.max_fdp == 14.0

    def test_blocks_inflight_rest(self):
        result = compute_max_fdp(acclimatised_input(
            report_time="07:00",
            extended_fdp_used=True,
            inflight_rest_facility=RestFacilityClass.CLASS_1,
            additional_crew=1,
        ))
        assert result.max_fdp == 14.0
        assert "In-flight rest extension cannot be combined with an extended FDP" in result.warnings
        assert "inflight_rest" not in result.adjustments

    def test_not_requested(self):
        result = compute_max_fdp(acclimatised_input(report_time="07:00"))
        assert result.max_fdp == 13.0
        assert result.warnings == ()


# ============================================================================
# SPLIT DUTY
# ============================================================================

class TestSplitDuty:

    def test_suitable_accommodation_half_break(self):
        result = compute_max_fdp(acclimatised_input(has_split_duty=True, split_duty_break_hours=4.0))
        assert result.adjustments["split_duty"] == 2.0
        assert result.max_fdp == 15.0

    def test_accommodation_six_hour_cap(self):
        result = compute_max_fdp(acclimatised_input(
            has_split_duty=True,
            split_duty_break_hours=8.0,
            split_duty_break_start="10:00",
            split_duty_accommodation=SplitDutyAccommodation.ACCOMMODATION,
        ))
        assert result.max_fdp == 16.0

    def test_accommodation_wocl_excluded(self):
        result = compute_max_fdp(acclimatised_input(
            has_split_duty=True,
            split_duty_break_hours=4.0,
            split_duty_break_start="01:00",
            split_duty_accommodation=SplitDutyAccommodation.ACCOMMODATION,
        ))
        assert result.adjustments["split_duty"] == 0.5
        assert result.max_fdp == 13.5

    def test_wocl_uses_reference_local_time(self):
        """22:00z is 02:00 in Dubai, so the whole 4h break is in the WOCL"""
        result = compute_max_fdp(acclimatised_input(
            report_time="02:00z",
            current_location_timezone="Asia/Dubai",
            previous_acclimatised_timezone="Asia/Dubai",
            has_split_duty=True,
            split_duty_break_hours=4.0,
            split_duty_break_start="22:00",
            split_duty_accommodation=SplitDutyAccommodation.ACCOMMODATION,
        ))
        assert result.max_fdp == 13.0
        assert "split_duty" not in result.adjustments
        assert result.explanations[-1].startswith("Split duty extension: none")

    def test_break_without_flag_ignored(self):
        result = compute_max_fdp(acclimatised_input(split_duty_break_hours=4.0))
        assert result.max_fdp == 13.0

    def test_not_combinable_with_extended_fdp(self):
        result = compute_max_fdp(acclimatised_input(
            report_time="07:00",
            extended_fdp_used=True,
            has_split_duty=True,
            split_duty_break_hours=4.0,
        ))
        assert result.max_fdp == 14.0
        assert "Split duty extension cannot be combined with an extended FDP" in result.warnings


# ============================================================================
# LATEST BLOCK TIMES
# ============================================================================

class TestLatestBlockTimes:

    def test_on_blocks(self):
        assert latest_on_blocks_time("06:00", 13.0) == "19:00"
        assert latest_on_blocks_time("06:00z", 13.0, discretion_hours=2.0) == "21:00"

    def test_on_blocks_wraps_midnight(self):
        assert latest_on_blocks_time("20:00", 13.0) == "09:00"

    def test_off_blocks(self):
        assert latest_off_blocks_time("06:00", 13.0, 2.0) == "17:00"
        assert latest_off_blocks_time("06:00", 13.0, 2.5, discretion_hours=2.0) == "18:30"

    def test_unparseable_report_returned_unchanged(self):
        assert latest_on_blocks_time("later", 13.0) == "later"

    def test_available_discretion(self):
        calc_input = acclimatised_input()
        assert available_discretion(calc_input, compute_max_fdp(calc_input)) == 2.0

        used = acclimatised_input(commander_discretion_used=True)
        assert available_discretion(used, compute_max_fdp(used)) == 0.0

        extended = acclimatised_input(report_time="07:00", extended_fdp_used=True)
        assert available_discretion(extended, compute_max_fdp(extended)) == 1.0


# ============================================================================
# STANDBY
# ============================================================================

class TestStandby:

    def test_airport_standby_over_threshold(self):
        """6h airport standby -> 2h over the 4h threshold"""
        result = compute_max_fdp(acclimatised_input(
            standby_type=StandbyType.AIRPORT,
            standby_start_time="00:00",
        ))
        assert result.adjustments["standby"] == -2.0
        assert result.max_fdp == 11.0

    def test_airport_standby_within_threshold(self):
        result = compute_max_fdp(acclimatised_input(
            standby_type=StandbyType.AIRPORT,
            standby_start_time="03:00",
        ))
        assert "standby" not in result.adjustments
        assert result.max_fdp == 13.0

    def test_home_standby_with_inflight_rest(self):
        """10h home standby, threshold 8h with in-flight rest -> -2h"""
        result = compute_max_fdp(acclimatised_input(
            inflight_rest_facility=RestFacilityClass.CLASS_1,
            additional_crew=1,
            standby_type=StandbyType.HOME,
            standby_start_time="20:00",
        ))
        assert result.adjustments["standby"] == -2.0
        assert result.max_fdp == 14.0

    def test_home_standby_standard_threshold(self):
        result = compute_max_fdp(acclimatised_input(
            standby_type=StandbyType.HOME,
            standby_start_time="20:00",
        ))
        assert result.adjustments["standby"] == -4.0
        assert result.max_fdp == 9.0

    def test_home_standby_split_duty(self):
        result = compute_max_fdp(acclimatised_input(
            standby_type=StandbyType.HOME,
            standby_start_time="20:00",
            has_split_duty=True,
        ))
        assert result.max_fdp == 11.0

    def test_home_standby_within_threshold(self):
        result = compute_max_fdp(acclimatised_input(
            standby_type=StandbyType.HOME,
            standby_start_time="01:00",
        ))
        assert result.max_fdp == 13.0

    def test_start_time_without_type_ignored(self):
        result = compute_max_fdp(acclimatised_input(standby_start_time="20:00"))
        assert result.max_fdp == 13.0

    def test_standby_never_increases_value(self):
        """Compare the accumulator with and without the standby step"""
        without_standby = RegulatoryFDPCalculator(steps=FDP_PIPELINE[:-1])
        with_standby = RegulatoryFDPCalculator()
        for start in ("00:00", "02:00", "04:00", "18:00", "22:00"):
            for standby_type in StandbyType:
                calc_input = acclimatised_input(standby_type=standby_type, standby_start_time=start)
                before = without_standby.run_steps(calc_input).value
                after = with_standby.run_steps(calc_input).value
                assert after <= before


# ============================================================================
# FLOOR & AUDIT TRAIL
# ============================================================================

class TestFloorAndAuditTrail:

    def test_floor_applied_after_large_reduction(self):
        """8 sectors unknown (9h) minus 10h airport standby"""
        result = compute_max_fdp(make_input(
            sectors=8,
            standby_type=StandbyType.AIRPORT,
            standby_start_time="16:00",
        ))
        assert result.base_fdp == -1.0
        assert result.max_fdp == 9.0
        assert result.explanations[-1] == "Regulatory minimum FDP applied: 9h"

    def test_floor_invariant(self):
        for sectors in range(1, 13):
            for report in ("00:00", "05:30", "13:45", "17:00"):
                for standby_type in (None, StandbyType.AIRPORT, StandbyType.HOME):
                    result = compute_max_fdp(make_input(
                        report_time=report,
                        sectors=sectors,
                        standby_type=standby_type,
                        standby_start_time="08:00",
                        delayed_reporting_notifications=("23:00",),
                    ))
                    assert result.max_fdp >= 9.0

    def test_unparseable_report_time(self):
        result = compute_max_fdp(acclimatised_input(report_time="later"))
        assert result.max_fdp >= 9.0

    def test_step_order(self):
        assert [step.__name__ for step in FDP_PIPELINE] == [
            "step_acclimatisation",
            "step_base_fdp",
            "step_rostered_extension",
            "step_extended_fdp",
            "step_split_duty",
            "step_inflight_rest",
            "step_delayed_reporting",
            "step_commanders_discretion",
            "step_standby",
        ]

    def test_explanations_in_step_order(self):
        result = compute_max_fdp(acclimatised_input(
            commander_discretion_used=True,
            standby_type=StandbyType.AIRPORT,
            standby_start_time="00:00",
        ))
        assert result.explanations[0].startswith("Acclimatisation state: B")
        assert result.explanations[1].startswith("Base FDP: 13h")
        assert result.explanations[2] == "Commander's discretion: +2h"
        assert result.explanations[3] == "Standby adjustment: -2h"
        assert result.max_fdp == 13.0

    def test_violations_always_empty(self):
        assert compute_max_fdp(make_input(sectors=12)).violations == ()

    def test_result_is_immutable(self):
        result = compute_max_fdp(make_input())
        with pytest.raises(FrozenInstanceError):
            result.max_fdp = 20.0

    def test_adjustments_are_read_only(self):
        result = compute_max_fdp(acclimatised_input(commander_discretion_used=True))
        with pytest.raises(TypeError):
            result.adjustments["commanders_discretion"] = 5.0
        assert result.adjustments["commanders_discretion"] == 2.0

    def test_input_reuse_is_deterministic(self):
        calc_input = acclimatised_input(commander_discretion_used=True)
        assert compute_max_fdp(calc_input) == compute_max_fdp(replace(calc_input))

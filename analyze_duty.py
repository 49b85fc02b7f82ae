#!/usr/bin/env python3
"""
Duty Analyzer - Command Line Interface
======================================

Maximum FDP for a single duty, with the step by step audit trail, and an
optional daily compliance check when the actual duty time is known.

Example:
    ftl-analyze --report 06:00z --sectors 2 --home-base LHR --location LHR \\
        --elapsed 24 --commanders-discretion
"""

from typing import List, Optional
import argparse
import logging
import sys

from models.data_models import (
    FDPCalculationInput, PilotType, RestFacilityClass, SplitDutyAccommodation, StandbyType
)
from core.parameters import EngineConfig
from core.fdp_calculator import (
    available_discretion, compute_max_fdp, latest_off_blocks_time, latest_on_blocks_time
)
from core.compliance import FTLComplianceValidator
from core.time_utils import format_hours_and_minutes, parse_time


def _time_arg(value: str) -> str:
    if parse_time(value) is None:
        raise argparse.ArgumentTypeError(f"invalid time '{value}', expected HH:MM")
    return value


def _rest_class_arg(value: str) -> RestFacilityClass:
    facility = RestFacilityClass.from_value(value)
    if facility is None:
        raise argparse.ArgumentTypeError(f"invalid rest facility class '{value}'")
    return facility


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ftl-analyze",
        description="UK CAA maximum FDP and compliance for a single duty",
    )
    parser.add_argument("--report", required=True, type=_time_arg,
                        help="Report time, HH:MM UTC")
    parser.add_argument("--sectors", required=True, type=int, help="Number of sectors")
    parser.add_argument("--home-base", required=True,
                        help="Home base (acclimatised) time zone or airport code")
    parser.add_argument("--location", required=True,
                        help="Current departure time zone or airport code")

    accl = parser.add_argument_group("acclimatisation")
    accl.add_argument("--last-homebase-report", type=_time_arg,
                      help="Last report time at home base, HH:MM UTC")
    accl.add_argument("--elapsed", type=float,
                      help="Hours since last report at home base (overrides --last-homebase-report)")

    ext = parser.add_argument_group("extensions")
    ext.add_argument("--rest-class", type=_rest_class_arg,
                     help="In-flight rest facility: class_1, class_2, class_3 or none")
    ext.add_argument("--additional-crew", type=int, default=0)
    ext.add_argument("--flight-time", type=float, action="append", dest="flight_times",
                     help="Sector flight time in hours (repeat per sector)")
    ext.add_argument("--delayed-report", type=_time_arg, action="append", dest="delayed_reports",
                     help="Delayed report notification time (repeatable)")
    ext.add_argument("--rostered-extension", action="store_true")
    ext.add_argument("--extended-fdp", action="store_true",
                     help="Planned extension of the maximum daily FDP (Table 4)")
    ext.add_argument("--commanders-discretion", action="store_true")

    standby = parser.add_argument_group("standby")
    standby.add_argument("--standby-type", choices=[s.value for s in StandbyType])
    standby.add_argument("--standby-start", type=_time_arg)
    standby.add_argument("--split-duty", action="store_true")

    split = parser.add_argument_group("split duty")
    split.add_argument("--split-duty-break", type=float, default=0.0,
                       help="Break on the ground in hours (implies --split-duty)")
    split.add_argument("--split-duty-break-start", type=_time_arg,
                       help="Break start, HH:MM UTC")
    split.add_argument("--split-duty-accommodation", choices=[a.value for a in SplitDutyAccommodation],
                       default=SplitDutyAccommodation.SUITABLE.value)

    parser.add_argument("--block-time", type=float,
                        help="Planned block time in hours; prints the latest off blocks time")

    compliance = parser.add_argument_group("compliance")
    compliance.add_argument("--duty-end", type=_time_arg, help="Duty end time, HH:MM UTC")
    compliance.add_argument("--duty-time", type=float,
                            help="Actual duty hours; enables the compliance check")
    compliance.add_argument("--pilot-type", choices=[p.value for p in PilotType],
                            default=PilotType.MULTI_PILOT.value)

    parser.add_argument("--conservative", action="store_true",
                        help="Use conservative advisory thresholds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def build_input(args: argparse.Namespace) -> FDPCalculationInput:
    return FDPCalculationInput(
        report_time=args.report,
        sectors=args.sectors,
        current_location_timezone=args.location,
        previous_acclimatised_timezone=args.home_base,
        duty_end_time=args.duty_end or "",
        last_homebase_report_time=args.last_homebase_report,
        inflight_rest_facility=args.rest_class,
        additional_crew=args.additional_crew,
        delayed_reporting_notifications=tuple(args.delayed_reports) if args.delayed_reports else None,
        rostered_extension_used=args.rostered_extension,
        commander_discretion_used=args.commanders_discretion,
        standby_start_time=args.standby_start,
        standby_type=StandbyType(args.standby_type) if args.standby_type else None,
        flight_times=tuple(args.flight_times) if args.flight_times else None,
        pre_calculated_elapsed_time=args.elapsed,
        has_split_duty=args.split_duty or args.split_duty_break > 0,
        split_duty_break_hours=args.split_duty_break,
        split_duty_break_start=args.split_duty_break_start,
        split_duty_accommodation=SplitDutyAccommodation(args.split_duty_accommodation),
        extended_fdp_used=args.extended_fdp,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = EngineConfig.conservative_config() if args.conservative else EngineConfig.default_caa_config()

    calc_input = build_input(args)
    result = compute_max_fdp(calc_input, config)
    discretion = available_discretion(calc_input, result, config)

    print("=" * 70)
    print("UK CAA FTL - Maximum Flight Duty Period")
    print("=" * 70)
    print()
    print(f"  Report:          {args.report} ({args.sectors} sectors)")
    print(f"  Acclimatisation: {result.acclimatisation_state.value} - "
          f"{result.acclimatisation_state.description}")
    print(f"  Maximum FDP:     {format_hours_and_minutes(result.max_fdp)}")
    print(f"  Latest on blocks:  {latest_on_blocks_time(args.report, result.max_fdp)}")
    if args.block_time is not None:
        print(f"  Latest off blocks: "
              f"{latest_off_blocks_time(args.report, result.max_fdp, args.block_time)}")
    if discretion > 0:
        print(f"  With discretion (+{format_hours_and_minutes(discretion)}):")
        print(f"    Latest on blocks:  {latest_on_blocks_time(args.report, result.max_fdp, discretion)}")
        if args.block_time is not None:
            print(f"    Latest off blocks: "
                  f"{latest_off_blocks_time(args.report, result.max_fdp, args.block_time, discretion)}")
    print()

    print("Calculation:")
    for line in result.explanations:
        print(f"  - {line}")
    print()

    if result.warnings:
        print("Warnings:")
        for warning in result.warnings:
            print(f"  ! {warning}")
        print()

    if args.duty_time is not None:
        compliance = FTLComplianceValidator(config).check_compliance(
            duty_time=args.duty_time,
            flight_time=sum(args.flight_times or ()),
            pilot_type=PilotType(args.pilot_type),
            standby_type=StandbyType(args.standby_type) if args.standby_type else None,
            standby_start_time=args.standby_start,
            duty_end_time=args.duty_end,
        )
        print("=" * 70)
        print("COMPLIANCE")
        print("=" * 70)
        print()
        print(f"  Compliant:       {'YES' if compliance.is_compliant else 'NO'}")
        print(f"  Duty time:       {format_hours_and_minutes(compliance.duty_time)}")
        print(f"  Required rest:   {format_hours_and_minutes(compliance.required_rest)}")
        if compliance.next_duty_available:
            print(f"  Next duty from:  {compliance.next_duty_available}")
        for violation in compliance.violations:
            print(f"  x {violation}")
        for warning in compliance.warnings:
            print(f"  ! {warning}")
        if args.duty_time > result.max_fdp:
            print(f"  x Duty time exceeds maximum FDP of {format_hours_and_minutes(result.max_fdp)}")
        print()

    print("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())

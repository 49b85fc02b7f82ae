"""
Core FTL Engine Components
==========================

Main exports for the UK CAA Flight Time Limitation compliance engine.
"""

from core.parameters import (
    UKCAALimits,
    FDPAdjustmentParameters,
    DiscretionParameters,
    FatigueThresholds,
    AnalysisThresholds,
    EngineConfig
)

from core.acclimatisation import AcclimatisationCalculator, reference_timezone
from core.fdp_calculator import (
    FDP_PIPELINE,
    PipelineState,
    RegulatoryFDPCalculator,
    compute_max_fdp,
    discretion_extension,
    available_discretion,
    latest_on_blocks_time,
    latest_off_blocks_time
)
from core.standby import StandbyCalculator
from core.split_duty import SplitDutyCalculator
from core.inflight_rest import (
    lookup_max_fdp,
    available_rest_time_options,
    format_rest_time,
    max_fdp_display
)

from core.usage import UsageAggregator, DutyUsage, consecutive_duty_days
from core.fatigue_risk import FatigueRiskAnalyzer
from core.discretion import CommanderDiscretionAdvisor
from core.analysis_service import analyze_usage_and_fatigue

from core.compliance import FTLComplianceValidator

__all__ = [
    # Parameters
    'UKCAALimits',
    'FDPAdjustmentParameters',
    'DiscretionParameters',
    'FatigueThresholds',
    'AnalysisThresholds',
    'EngineConfig',
    # Maximum FDP
    'AcclimatisationCalculator',
    'reference_timezone',
    'FDP_PIPELINE',
    'PipelineState',
    'RegulatoryFDPCalculator',
    'compute_max_fdp',
    'discretion_extension',
    'available_discretion',
    'latest_on_blocks_time',
    'latest_off_blocks_time',
    'StandbyCalculator',
    'SplitDutyCalculator',
    # In-flight rest
    'lookup_max_fdp',
    'available_rest_time_options',
    'format_rest_time',
    'max_fdp_display',
    # Usage / fatigue / discretion
    'UsageAggregator',
    'DutyUsage',
    'consecutive_duty_days',
    'FatigueRiskAnalyzer',
    'CommanderDiscretionAdvisor',
    'analyze_usage_and_fatigue',
    # Compliance
    'FTLComplianceValidator',
]

"""
Two-vehicle DSRC scenario: configuration, driver and report
"""

from scenario.config import ScenarioConfig
from scenario.dsrc import DsrcSimulation, SimulationResult, run_scenario, SENDER, RECEIVER
from scenario.report import render_report, build_table

__all__ = [
    "ScenarioConfig",
    "DsrcSimulation",
    "SimulationResult",
    "run_scenario",
    "render_report",
    "build_table",
    "SENDER",
    "RECEIVER",
]

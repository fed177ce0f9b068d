"""
Command line entry point

    python -m scenario [--config scenario.json] [--tx-power -50] [--debug]
"""

import argparse
import logging
import sys
from dataclasses import replace

from rich.console import Console
from rich.logging import RichHandler

from core import SimulationError
from scenario.config import ScenarioConfig
from scenario.dsrc import run_scenario
from scenario.report import render_report


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="scenario", description="two-vehicle DSRC link simulation")
    parser.add_argument("--config", help="JSON file with ScenarioConfig fields")
    parser.add_argument("--tx-power", type=float, help="transmit power (dBm)")
    parser.add_argument("--distance", type=float, help="initial separation (m)")
    parser.add_argument("--interval", type=float, help="beacon interval (s)")
    parser.add_argument("--packet-size", type=int, help="beacon size (bytes)")
    parser.add_argument("--debug", action="store_true", help="log every transmission")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ScenarioConfig:
    config = ScenarioConfig.from_json(args.config) if args.config else ScenarioConfig()
    overrides = {}
    if args.tx_power is not None:
        overrides["tx_power_dbm"] = args.tx_power
    if args.interval is not None:
        overrides["interval"] = args.interval
    if args.packet_size is not None:
        overrides["packet_size"] = args.packet_size
    if overrides:
        config = replace(config, **overrides)
    if args.distance is not None:
        config = config.with_distance(args.distance)
    return config


def main(argv=None) -> int:
    args = parse_args(argv)
    console = Console()
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    try:
        config = build_config(args)
        result = run_scenario(config, debug=args.debug)
    except (ValueError, OSError, SimulationError) as e:
        console.print(f"[bold red]error:[/bold red] {e}")
        return 1
    render_report(result, console)
    return 0


if __name__ == "__main__":
    sys.exit(main())

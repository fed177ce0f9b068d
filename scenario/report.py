"""
Console report of a finished run
"""

import math
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from scenario.dsrc import SimulationResult


def _fmt(value: float, fmt: str, unit: str = "") -> str:
    if math.isnan(value):
        return "n/a"
    return f"{value:{fmt}}{unit}"


def build_table(result: SimulationResult) -> Table:
    table = Table(title="=== Simulation Results ===", box=box.SIMPLE_HEAVY)
    table.add_column("Flow ID", justify="right")
    table.add_column("Src -> Dst:Port")
    table.add_column("Tx Packets", justify="right")
    table.add_column("Rx Packets", justify="right")
    table.add_column("Dropped", justify="right")
    table.add_column("Delivery Ratio", justify="right")
    table.add_column("Average Delay", justify="right")
    table.add_column("Throughput", justify="right")

    for s in result.summaries:
        table.add_row(
            str(s.flow_id),
            f"{s.src} -> {s.dst}:{s.port}",
            str(s.tx_packets),
            str(s.rx_packets),
            str(s.dropped_packets),
            _fmt(s.delivery_ratio_pct, ".1f", "%"),
            _fmt(s.avg_delay * 1e9, ".1f", " ns") if s.rx_packets else "n/a",
            _fmt(s.throughput_kbps, ".2f", " kbps"),
            style=None if s.rx_packets else "red",
        )
    return table


def render_report(result: SimulationResult, console: Optional[Console] = None):
    console = console or Console()
    if not result.summaries:
        console.print("[yellow]No flows were observed.[/yellow]")
        return
    console.print(build_table(result))
    for s in result.summaries:
        if s.rx_packets == 0:
            console.print(f"[bold red]WARNING:[/bold red] flow {s.flow_id}: No packets received!")
    console.print(f"Observation window: {result.duration_s:g} s, events processed: {result.events_processed}")

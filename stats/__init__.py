"""
Flow Statistics Module
"""

from stats.flow_monitor import FlowClassifier, FlowRecord, FlowSummary, FlowStatsCollector

__all__ = [
    "FlowClassifier",
    "FlowRecord",
    "FlowSummary",
    "FlowStatsCollector",
]

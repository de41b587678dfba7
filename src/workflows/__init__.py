"""
Workflows module - Report pipeline orchestration.
"""
from workflows.base import ReportPipeline
from workflows.aggregator import TrendAggregator

__all__ = [
    "ReportPipeline",
    "TrendAggregator",
]

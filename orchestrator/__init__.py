"""
Figure Orchestrator Package.

The orchestrator computes the random walk figures of Sutton (1988) from a
YAML configuration, collects their results and generates reports.

Key modules:
- config: Figure and orchestrator configuration dataclasses
- runner: ExperimentRunner for computing figures
- metrics: MetricsCollector for storing figure results
- report: ReportGenerator for creating reports
- observability: RunObserver for status logging
"""

from orchestrator.config import FigureConfig, OrchestratorConfig
from orchestrator.runner import ExperimentRunner
from orchestrator.metrics import FigureResult, MetricsCollector
from orchestrator.report import ReportGenerator
from orchestrator.observability import RunObserver

__all__ = [
    "FigureConfig",
    "OrchestratorConfig",
    "ExperimentRunner",
    "FigureResult",
    "MetricsCollector",
    "ReportGenerator",
    "RunObserver",
]

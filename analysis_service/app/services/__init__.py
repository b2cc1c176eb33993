"""Services layer - Business logic orchestration."""

from .collaborators import (
    FileDiscovery,
    FileAnalyzer,
    SimulatedFileDiscovery,
    SimulatedFileAnalyzer,
    PATTERN_CATALOGUE,
)
from .orchestrator import AnalysisOrchestrator, build_orchestrator

__all__ = [
    "FileDiscovery",
    "FileAnalyzer",
    "SimulatedFileDiscovery",
    "SimulatedFileAnalyzer",
    "PATTERN_CATALOGUE",
    "AnalysisOrchestrator",
    "build_orchestrator",
]

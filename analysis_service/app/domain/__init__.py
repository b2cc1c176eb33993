from .models import (
    JobStatus, TERMINAL_STATUSES,
    RepositoryRef, FileRef, FileMetrics,
    AnalysisJob, AnalysisSummary,
)

from .errors import (
    AnalysisServiceError,
    DiscoveryError, TaskError,
    PoolClosedError, PoolSaturatedError,
    JobCancelledError,
)

from .aggregation import (
    aggregate_metrics, average_method_length, collect_patterns
)

__all__ = [
    "JobStatus", "TERMINAL_STATUSES",
    "RepositoryRef", "FileRef", "FileMetrics",
    "AnalysisJob", "AnalysisSummary",
    "AnalysisServiceError",
    "DiscoveryError", "TaskError",
    "PoolClosedError", "PoolSaturatedError",
    "JobCancelledError",
    "aggregate_metrics", "average_method_length", "collect_patterns",
]

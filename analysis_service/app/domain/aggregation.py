"""
Reduction of per-file metrics into a job summary.

The summary is computed once, after every task of the job has resolved.
`average_method_length` is the arithmetic mean of the per-file ratios
(loc / methods), not the ratio of the totals.
"""

from typing import Iterable, List, Optional, Sequence

from .models import AnalysisSummary, FileMetrics, JobStatus


def average_method_length(metrics: Sequence[FileMetrics]) -> float:
    """Mean over files of `lines_of_code / method_count`; 0.0 when empty."""
    if not metrics:
        return 0.0
    return sum(m.method_length for m in metrics) / len(metrics)


def collect_patterns(metrics: Iterable[FileMetrics]) -> List[str]:
    """Union of detected patterns, in first-seen order."""
    seen: List[str] = []
    for m in metrics:
        for pattern in m.patterns:
            if pattern not in seen:
                seen.append(pattern)
    return seen


def aggregate_metrics(
    metrics: Sequence[FileMetrics],
    *,
    status: JobStatus = JobStatus.COMPLETED,
    execution_time_ms: int = 0,
    threads_used: int = 0,
    issues: Optional[List[str]] = None,
) -> AnalysisSummary:
    """
    Build the AnalysisSummary for a finished batch.

    Args:
        metrics: Successful results in submission order
        status: Terminal status of the job
        execution_time_ms: Elapsed wall-clock time
        threads_used: Effective concurrency of the job
        issues: Problems found while running the job

    Returns:
        AnalysisSummary with exact totals over `metrics`
    """
    return AnalysisSummary(
        status=status,
        total_files=len(metrics),
        lines_of_code=sum(m.lines_of_code for m in metrics),
        cyclomatic_complexity=sum(m.cyclomatic_complexity for m in metrics),
        average_method_length=average_method_length(metrics),
        patterns=collect_patterns(metrics),
        issues=list(issues or []),
        execution_time_ms=execution_time_ms,
        threads_used=threads_used,
    )

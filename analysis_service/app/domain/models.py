"""
Domain models for a repository analysis job.

Defines the immutable inputs and outputs of the per-file analysis tasks and
the mutable job record owned by the orchestrator for the lifetime of a
single request. Nothing here is persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Tuple
import uuid


class JobStatus(str, Enum):
    """Lifecycle states of an analysis job."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED})

_ALLOWED_TRANSITIONS = {
    JobStatus.PENDING: {JobStatus.RUNNING, JobStatus.FAILED, JobStatus.CANCELLED},
    JobStatus.RUNNING: TERMINAL_STATUSES,
}


@dataclass(frozen=True)
class RepositoryRef:
    """
    Identifies the repository to analyze.

    Attributes:
        url: Repository location (any non-blank identifier)
        branch: Branch to analyze
    """
    url: str
    branch: str = "main"

    def __post_init__(self):
        if not self.url or not self.url.strip():
            raise ValueError("Repository URL must not be blank")


@dataclass(frozen=True)
class FileRef:
    """Opaque reference to one unit of work (a file path)."""
    path: str

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class FileMetrics:
    """
    Metrics produced by analyzing a single file.

    Attributes:
        file_ref: File these metrics belong to
        lines_of_code: Non-negative line count
        cyclomatic_complexity: Non-negative complexity
        method_count: Number of methods, at least 1
        patterns: Design patterns detected in the file
    """
    file_ref: FileRef
    lines_of_code: int
    cyclomatic_complexity: int
    method_count: int
    patterns: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.lines_of_code < 0:
            raise ValueError(f"lines_of_code must be >= 0, got {self.lines_of_code}")
        if self.cyclomatic_complexity < 0:
            raise ValueError(
                f"cyclomatic_complexity must be >= 0, got {self.cyclomatic_complexity}"
            )
        if self.method_count < 1:
            raise ValueError(f"method_count must be >= 1, got {self.method_count}")

    @property
    def method_length(self) -> float:
        """Average method length of this file (loc / methods)."""
        return self.lines_of_code / self.method_count


@dataclass(frozen=True)
class AnalysisSummary:
    """Aggregate of every FileMetrics of a job."""
    status: JobStatus
    total_files: int
    lines_of_code: int
    cyclomatic_complexity: int
    average_method_length: float
    patterns: List[str] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)
    execution_time_ms: int = 0
    threads_used: int = 0


@dataclass
class AnalysisJob:
    """
    One invocation of the analysis pipeline.

    Owned by the orchestrator while the request is served; discarded once the
    summary is returned.
    """
    repository: RepositoryRef
    concurrency_level: int
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    files: List[FileRef] = field(default_factory=list)
    status: JobStatus = JobStatus.PENDING

    def __post_init__(self):
        if self.concurrency_level < 1:
            raise ValueError(
                f"concurrency_level must be >= 1, got {self.concurrency_level}"
            )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def transition(self, new_status: JobStatus) -> None:
        """Move the job to `new_status`, rejecting illegal transitions."""
        allowed = _ALLOWED_TRANSITIONS.get(self.status, frozenset())
        if new_status not in allowed:
            raise ValueError(
                f"Illegal job transition {self.status.value} -> {new_status.value}"
            )
        self.status = new_status

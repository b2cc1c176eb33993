"""
Shared fixtures for the analysis service tests.

Provides deterministic collaborators (static discovery, scripted analyzer
with optional delays/failures and overlap instrumentation) and a worker
pool that is always shut down after the test.
"""

import threading
import time
from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from app.domain.errors import DiscoveryError
from app.domain.models import FileMetrics, FileRef, RepositoryRef
from app.infrastructure.worker_pool import WorkerPool
from app.services.orchestrator import AnalysisOrchestrator


class StaticDiscovery:
    """Returns a fixed list of paths, or raises when `error` is set."""

    def __init__(self, paths: Iterable[str] = (), error: Optional[Exception] = None):
        self.paths = list(paths)
        self.error = error
        self.calls = 0

    async def discover_files(self, repository: RepositoryRef) -> List[FileRef]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return [FileRef(p) for p in self.paths]


class ScriptedAnalyzer:
    """
    Analyzer driven by a table `path -> (loc, cc, methods)`.

    Records call order, completion order and the maximum number of
    concurrently running analyses.
    """

    def __init__(
        self,
        table: Dict[str, Tuple[int, int, int]],
        delays: Optional[Dict[str, float]] = None,
        default_delay: float = 0.0,
        failing: Iterable[str] = (),
        patterns: Optional[Dict[str, Tuple[str, ...]]] = None,
    ):
        self.table = table
        self.delays = delays or {}
        self.default_delay = default_delay
        self.failing = set(failing)
        self.patterns = patterns or {}
        self._lock = threading.Lock()
        self._active = 0
        self.max_active = 0
        self.started: List[str] = []
        self.finished: List[str] = []

    def analyze_file(self, file_ref: FileRef) -> FileMetrics:
        with self._lock:
            self._active += 1
            self.max_active = max(self.max_active, self._active)
            self.started.append(file_ref.path)
        try:
            time.sleep(self.delays.get(file_ref.path, self.default_delay))
            if file_ref.path in self.failing:
                raise RuntimeError(f"boom while parsing {file_ref.path}")
            loc, cc, methods = self.table[file_ref.path]
            return FileMetrics(
                file_ref=file_ref,
                lines_of_code=loc,
                cyclomatic_complexity=cc,
                method_count=methods,
                patterns=self.patterns.get(file_ref.path, ()),
            )
        finally:
            with self._lock:
                self._active -= 1
                self.finished.append(file_ref.path)


EXAMPLE_TABLE = {
    "A.java": (100, 5, 10),
    "B.java": (200, 8, 20),
    "C.java": (50, 2, 5),
}


@pytest.fixture
def pool():
    """Four-thread pool, shut down after the test."""
    p = WorkerPool(max_workers=4)
    yield p
    p.shutdown()


@pytest.fixture
def repository():
    return RepositoryRef(url="repo-A")


@pytest.fixture
def example_discovery():
    return StaticDiscovery(EXAMPLE_TABLE.keys())


@pytest.fixture
def example_analyzer():
    return ScriptedAnalyzer(EXAMPLE_TABLE)


@pytest.fixture
def make_orchestrator(pool):
    """Factory for orchestrators bound to the shared test pool."""

    def _factory(discovery, analyzer, job_timeout=None, worker_pool=None):
        return AnalysisOrchestrator(
            pool=worker_pool or pool,
            discovery=discovery,
            analyzer=analyzer,
            job_timeout=job_timeout,
        )

    return _factory


@pytest.fixture
def failing_discovery():
    return StaticDiscovery(error=DiscoveryError("git server unavailable"))

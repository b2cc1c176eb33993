# ============================================================================
# analysis_service/app/infrastructure/__init__.py
# ============================================================================
"""
Infrastructure layer - Execution resources (thread pool)
"""

from .worker_pool import WorkerPool, BatchResult, TaskOutcome

__all__ = ["WorkerPool", "BatchResult", "TaskOutcome"]

"""
orchestrator.py - Orquestación de un trabajo de análisis
========================================================

Responsabilidad: coordinar un `AnalysisJob` de principio a fin.

Flujo:
1. Descubrimiento de archivos (colaborador externo)
2. Fan-out: una tarea por archivo en el `WorkerPool` compartido
3. Fan-in: espera asíncrona de todo el lote
4. Agregación determinista de las métricas
"""

import asyncio
import logging
import time
from concurrent.futures import Future
from dataclasses import replace
from typing import List, Optional

from ..domain.aggregation import aggregate_metrics
from ..domain.errors import (
    AnalysisServiceError,
    DiscoveryError,
    JobCancelledError,
    PoolClosedError,
    PoolSaturatedError,
    TaskError,
)
from ..domain.models import (
    AnalysisJob,
    AnalysisSummary,
    FileMetrics,
    FileRef,
    JobStatus,
    RepositoryRef,
)
from ..infrastructure.worker_pool import BatchResult, WorkerPool
from .collaborators import FileAnalyzer, FileDiscovery


logger = logging.getLogger(__name__)


def _attach_job(error: AnalysisServiceError, job: AnalysisJob) -> None:
    """Anota en el error el trabajo interrumpido y su estado terminal."""
    error.job_id = job.job_id
    error.status = job.status


class AnalysisOrchestrator:
    """
    Ejecuta trabajos de análisis sobre un pool de hilos inyectado.

    El pool es compartido por todos los trabajos de esta instancia; cada
    trabajo limita sus propias tareas en vuelo a `concurrency_level`.

    Args:
        pool: Pool de hilos compartido (el orquestador no lo cierra).
        discovery: Colaborador de descubrimiento de archivos.
        analyzer: Colaborador de análisis por archivo.
        job_timeout: Plazo opcional en segundos para un trabajo completo.
    """

    def __init__(
        self,
        pool: WorkerPool,
        discovery: FileDiscovery,
        analyzer: FileAnalyzer,
        job_timeout: Optional[float] = None,
    ):
        self.pool = pool
        self.discovery = discovery
        self.analyzer = analyzer
        self.job_timeout = job_timeout

    async def run(self, repository: RepositoryRef, concurrency_level: int) -> AnalysisSummary:
        """
        Analiza un repositorio y devuelve el resumen agregado.

        Args:
            repository: Repositorio a analizar
            concurrency_level: Máximo de tareas del trabajo en vuelo a la vez

        Returns:
            AnalysisSummary con estado `completed` o `failed` (fallos parciales)

        Raises:
            DiscoveryError: Si no se pudieron enumerar los archivos
            JobCancelledError: Si venció el plazo del trabajo
            PoolSaturatedError: Si el pool rechazó tareas por backpressure
            PoolClosedError: Si el pool ya fue cerrado
        """
        job = AnalysisJob(repository=repository, concurrency_level=concurrency_level)
        logger.info(
            "Starting job %s for %s@%s with concurrency %d",
            job.job_id,
            repository.url,
            repository.branch,
            concurrency_level,
        )

        try:
            if self.job_timeout is None:
                return await self._execute(job)
            return await asyncio.wait_for(self._execute(job), timeout=self.job_timeout)
        except asyncio.TimeoutError as e:
            logger.warning("Job %s exceeded %.1fs deadline", job.job_id, self.job_timeout)
            raise JobCancelledError(
                f"Job {job.job_id} exceeded its deadline",
                job_id=job.job_id,
                status=job.status,
            ) from e

    async def _execute(self, job: AnalysisJob) -> AnalysisSummary:
        start = time.perf_counter()
        job.transition(JobStatus.RUNNING)

        # PASO 1: Descubrimiento
        try:
            job.files = list(await self.discovery.discover_files(job.repository))
        except asyncio.CancelledError:
            job.transition(JobStatus.CANCELLED)
            raise
        except DiscoveryError as e:
            job.transition(JobStatus.FAILED)
            logger.error("Discovery failed for job %s", job.job_id, exc_info=True)
            _attach_job(e, job)
            raise
        except Exception as e:
            job.transition(JobStatus.FAILED)
            logger.error("Discovery failed for job %s", job.job_id, exc_info=True)
            raise DiscoveryError(
                f"Could not discover files in {job.repository.url}",
                job_id=job.job_id,
                status=job.status,
            ) from e

        # PASO 2 y 3: Fan-out / fan-in
        handles: List["Future[FileMetrics]"] = []
        try:
            await self._submit_all(job, handles)
            batch = await self.pool.await_all(handles)
        except asyncio.CancelledError:
            for handle in handles:
                handle.cancel()
            job.transition(JobStatus.CANCELLED)
            logger.warning("Job %s cancelled with %d tasks submitted", job.job_id, len(handles))
            raise
        except (PoolSaturatedError, PoolClosedError) as e:
            # no dejar trabajo huérfano: esperar lo ya enviado antes de fallar
            await self.pool.await_all(handles)
            job.transition(JobStatus.FAILED)
            logger.error("Submission rejected for job %s: %s", job.job_id, e)
            _attach_job(e, job)
            raise

        # PASO 4: Agregación
        summary = self._summarize(job, batch, start)
        logger.info(
            "Analysis completed in %dms (job %s, %d files, status %s)",
            summary.execution_time_ms,
            job.job_id,
            summary.total_files,
            summary.status.value,
        )
        return summary

    async def _submit_all(self, job: AnalysisJob, handles: List["Future[FileMetrics]"]) -> None:
        """Envía una tarea por archivo sin superar `concurrency_level` en vuelo."""
        loop = asyncio.get_running_loop()
        limiter = asyncio.Semaphore(job.concurrency_level)

        def release(_future: Future) -> None:
            if loop.is_closed():
                return
            try:
                loop.call_soon_threadsafe(limiter.release)
            except RuntimeError:
                # el loop se cerró tras la comprobación; ya nadie espera el cupo
                return

        for file_ref in job.files:
            await limiter.acquire()
            try:
                handle = self.pool.submit(self._analyze_one, file_ref)
            except BaseException:
                limiter.release()
                raise
            handle.add_done_callback(release)
            handles.append(handle)

    def _analyze_one(self, file_ref: FileRef) -> FileMetrics:
        try:
            return self.analyzer.analyze_file(file_ref)
        except Exception as e:
            logger.error("Analysis failed for %s: %s", file_ref.path, e)
            raise TaskError(file_ref, e) from e

    def _summarize(self, job: AnalysisJob, batch: BatchResult[FileMetrics], start: float) -> AnalysisSummary:
        issues: List[str] = []
        for index, error in batch.errors:
            file_ref = error.file_ref if isinstance(error, TaskError) else job.files[index]
            issues.append(f"{file_ref.path}: analysis failed")

        status = JobStatus.COMPLETED if batch.succeeded else JobStatus.FAILED
        job.transition(status)

        summary = aggregate_metrics(
            batch.results,
            status=status,
            threads_used=min(job.concurrency_level, self.pool.max_workers),
            issues=issues,
        )
        # el tiempo se mide hasta después de agregar
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        return replace(summary, execution_time_ms=elapsed_ms)


def build_orchestrator(pool: WorkerPool, config=None) -> AnalysisOrchestrator:
    """
    Construye el orquestador con los colaboradores indicados en la configuración.

    Args:
        pool: Pool compartido ya creado
        config: Instancia de `Settings` (por defecto, la global)
    """
    from ..clients.discovery_client import HttpFileDiscovery
    from ..config import settings as default_settings
    from .collaborators import SimulatedFileAnalyzer, SimulatedFileDiscovery

    config = config or default_settings

    if config.DISCOVERY_MODE == "http":
        discovery: FileDiscovery = HttpFileDiscovery(
            config.DISCOVERY_URL, timeout=config.DISCOVERY_TIMEOUT
        )
    else:
        discovery = SimulatedFileDiscovery(
            min_files=config.SIMULATION_MIN_FILES,
            max_files=config.SIMULATION_MAX_FILES,
            seed=config.SIMULATION_SEED,
        )

    analyzer = SimulatedFileAnalyzer(
        min_delay_ms=config.SIMULATION_MIN_DELAY_MS,
        max_delay_ms=config.SIMULATION_MAX_DELAY_MS,
        seed=config.SIMULATION_SEED,
    )
    return AnalysisOrchestrator(
        pool=pool,
        discovery=discovery,
        analyzer=analyzer,
        job_timeout=config.JOB_TIMEOUT_SECONDS,
    )

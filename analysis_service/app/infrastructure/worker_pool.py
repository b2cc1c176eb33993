"""
worker_pool.py - Pool acotado de hilos para el análisis de archivos
===================================================================

Un único `WorkerPool` se crea al arrancar el servicio y se comparte entre
todos los trabajos. Los hilos se reutilizan entre envíos; el único estado
sincronizado es la contabilidad de tareas en cola / en ejecución.

Flujo típico (desde una corrutina):

    handles = [pool.submit(analyze, ref) for ref in files]
    batch = await pool.await_all(handles)

`await_all` espera en el event loop, por lo que nunca ocupa un hilo del
pool mientras aguarda.
"""

import asyncio
import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

from ..domain.errors import PoolClosedError, PoolSaturatedError


logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# RESULTADOS DE UN LOTE
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TaskOutcome(Generic[T]):
    """
    Resultado de una tarea del lote.

    Atributos:
        index: Posición de la tarea en el orden de envío.
        value: Valor devuelto (None si falló).
        error: Excepción lanzada por la tarea, si la hubo.
    """
    index: int
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BatchResult(Generic[T]):
    """Resultados de un lote completo, siempre en orden de envío."""
    outcomes: List[TaskOutcome[T]]

    @property
    def results(self) -> List[T]:
        """Valores de las tareas exitosas, en orden de envío."""
        return [o.value for o in self.outcomes if o.ok]

    @property
    def errors(self) -> List[Tuple[int, BaseException]]:
        return [(o.index, o.error) for o in self.outcomes if not o.ok]

    @property
    def first_error(self) -> Optional[BaseException]:
        """Primer error según el orden de envío (no el de finalización)."""
        for o in self.outcomes:
            if not o.ok:
                return o.error
        return None

    @property
    def succeeded(self) -> bool:
        return all(o.ok for o in self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)


# ---------------------------------------------------------------------------
# POOL
# ---------------------------------------------------------------------------

class WorkerPool:
    """
    Pool de hilos con límite fijo de ejecución concurrente y cola opcionalmente acotada.

    Args:
        max_workers: Número de hilos (por defecto, los núcleos disponibles).
        max_queue_size: Tareas que pueden esperar en cola además de las que
            se ejecutan. 0 significa cola ilimitada.
        thread_name_prefix: Prefijo de los nombres de hilo (útil en logs).
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        max_queue_size: int = 0,
        thread_name_prefix: str = "analysis-worker",
    ):
        if max_workers is None:
            max_workers = os.cpu_count() or 1
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        if max_queue_size < 0:
            raise ValueError(f"max_queue_size must be >= 0, got {max_queue_size}")

        self.max_workers = max_workers
        self.max_queue_size = max_queue_size
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix,
        )
        self._lock = threading.Lock()
        self._outstanding = 0
        self._running = 0
        self._peak_running = 0
        self._closed = False

        logger.info(
            "Initialized worker pool with %d threads (queue: %s)",
            max_workers,
            max_queue_size or "unbounded",
        )

    # -- estado ---------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> int:
        """Tareas aceptadas que aún no terminaron (en cola + en ejecución)."""
        with self._lock:
            return self._outstanding

    @property
    def running(self) -> int:
        with self._lock:
            return self._running

    @property
    def peak_running(self) -> int:
        """Máximo de tareas ejecutándose simultáneamente desde la creación."""
        with self._lock:
            return self._peak_running

    # -- envío ----------------------------------------------------------------

    def submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Future[T]":
        """
        Encola una tarea y devuelve su handle.

        Raises:
            PoolClosedError: Si el pool ya fue cerrado.
            PoolSaturatedError: Si la cola acotada está llena.
        """
        with self._lock:
            if self._closed:
                raise PoolClosedError("Worker pool has been shut down")
            if self.max_queue_size and self._outstanding >= self.max_workers + self.max_queue_size:
                raise PoolSaturatedError(
                    f"Worker pool saturated ({self._outstanding} tasks outstanding)"
                )
            self._outstanding += 1

        try:
            future = self._executor.submit(self._run, fn, args, kwargs)
        except RuntimeError as e:
            # shutdown concurrente entre la verificación y el envío
            with self._lock:
                self._outstanding -= 1
            raise PoolClosedError("Worker pool has been shut down") from e

        future.add_done_callback(self._on_done)
        return future

    def _run(self, fn: Callable[..., T], args: tuple, kwargs: dict) -> T:
        with self._lock:
            self._running += 1
            if self._running > self._peak_running:
                self._peak_running = self._running
        try:
            return fn(*args, **kwargs)
        finally:
            with self._lock:
                self._running -= 1
                self._outstanding -= 1

    def _on_done(self, future: Future) -> None:
        # las tareas ejecutadas liberan su cupo en `_run`; aquí solo las canceladas antes de empezar
        if future.cancelled():
            with self._lock:
                self._outstanding -= 1

    # -- espera ---------------------------------------------------------------

    async def await_all(self, handles: Sequence["Future[T]"]) -> BatchResult[T]:
        """
        Espera a que todos los handles terminen y devuelve sus resultados en orden de envío.

        Un fallo no cancela a las demás tareas. Si la corrutina que espera es
        cancelada, se cancelan las tareas que aún no empezaron; las que ya
        están en ejecución terminan en segundo plano.
        """
        if not handles:
            return BatchResult(outcomes=[])

        wrapped = [asyncio.wrap_future(h) for h in handles]
        try:
            raw = await asyncio.gather(*wrapped, return_exceptions=True)
        except asyncio.CancelledError:
            cancelled = sum(1 for h in handles if h.cancel())
            logger.warning(
                "Batch wait cancelled; %d of %d pending tasks cancelled",
                cancelled,
                len(handles),
            )
            raise

        outcomes: List[TaskOutcome[T]] = []
        for index, item in enumerate(raw):
            if isinstance(item, BaseException):
                outcomes.append(TaskOutcome(index=index, error=item))
            else:
                outcomes.append(TaskOutcome(index=index, value=item))
        return BatchResult(outcomes=outcomes)

    # -- cierre ---------------------------------------------------------------

    def shutdown(self, wait: bool = True) -> None:
        """Deja de aceptar trabajo y espera a las tareas en curso. Idempotente."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        logger.info("Shutting down worker pool")
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown(wait=True)

"""
collaborators.py - Capacidades enchufables de descubrimiento y análisis
=======================================================================

El orquestador solo depende de dos contratos:

- `FileDiscovery.discover_files(repo)`: enumera los archivos del repositorio
  (asíncrono, puede hablar con servicios externos).
- `FileAnalyzer.analyze_file(ref)`: calcula las métricas de un archivo
  (síncrono, se ejecuta en un hilo del pool).

Las implementaciones simuladas generan valores pseudoaleatorios con
esperas artificiales; sirven como sustituto hasta integrar un motor de
análisis estático real.
"""

import logging
import random
import threading
import time
from typing import List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from ..domain.models import FileMetrics, FileRef, RepositoryRef


logger = logging.getLogger(__name__)

PATTERN_CATALOGUE: Tuple[str, ...] = ("singleton", "factory", "strategy", "observer", "builder")


# ---------------------------------------------------------------------------
# CONTRATOS
# ---------------------------------------------------------------------------

@runtime_checkable
class FileDiscovery(Protocol):
    """Enumera los archivos a analizar de un repositorio."""

    async def discover_files(self, repository: RepositoryRef) -> List[FileRef]:
        ...


@runtime_checkable
class FileAnalyzer(Protocol):
    """Calcula las métricas de un archivo. Debe ser seguro entre hilos."""

    def analyze_file(self, file_ref: FileRef) -> FileMetrics:
        ...


# ---------------------------------------------------------------------------
# IMPLEMENTACIONES SIMULADAS
# ---------------------------------------------------------------------------

def _rng(seed: Optional[int], key: str) -> random.Random:
    # Con semilla, cada clave obtiene una secuencia reproducible e independiente
    # del hilo que la consuma.
    if seed is None:
        return random.Random()
    return random.Random(f"{seed}:{key}")


class SimulatedFileDiscovery:
    """
    Descubrimiento simulado: genera entre `min_files` y `max_files` archivos
    con nombres `File_<i>.java`.
    """

    def __init__(self, min_files: int = 50, max_files: int = 149, seed: Optional[int] = None):
        if min_files < 0 or max_files < min_files:
            raise ValueError(f"Invalid file range [{min_files}, {max_files}]")
        self.min_files = min_files
        self.max_files = max_files
        self.seed = seed

    async def discover_files(self, repository: RepositoryRef) -> List[FileRef]:
        rng = _rng(self.seed, f"{repository.url}@{repository.branch}")
        count = rng.randint(self.min_files, self.max_files)
        files = [FileRef(f"File_{i}.java") for i in range(count)]
        logger.info("Discovered %d files for analysis in %s", count, repository.url)
        return files


class SimulatedFileAnalyzer:
    """
    Análisis simulado de un archivo.

    Duerme entre `min_delay_ms` y `max_delay_ms` para imitar trabajo real y
    devuelve métricas aleatorias dentro de los rangos de referencia:
    loc 50-549, complejidad 1-20, métodos 1-30.
    """

    def __init__(
        self,
        min_delay_ms: int = 10,
        max_delay_ms: int = 59,
        seed: Optional[int] = None,
        patterns: Sequence[str] = PATTERN_CATALOGUE,
    ):
        if min_delay_ms < 0 or max_delay_ms < min_delay_ms:
            raise ValueError(f"Invalid delay range [{min_delay_ms}, {max_delay_ms}]")
        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max_delay_ms
        self.seed = seed
        self.patterns = tuple(patterns)

    def analyze_file(self, file_ref: FileRef) -> FileMetrics:
        logger.debug(
            "Analyzing file: %s on thread: %s",
            file_ref.path,
            threading.current_thread().name,
        )
        rng = _rng(self.seed, file_ref.path)

        delay_ms = rng.randint(self.min_delay_ms, self.max_delay_ms)
        if delay_ms:
            time.sleep(delay_ms / 1000)

        detected = tuple(p for p in self.patterns if rng.random() < 0.2)
        return FileMetrics(
            file_ref=file_ref,
            lines_of_code=rng.randint(50, 549),
            cyclomatic_complexity=rng.randint(1, 20),
            method_count=rng.randint(1, 30),
            patterns=detected,
        )

"""
errors.py - Jerarquía de excepciones del servicio de análisis
=============================================================

Todas las excepciones del dominio heredan de `AnalysisServiceError`, de modo
que la capa HTTP puede traducirlas a códigos de estado sin conocer detalles
internos de cada componente.
"""

from typing import Optional

from .models import FileRef, JobStatus


class AnalysisServiceError(Exception):
    """
    Error base del servicio de análisis.

    Atributos:
        job_id: Trabajo afectado, si el error interrumpió uno.
        status: Estado terminal en que quedó ese trabajo.
    """

    def __init__(self, *args, job_id: Optional[str] = None, status: Optional[JobStatus] = None):
        super().__init__(*args)
        self.job_id = job_id
        self.status = status


class DiscoveryError(AnalysisServiceError):
    """El colaborador de descubrimiento no pudo enumerar los archivos."""


class TaskError(AnalysisServiceError):
    """
    Falla del análisis de un archivo individual.

    Atributos:
        file_ref: Archivo cuyo análisis falló.
        cause: Excepción original lanzada por el analizador.
    """

    def __init__(self, file_ref: FileRef, cause: Optional[BaseException] = None):
        super().__init__(f"Analysis failed for {file_ref.path}")
        self.file_ref = file_ref
        self.cause = cause


class PoolClosedError(AnalysisServiceError):
    """Se intentó enviar trabajo a un pool ya cerrado."""


class PoolSaturatedError(AnalysisServiceError):
    """La cola del pool alcanzó su capacidad máxima (backpressure)."""


class JobCancelledError(AnalysisServiceError):
    """El trabajo fue abortado por el llamador o por vencimiento del plazo."""

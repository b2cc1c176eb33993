"""
Esquemas Pydantic para la API del servicio de análisis.

Define las estructuras públicas de entrada/salida del endpoint
`/api/v1/analyze`. Los nombres en JSON usan camelCase
(`repositoryUrl`, `concurrencyLevel`, ...) mediante alias.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .domain.models import AnalysisSummary, RepositoryRef


# ---------------------------------------------------------------------------
# PETICIÓN
# ---------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    """
    Petición de análisis de un repositorio.

    Atributos:
        repository_url: Identificador del repositorio (obligatorio, no vacío).
        branch: Rama a analizar.
        concurrency_level: Máximo de archivos analizados en paralelo (>= 1).
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "repositoryUrl": "https://github.com/user/repo",
                "branch": "main",
                "concurrencyLevel": 4,
            }
        },
    )

    repository_url: str = Field(..., description="Repository URL is required")
    branch: str = Field("main", description="Rama a analizar.")
    concurrency_level: int = Field(
        4, ge=1, description="Concurrency level must be at least 1"
    )

    @field_validator("repository_url")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Repository URL is required")
        return v.strip()

    @field_validator("branch")
    @classmethod
    def default_branch(cls, v: str) -> str:
        return v.strip() or "main"

    def to_repository(self) -> RepositoryRef:
        return RepositoryRef(url=self.repository_url, branch=self.branch)


# ---------------------------------------------------------------------------
# RESPUESTA
# ---------------------------------------------------------------------------

class AnalyzeResponse(BaseModel):
    """Resumen agregado devuelto al cliente."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: str
    total_files: int
    lines_of_code: int
    cyclomatic_complexity: int
    average_method_length: float
    patterns: List[str] = Field(default_factory=list)
    issues: List[str] = Field(default_factory=list)
    execution_time_ms: int
    threads_used: int

    @classmethod
    def from_summary(cls, summary: AnalysisSummary) -> "AnalyzeResponse":
        return cls(
            status=summary.status.value,
            total_files=summary.total_files,
            lines_of_code=summary.lines_of_code,
            cyclomatic_complexity=summary.cyclomatic_complexity,
            average_method_length=summary.average_method_length,
            patterns=list(summary.patterns),
            issues=list(summary.issues),
            execution_time_ms=summary.execution_time_ms,
            threads_used=summary.threads_used,
        )

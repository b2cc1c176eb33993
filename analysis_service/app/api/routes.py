"""Endpoints del servicio de análisis concurrente.

Responsabilidad única: manejar HTTP requests/responses. La lógica de
negocio vive en `services.orchestrator`.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse

from ..schemas import AnalyzeRequest, AnalyzeResponse
from ..services.orchestrator import AnalysisOrchestrator


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1",
    tags=["analysis"],
    responses={
        400: {"description": "Invalid request"},
        500: {"description": "Internal server error (empty body)"},
    },
)


def get_orchestrator(request: Request) -> AnalysisOrchestrator:
    """Dependencia: orquestador compartido creado en el arranque de la app."""
    return request.app.state.orchestrator


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_code(
    req: AnalyzeRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """
    Analiza un repositorio y devuelve las métricas agregadas.

    Un trabajo con fallos parciales responde 200 con `status="failed"` y los
    archivos afectados en `issues`. Cualquier otro error responde 500 sin
    cuerpo; el detalle solo queda en los logs.
    """
    logger.info("Received analysis request for repository: %s", req.repository_url)

    try:
        summary = await orchestrator.run(req.to_repository(), req.concurrency_level)
    except Exception:
        logger.error("Analysis failed", exc_info=True)
        return Response(status_code=500)

    return AnalyzeResponse.from_summary(summary)


@router.get("/health", response_class=PlainTextResponse)
async def health() -> str:
    """Verificación de estado del servicio."""
    return "Service is healthy"

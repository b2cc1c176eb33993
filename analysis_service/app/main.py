"""
Punto de entrada principal del servicio de análisis concurrente.

Expone una función `create_app` para facilitar el testeo y la integración
con servidores ASGI (Uvicorn, Gunicorn, etc.), y una instancia global
`app` usada por defecto cuando se ejecuta directamente con Uvicorn.

El pool de hilos compartido se crea al arrancar la aplicación y se cierra
al apagarla; el orquestador lo recibe por inyección.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from .api.routes import router
from .config import Settings, settings
from .infrastructure.worker_pool import WorkerPool
from .services.orchestrator import AnalysisOrchestrator, build_orchestrator


logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
    )


def create_app(
    orchestrator: Optional[AnalysisOrchestrator] = None,
    config: Optional[Settings] = None,
) -> FastAPI:
    """
    Crea y configura la aplicación FastAPI.

    - Configura logging y CORS.
    - Registra las rutas `/api/v1`.
    - Traduce errores de validación a HTTP 400.
    - Si no se inyecta un orquestador, crea el pool compartido en el arranque
      y lo cierra al apagar la aplicación.

    Args:
        orchestrator: Orquestador ya construido (pruebas, integraciones).
        config: Configuración alternativa a la global.

    Returns:
        Instancia configurada de `FastAPI`.
    """
    config = config or settings
    _configure_logging(config.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "orchestrator", None) is not None:
            yield
            return

        pool = WorkerPool(
            max_workers=config.WORKER_POOL_SIZE,
            max_queue_size=config.WORKER_QUEUE_SIZE,
        )
        app.state.orchestrator = build_orchestrator(pool, config)
        logger.info(
            "%s started (env=%s, discovery=%s)",
            config.APP_NAME,
            config.ENV,
            config.DISCOVERY_MODE,
        )
        try:
            yield
        finally:
            app.state.orchestrator = None
            # la espera del trabajo en curso ocurre fuera del event loop
            await asyncio.to_thread(pool.shutdown, True)

    app = FastAPI(
        title="Concurrent Analysis Service",
        description="Métricas de calidad de código calculadas en paralelo sobre un pool acotado",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator

    # --- CORS Configuration ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info("Rejected invalid request on %s", request.url.path)
        return JSONResponse(
            status_code=400,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    # --- Rutas del servicio ---
    app.include_router(router)

    return app


# Instancia por defecto utilizada por Uvicorn
app = create_app()


def run() -> None:
    """Arranca el servicio con Uvicorn usando la configuración global."""
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()

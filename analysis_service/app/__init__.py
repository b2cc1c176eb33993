"""Concurrent Analysis Service Application.

Microservicio que calcula métricas agregadas de calidad de código
analizando los archivos de un repositorio en paralelo.

Arquitectura:
    - api/: FastAPI endpoints (HTTP layer)
    - domain/: Modelos del dominio, errores y agregación
    - infrastructure/: Pool de hilos acotado
    - services/: Orquestación y colaboradores (descubrimiento / análisis)
    - clients/: Clientes HTTP de servicios externos
    - schemas.py: Request/Response models (Pydantic)
    - config.py: Configuración (pydantic-settings)

Usage:
    from app.main import app
    # uvicorn app.main:app --reload
"""

__version__ = "1.0.0"

"""
Módulo de configuración del servicio de análisis concurrente.

Utiliza `pydantic-settings` para cargar la configuración desde variables
de entorno y/o archivos `.env`. Todos los atributos definidos en `Settings`
pueden sobreescribirse mediante variables de entorno con el mismo nombre.

Ejemplo de `.env`:
    APP_NAME=analysis_service
    ENV=prod
    LOG_LEVEL=INFO
    WORKER_POOL_SIZE=8
    WORKER_QUEUE_SIZE=1000
    JOB_TIMEOUT_SECONDS=30
    DISCOVERY_MODE=http
    DISCOVERY_URL=http://localhost:8010
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuración central del servicio.

    Atributos principales:
        APP_NAME / ENV:
            Nombre de la aplicación y entorno de ejecución.
        HOST / PORT / LOG_LEVEL:
            Parámetros del servidor ASGI y nivel de logging.
        WORKER_POOL_SIZE:
            Hilos del pool compartido. None = núcleos disponibles.
        WORKER_QUEUE_SIZE:
            Tareas que pueden esperar en cola. 0 = cola ilimitada.
        JOB_TIMEOUT_SECONDS:
            Plazo máximo de un trabajo completo. None = sin plazo.
        DISCOVERY_MODE:
            "simulated" (archivos generados) o "http" (servicio externo).
        DISCOVERY_URL / DISCOVERY_TIMEOUT:
            Servicio de descubrimiento cuando DISCOVERY_MODE=http.
        SIMULATION_*:
            Parámetros de los colaboradores simulados.
    """

    APP_NAME: str = "analysis_service"
    ENV: str = "dev"

    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"

    # Pool de hilos compartido
    WORKER_POOL_SIZE: Optional[int] = Field(default=None, ge=1)
    WORKER_QUEUE_SIZE: int = Field(default=0, ge=0)
    JOB_TIMEOUT_SECONDS: Optional[float] = Field(default=None, gt=0)

    # Descubrimiento de archivos
    DISCOVERY_MODE: Literal["simulated", "http"] = "simulated"
    DISCOVERY_URL: str = "http://localhost:8010"
    DISCOVERY_TIMEOUT: float = 30.0

    # Colaboradores simulados
    SIMULATION_SEED: Optional[int] = None
    SIMULATION_MIN_FILES: int = Field(default=50, ge=0)
    SIMULATION_MAX_FILES: int = Field(default=149, ge=0)
    SIMULATION_MIN_DELAY_MS: int = Field(default=10, ge=0)
    SIMULATION_MAX_DELAY_MS: int = Field(default=59, ge=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        extra="ignore",
    )


# Instancia única de configuración usada en el resto de la app
settings = Settings()

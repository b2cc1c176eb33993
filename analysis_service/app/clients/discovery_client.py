"""Cliente HTTP del servicio externo de descubrimiento de archivos.

Contrato esperado del servicio:
    POST {DISCOVERY_URL}/discover  {"repositoryUrl": ..., "branch": ...}
    -> 200 {"files": ["src/a.py", "src/b.py", ...]}
"""

import logging
from typing import List, Optional

import httpx

from ..domain.errors import DiscoveryError
from ..domain.models import FileRef, RepositoryRef


logger = logging.getLogger(__name__)


class HttpFileDiscovery:
    """
    Descubrimiento de archivos delegado a un microservicio.

    Cualquier error de transporte, de estado HTTP o de formato se traduce
    a `DiscoveryError`. No se reintenta: los reintentos son responsabilidad
    del servicio remoto o del llamador.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: URL base del servicio de descubrimiento
            timeout: Tiempo máximo de espera en segundos
            transport: Transporte httpx alternativo (pruebas)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def discover_files(self, repository: RepositoryRef) -> List[FileRef]:
        payload = {"repositoryUrl": repository.url, "branch": repository.branch}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(f"{self.base_url}/discover", json=payload)
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as e:
                raise DiscoveryError(
                    f"Discovery service returned {e.response.status_code}"
                ) from e
            except httpx.HTTPError as e:
                raise DiscoveryError(f"Discovery service unreachable: {e}") from e
            except ValueError as e:
                raise DiscoveryError("Discovery service returned invalid JSON") from e

        files = data.get("files") if isinstance(data, dict) else None
        if not isinstance(files, list) or not all(isinstance(f, str) and f for f in files):
            raise DiscoveryError("Discovery response must contain a 'files' list of paths")

        logger.info("Discovered %d files for analysis in %s", len(files), repository.url)
        return [FileRef(path) for path in files]

"""
errors.py — Excepciones del cliente de GitHub.

Tres familias de fallas:
    - PreconditionError: falta algo local (SHA, PR, token...). Se lanza
      ANTES de hacer cualquier request.
    - GitHubAPIError: GitHub respondió con un status no-2xx, o no se
      pudo llegar al servidor. Nunca se reintenta.
    - Errores de parseo de YAML: NO son excepciones, se guardan como
      ConfigStatus.MALFORMED en el resultado de la carga.
"""

from __future__ import annotations


class SitekeeperError(RuntimeError):
    """Base de todos los errores de sitekeeper."""


class ConfigurationError(SitekeeperError):
    """Configuración incompleta (ej: no hay token de GitHub)."""


class PreconditionError(SitekeeperError):
    """Una precondición local falló; no se hizo ninguna llamada HTTP."""


class UnknownAssetTypeError(SitekeeperError, ValueError):
    """Categoría de asset que no existe (ni images ni documents)."""


class GitHubAPIError(SitekeeperError):
    """
    GitHub (o el servicio de clonado) respondió con error.

    Campos:
        status: Código HTTP, o None si fue un error de conexión.
        method: Método HTTP del request.
        url: URL solicitada (sin el access_token).
        body: Cuerpo de la respuesta, si lo hubo.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        method: str = "",
        url: str = "",
        body: str = "",
    ):
        super().__init__(message)
        self.status = status
        self.method = method
        self.url = url
        self.body = body

    @property
    def is_conflict(self) -> bool:
        """True si GitHub rechazó la escritura por SHA desactualizado."""
        return self.status in (409, 422)


class PullRequestNotFoundError(SitekeeperError):
    """No hay un PR abierto cuyo head sea el branch de trabajo."""

"""
cloner.py — Crea un sitio nuevo a partir de un repo existente.

Tres pasos en serie; cualquiera que falle corta los siguientes:
    1. check_source → GET repos/<owner>/<repo>: ¿podemos leer el origen?
    2. create_repo  → POST user/repos u orgs/<org>/repos
    3. clone_repo   → POST <servicio>/v0/site/clone: el servicio de
                      clonado copia el contenido (no la API de GitHub)

Los datos se validan ANTES de cualquier request.

Uso:
    from sitekeeper.github.cloner import RepositoryCloner, CloneSource, CloneDestination
    cloner = RepositoryCloner(client, service_url="https://federalist.example.gov")
    cloner.clone(
        CloneSource(owner="18f", repository="federalist"),
        CloneDestination(repository="mi-sitio", organization="18f"),
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from sitekeeper.github.client import GitHubClient
from sitekeeper.github.errors import PreconditionError
from sitekeeper.github.series import Step, run_series
from sitekeeper.utils.logger import get_logger

logger = get_logger("sitekeeper.cloner")

CLONE_ENDPOINT = "/v0/site/clone"
DEFAULT_ENGINE = "jekyll"


@dataclass
class CloneSource:
    """Repo de origen."""
    owner: str = ""
    repository: str = ""


@dataclass
class CloneDestination:
    """
    Repo destino.

    Campos:
        repository: Nombre del repo nuevo (obligatorio)
        organization: Organización dueña; si falta, la cuenta del usuario
        branch: Branch a publicar (default: branch de trabajo del modelo)
        engine: Motor de build (default: jekyll)
    """
    repository: str = ""
    organization: str | None = None
    branch: str | None = None
    engine: str | None = None


def validate_clone_request(
    source: CloneSource | None,
    destination: CloneDestination | None,
) -> None:
    """
    Raises:
        PreconditionError: Si falta owner/repository del origen o el destino.
    """
    if not source or not source.owner or not source.repository:
        raise PreconditionError("Missing source or destination")
    if not destination or not destination.repository:
        raise PreconditionError("Missing source or destination")


class RepositoryCloner:
    """
    Clona un repo de GitHub usando el servicio de clonado.

    Args:
        client: Cliente de GitHub.
        service_url: Base del servicio de clonado.
        default_engine: Motor de build si el destino no trae uno.
        branch: Callable con el branch de trabajo (default del destino).
    """

    def __init__(
        self,
        client: GitHubClient,
        service_url: str = "",
        default_engine: str = DEFAULT_ENGINE,
        branch: Callable[[], str] | None = None,
    ):
        self._client = client
        self.service_url = service_url.rstrip("/")
        self.default_engine = default_engine
        self._branch = branch or (lambda: client.repo.branch)

    # ============================================================
    # Pasos individuales
    # ============================================================

    def check_source(self, source: CloneSource) -> Any:
        """Verifica acceso de lectura al repo de origen."""
        url = self._client.url(root=True, owner=source.owner, repository=source.repository)
        return self._client.get(url)

    def create_repo(self, destination: CloneDestination) -> Any:
        """Crea el repo destino en el usuario o en la organización."""
        route = f"orgs/{destination.organization}" if destination.organization else "user"
        url = self._client.url(route=route, method="repos")
        return self._client.post(url, json={"name": destination.repository})

    def clone_payload(self, source: CloneSource, destination: CloneDestination) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "sourceOwner": source.owner,
            "sourceRepo": source.repository,
            "destinationOrg": destination.organization,
            "destinationRepo": destination.repository,
            "destinationBranch": destination.branch or self._branch(),
            "engine": destination.engine or self.default_engine,
        }
        if not payload["destinationOrg"]:
            del payload["destinationOrg"]
        return payload

    def clone_repo(self, source: CloneSource, destination: CloneDestination) -> Any:
        """Pide al servicio de clonado que copie el contenido."""
        url = f"{self.service_url}{CLONE_ENDPOINT}"
        return self._client.request(
            "POST",
            url,
            json=self.clone_payload(source, destination),
            authenticated=False,
            accept="application/json",
        )

    # ============================================================
    # Serie completa
    # ============================================================

    def clone(
        self,
        source: CloneSource | None,
        destination: CloneDestination | None,
    ) -> list[Any]:
        """
        check_source → create_repo → clone_repo.

        Raises:
            PreconditionError: Datos incompletos (sin ningún request).
            GitHubAPIError: El primer paso que falle.
        """
        validate_clone_request(source, destination)

        destino = (
            f"{destination.organization}/{destination.repository}"
            if destination.organization else destination.repository
        )
        logger.info(f"Clonando {source.owner}/{source.repository} → {destino}")

        resultados = run_series([
            Step("check-source", lambda: self.check_source(source)),
            Step("create-repo", lambda: self.create_repo(destination)),
            Step("clone-repo", lambda: self.clone_repo(source, destination)),
        ], label="clone")

        logger.success(f"Sitio clonado: {destino}")
        return resultados

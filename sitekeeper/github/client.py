"""
client.py — Capa HTTP hacia la API REST de GitHub.

Dos responsabilidades:
    1. Construir URLs de la API (contents, refs, pulls, repos...)
    2. Ejecutar requests autenticados y traducir errores HTTP
       a GitHubAPIError

Formato de URL:
    https://api.github.com/<route>/<owner>/<repo>/contents/<path>?access_token=...&ref=...

    url(path="test.md")                  → repos/18f/federalist/contents/test.md
    url(root=True)                       → repos/18f/federalist
    url(root=True, path="git/refs")      → repos/18f/federalist/git/refs
    url(route="user", method="repos")    → user/repos
    url(route="orgs/18f", method="repos") → orgs/18f/repos

Todas las URLs llevan access_token y ref en el query string. Las
escrituras llevan además el header "Authorization: token <token>".

Uso:
    from sitekeeper.github.client import GitHubClient
    client = GitHubClient(token, RepositoryRef("18f", "federalist", "main"))
    data = client.get(client.url(path="_config.yml"))
"""

from __future__ import annotations

import threading
from typing import Any
from urllib.parse import urlencode

import requests

from sitekeeper.github.errors import ConfigurationError, GitHubAPIError
from sitekeeper.github.models import RepositoryRef
from sitekeeper.utils.logger import get_logger

logger = get_logger("sitekeeper.github.client")

DEFAULT_API_URL = "https://api.github.com"

GITHUB_ACCEPT = "application/vnd.github+json"

WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class GitHubClient:
    """
    Cliente mínimo de la API de GitHub.

    No reintenta ni cancela: cada request se ejecuta una vez y
    cualquier status fuera de 2xx se convierte en GitHubAPIError.

    Args:
        token: Token OAuth ya obtenido (obligatorio).
        repo: Repositorio y branch de trabajo.
        file: Archivo actual; se usa cuando url() no recibe path.
        api_url: Base de la API (GitHub Enterprise, tests).
        session: requests.Session a reutilizar (inyectable en tests).
            Si no se pasa, cada hilo usa su propia Session: la carga de
            config hace requests desde un ThreadPoolExecutor y requests
            no garantiza que una Session sea thread-safe.
        timeout: Timeout por request en segundos.
    """

    def __init__(
        self,
        token: str,
        repo: RepositoryRef,
        file: str | None = None,
        api_url: str = DEFAULT_API_URL,
        session: requests.Session | None = None,
        timeout: int = 30,
    ):
        if not token:
            raise ConfigurationError("Must provide Github OAuth token")

        self.token = token
        self.repo = repo
        self.file = file
        self.api_url = api_url.rstrip("/")
        self._session = session
        self._local = threading.local()
        self.timeout = timeout

    @property
    def session(self) -> requests.Session:
        """Session inyectada, o una por hilo."""
        if self._session is not None:
            return self._session
        if not hasattr(self._local, "session"):
            self._local.session = requests.Session()
        return self._local.session

    # ============================================================
    # URLs
    # ============================================================

    def url(
        self,
        path: str | None = None,
        root: bool = False,
        route: str = "repos",
        method: str | None = None,
        owner: str | None = None,
        repository: str | None = None,
        branch: str | None = None,
        params: dict[str, Any] | None = None,
    ) -> str:
        """
        Construye una URL de la API.

        Args:
            path: Ruta a agregar al final (archivo, "git/refs", "pulls"...).
            root: Apuntar a la raíz del repo en vez de /contents.
            route: Primer segmento ("repos", "user", "orgs/<org>").
            method: Segmento después de route (ej: "repos"); ignora owner/repo.
            owner: Dueño del repo (default: el del modelo).
            repository: Nombre del repo (default: el del modelo).
            branch: Valor de ?ref= (default: branch de trabajo).
            params: Parámetros extra; un valor None elimina el parámetro.

        Returns:
            URL completa con query string.
        """
        segmentos = [self.api_url, route]

        if method:
            segmentos.append(method)
        elif root:
            segmentos.extend([owner or self.repo.owner, repository or self.repo.name])
        else:
            segmentos.extend([
                owner or self.repo.owner,
                repository or self.repo.name,
                "contents",
            ])

        if path:
            segmentos.append(path)
        elif self.file and not method and not root:
            segmentos.append(self.file)

        query: dict[str, Any] = {
            "access_token": self.token,
            "ref": branch or self.repo.branch,
        }
        query.update(params or {})
        query = {k: v for k, v in query.items() if v is not None}

        return "/".join(segmentos) + "?" + urlencode(query)

    # ============================================================
    # Requests
    # ============================================================

    def request(
        self,
        method: str,
        url: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        authenticated: bool | None = None,
        accept: str = GITHUB_ACCEPT,
    ) -> Any:
        """
        Ejecuta un request y devuelve el JSON de la respuesta.

        Args:
            method: GET, POST, PUT, DELETE...
            url: URL completa (normalmente de url()).
            json: Cuerpo JSON para escrituras.
            params: Query params extra (ej: head= para listar PRs).
            authenticated: Forzar (o quitar) el header Authorization.
                Por defecto solo las escrituras lo llevan.
            accept: Header Accept (otro valor para servicios que no son GitHub).

        Returns:
            JSON parseado, o None si la respuesta no tiene cuerpo.

        Raises:
            GitHubAPIError: Status no-2xx o error de conexión.
        """
        method = method.upper()
        headers = {"Accept": accept}

        if authenticated is None:
            authenticated = method in WRITE_METHODS
        if authenticated:
            headers["Authorization"] = f"token {self.token}"
        if json is not None:
            headers["Content-Type"] = "application/json"

        url_log = self._redact(url)
        logger.debug(f"{method} {url_log}")

        try:
            resp = self.session.request(
                method,
                url,
                json=json,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GitHubAPIError(
                f"No se pudo conectar con GitHub: {e}",
                method=method,
                url=url_log,
            ) from e

        if not 200 <= resp.status_code < 300:
            raise GitHubAPIError(
                f"GitHub API error ({resp.status_code}) en {method} {url_log}",
                status=resp.status_code,
                method=method,
                url=url_log,
                body=resp.text or "",
            )

        return self._parse_body(resp)

    def get(self, url: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", url, params=params)

    def post(self, url: str, json: dict[str, Any] | None = None) -> Any:
        return self.request("POST", url, json=json)

    def put(self, url: str, json: dict[str, Any] | None = None) -> Any:
        return self.request("PUT", url, json=json)

    def delete(self, url: str) -> Any:
        return self.request("DELETE", url)

    # ============================================================
    # Utilidades
    # ============================================================

    @staticmethod
    def _parse_body(resp: requests.Response) -> Any:
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def _redact(self, url: str) -> str:
        """Quita el token de la URL antes de loggearla."""
        return url.replace(self.token, "***")

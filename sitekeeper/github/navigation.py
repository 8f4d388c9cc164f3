"""
navigation.py — Agrega páginas nuevas a _data/navbar.yml.

Cuando save() publica un archivo nuevo, la navegación del sitio gana
una entrada:

    assigned:
      - text: Mi página nueva
        href: pages/mi-pagina.md
        show_in_menu: false
        show_in_footer: false

Este commit va DIRECTO al branch default, sin draft ni PR. Antes de
escribir se vuelve a pedir navbar.yml al default para usar su SHA
actual, no el que se cargó al iniciar.
"""

from __future__ import annotations

import copy
import re
from typing import Any, Callable

import yaml

from sitekeeper.github.client import GitHubClient
from sitekeeper.github.config_files import SiteConfig
from sitekeeper.github.errors import PreconditionError
from sitekeeper.github.models import ConfigStatus
from sitekeeper.github.workflow import CommitOptions
from sitekeeper.utils.logger import get_logger

logger = get_logger("sitekeeper.navigation")

DEFAULT_NAVBAR_PATH = "_data/navbar.yml"
DEFAULT_NAV_MESSAGE = "Updating navigation"

_TITLE_RE = re.compile(r"title: (.+)")


def derive_title(content: str, path: str) -> str:
    """
    Título para la entrada de navegación.

    Usa la primera línea `title: ...` del contenido; si no hay,
    el segundo segmento de la ruta (`pages/about.md` → `about.md`),
    o "" si la ruta no tiene segundo segmento.
    """
    match = _TITLE_RE.search(content or "")
    if match:
        return match.group(1).strip()
    partes = path.split("/")
    return partes[1] if len(partes) > 1 else ""


def build_nav_entry(content: str, path: str) -> dict[str, Any]:
    return {
        "text": derive_title(content, path),
        "href": path,
        "show_in_menu": False,
        "show_in_footer": False,
    }


class NavigationUpdater:
    """
    Escribe la navegación actualizada en el branch default.

    Args:
        client: Cliente de GitHub.
        site_config: Provee la caché de archivos de configuración.
        commit: Función de commit del workflow (recibe CommitOptions).
        default_branch: Branch donde se escribe la navegación.
        navbar_path: Ruta del archivo de navegación.
        message: Mensaje del commit.
    """

    def __init__(
        self,
        client: GitHubClient,
        site_config: Callable[[], SiteConfig | None],
        commit: Callable[..., Any],
        default_branch: str,
        navbar_path: str = DEFAULT_NAVBAR_PATH,
        message: str = DEFAULT_NAV_MESSAGE,
    ):
        self._client = client
        self._site_config = site_config
        self._commit = commit
        self.default_branch = default_branch
        self.navbar_path = navbar_path
        self.message = message

    def fetch_current_sha(self) -> str | None:
        """SHA actual de navbar.yml en el branch default."""
        url = self._client.url(path=self.navbar_path, branch=self.default_branch)
        respuesta = self._client.get(url)
        return respuesta.get("sha") if isinstance(respuesta, dict) else None

    def update(self, path: str, content: str) -> Any:
        """
        Agrega `path` a la lista `assigned` y hace commit.

        Raises:
            PreconditionError: Si navbar.yml no se cargó como YAML válido.
            GitHubAPIError: Si falla el GET del SHA o el commit.
        """
        site_config = self._site_config()
        navbar = site_config[self.navbar_path] if site_config is not None else None
        if navbar is None or navbar.status is not ConfigStatus.PRESENT:
            raise PreconditionError(f"{self.navbar_path} no está disponible")

        nav = copy.deepcopy(navbar.yaml) if isinstance(navbar.yaml, dict) else {}
        if not isinstance(nav.get("assigned"), list):
            nav["assigned"] = []
        entrada = build_nav_entry(content, path)
        nav["assigned"].append(entrada)

        sha = self.fetch_current_sha()
        nuevo_yaml = yaml.safe_dump(nav, default_flow_style=False, sort_keys=False)

        respuesta = self._commit(CommitOptions(
            path=self.navbar_path,
            branch=self.default_branch,
            message=self.message,
            content=nuevo_yaml,
            sha=sha,
        ))

        navbar.yaml = nav
        navbar.decoded_content = nuevo_yaml
        logger.success(f"Navegación actualizada: {entrada['text']} → {path}")
        return respuesta

"""
config_files.py — Carga los archivos de configuración del sitio.

Al iniciar, el modelo necesita dos archivos del repo Jekyll:
    _config.yml       → defaults de front matter, layouts
    _data/navbar.yml  → navegación del sitio

Se piden en paralelo y se espera a que TODOS terminen (fan-out /
fan-in). Un archivo que falta o que trae YAML roto no tumba la
carga: queda marcado como ABSENT o MALFORMED y los demás siguen.

Cada hilo usa la Session de GitHubClient.session: una por hilo, salvo
que se haya inyectado una (tests), que entonces se comparte.

Uso:
    from sitekeeper.github.config_files import ConfigLoader
    loader = ConfigLoader(client, ["_config.yml", "_data/navbar.yml"])
    site_config = loader.fetch_all()
    site_config.get_layouts()  # ["default"]
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Sequence

import yaml

from sitekeeper.github.client import GitHubClient
from sitekeeper.github.errors import GitHubAPIError
from sitekeeper.github.models import ConfigFile, ConfigStatus
from sitekeeper.utils.encoding import decode_b64
from sitekeeper.utils.logger import get_logger

logger = get_logger("sitekeeper.config_files")

DEFAULT_CONFIG_FILES = ("_config.yml", "_data/navbar.yml")


def parse_config_payload(path: str, payload: Any) -> ConfigFile:
    """
    Convierte la respuesta de /contents/<path> en un ConfigFile.

    El contenido viene en base64; se decodifica y se parsea como YAML.
    Cualquier falla en esos dos pasos da MALFORMED.
    """
    if not isinstance(payload, dict) or "content" not in payload:
        return ConfigFile(path=path, status=ConfigStatus.MALFORMED)

    sha = payload.get("sha")
    try:
        decodificado = decode_b64(payload["content"])
        parseado = yaml.safe_load(decodificado)
    except (ValueError, yaml.YAMLError) as e:
        logger.warning(f"{path} no se pudo parsear: {e}")
        return ConfigFile(
            path=path, status=ConfigStatus.MALFORMED, sha=sha, raw=payload
        )

    return ConfigFile(
        path=path,
        status=ConfigStatus.PRESENT,
        yaml=parseado,
        decoded_content=decodificado,
        sha=sha,
        raw=payload,
    )


class SiteConfig:
    """
    Caché de los archivos de configuración, indexada por ruta.

    Solo lectura después de la carga; la navegación se vuelve a pedir
    a GitHub antes de cada actualización para obtener su SHA fresco.
    """

    def __init__(self, files: dict[str, ConfigFile]):
        self.files = files

    def __getitem__(self, path: str) -> ConfigFile:
        return self.files.get(path, ConfigFile(path=path, status=ConfigStatus.ABSENT))

    def __contains__(self, path: str) -> bool:
        return path in self.files

    def get_defaults(self, config_path: str = "_config.yml") -> str:
        """
        Devuelve el bloque de defaults con scope.path == "" como YAML.

        Si _config.yml no está, no tiene `defaults` o ninguno aplica a
        la raíz, devuelve un documento YAML vacío ("\\n").
        """
        config = self[config_path]
        datos = config.yaml if config.status is ConfigStatus.PRESENT else None
        if not isinstance(datos, dict):
            return "\n"

        defaults = [
            d for d in (datos.get("defaults") or [])
            if isinstance(d, dict)
            and isinstance(d.get("scope"), dict)
            and d["scope"].get("path") == ""
        ]
        if not defaults:
            return "\n"

        return yaml.safe_dump(defaults[0].get("values") or {}, default_flow_style=False)

    def get_layouts(self, config_path: str = "_config.yml") -> list[str]:
        """Layouts por defecto de la raíz; ["default"] si no hay."""
        defaults = yaml.safe_load(self.get_defaults(config_path)) or {}
        layout = defaults.get("layout") if isinstance(defaults, dict) else None
        if not layout:
            return ["default"]
        if isinstance(layout, list):
            return [str(l) for l in layout]
        return [str(layout)]


class ConfigLoader:
    """
    Pide los archivos de configuración en paralelo.

    Args:
        client: Cliente de GitHub.
        paths: Rutas a cargar (default: _config.yml y _data/navbar.yml).
    """

    def __init__(self, client: GitHubClient, paths: Sequence[str] = DEFAULT_CONFIG_FILES):
        self._client = client
        self._paths = list(paths)

    def fetch_one(self, path: str) -> ConfigFile:
        """Pide un archivo. Los errores HTTP dan ABSENT, no excepción."""
        try:
            payload = self._client.get(self._client.url(path=path))
        except GitHubAPIError as e:
            logger.warning(f"{path} no disponible ({e.status})")
            return ConfigFile(path=path, status=ConfigStatus.ABSENT)
        return parse_config_payload(path, payload)

    def fetch_all(self) -> SiteConfig:
        """
        Pide todos los archivos y espera a que terminen.

        Returns:
            SiteConfig con un ConfigFile por ruta.
        """
        if not self._paths:
            return SiteConfig({})

        with ThreadPoolExecutor(max_workers=len(self._paths)) as pool:
            resultados = list(pool.map(self.fetch_one, self._paths))

        files = {r.path: r for r in resultados}
        presentes = sum(1 for r in resultados if r.status is ConfigStatus.PRESENT)
        logger.info(f"Config cargada: {presentes}/{len(resultados)} archivos válidos")
        return SiteConfig(files)

"""
config.py — Carga y gestiona la configuración de sitekeeper.

Se encarga de:
1. Cargar config.yaml (repo, branches, servicio de clonado)
2. Cargar .env (secretos: el token de GitHub)
3. Resolver ${VARIABLES} de entorno dentro de config.yaml
4. Entregar todo como dataclasses

config.yaml se versiona; .env nunca.

Ejemplo de config.yaml:

    github:
      owner: 18f
      repo: federalist
      default_branch: main
      upload_root: uploads
    clone:
      service_url: ${CLONE_SERVICE_URL}
      engine: jekyll

Uso:
    from sitekeeper.config import load_config
    config = load_config()
    print(config.github.owner)
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv


# ============================================================
# Dataclasses de configuración
# ============================================================

@dataclass
class GitHubConfig:
    """Repositorio de trabajo y parámetros de la API."""
    api_url: str = "https://api.github.com"
    owner: str = ""
    repo: str = ""
    branch: str = ""
    default_branch: str = "main"
    upload_root: str = "uploads"
    timeout: int = 30


@dataclass
class CloneConfig:
    """Servicio externo que duplica el contenido de un repo."""
    service_url: str = "http://localhost:1337"
    engine: str = "jekyll"


@dataclass
class NavigationConfig:
    """Archivos de configuración del sitio que se cargan al iniciar."""
    site_config_path: str = "_config.yml"
    navbar_path: str = "_data/navbar.yml"
    commit_message: str = "Updating navigation"
    merge_message: str = "Merged via Federalist"
    draft_prefix: str = "_draft-"


@dataclass
class AppConfig:
    """Configuración completa de la aplicación."""
    github: GitHubConfig = field(default_factory=GitHubConfig)
    clone: CloneConfig = field(default_factory=CloneConfig)
    navigation: NavigationConfig = field(default_factory=NavigationConfig)

    # Valores del .env (no están en config.yaml)
    github_token: str = ""

    @property
    def working_branch(self) -> str:
        """Branch de trabajo; si no se configuró, el default."""
        return self.github.branch or self.github.default_branch


# ============================================================
# Funciones de carga
# ============================================================

def _resolve_env_vars(value: str) -> str:
    """
    Resuelve ${VARIABLE} con el valor del entorno.

    Si la variable no existe, el placeholder se deja intacto.
    """
    patron = re.compile(r"\$\{(\w+)\}")

    def reemplazar(match: re.Match) -> str:
        return os.environ.get(match.group(1), match.group(0))

    return patron.sub(reemplazar, value)


def _resolve_env_recursive(data: Any) -> Any:
    """Resuelve variables de entorno recursivamente en un dict/list."""
    if isinstance(data, str):
        return _resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_recursive(item) for item in data]
    return data


def _dict_to_dataclass(data: dict, cls: type) -> Any:
    """Convierte un diccionario a una dataclass, ignorando keys desconocidas."""
    campos_validos = {f.name for f in cls.__dataclass_fields__.values()}
    datos_filtrados = {k: v for k, v in (data or {}).items() if k in campos_validos}
    return cls(**datos_filtrados)


def _find_config_dir() -> Path:
    """Busca config.yaml desde el directorio actual hacia arriba."""
    current = Path.cwd()
    for parent in [current] + list(current.parents):
        if (parent / "config.yaml").exists():
            return parent
    return current


def load_config(config_path: Path | None = None) -> AppConfig:
    """
    Carga la configuración completa.

    Pasos:
    1. Carga .env para tener las variables de entorno disponibles
    2. Lee config.yaml (si no existe, usa valores por defecto)
    3. Resuelve ${VARIABLES}
    4. Convierte cada sección a su dataclass
    5. Agrega GITHUB_TOKEN del entorno

    Args:
        config_path: Ruta al config.yaml. Si es None, busca automáticamente.

    Returns:
        AppConfig lista para usar.
    """
    proyecto_dir = _find_config_dir()
    env_path = proyecto_dir / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    if config_path is None:
        config_path = proyecto_dir / "config.yaml"

    raw_config: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f) or {}

    config_resuelto = _resolve_env_recursive(raw_config)

    app_config = AppConfig(
        github=_dict_to_dataclass(config_resuelto.get("github", {}), GitHubConfig),
        clone=_dict_to_dataclass(config_resuelto.get("clone", {}), CloneConfig),
        navigation=_dict_to_dataclass(
            config_resuelto.get("navigation", {}), NavigationConfig
        ),
    )

    app_config.github_token = os.environ.get("GITHUB_TOKEN", "")

    return app_config
